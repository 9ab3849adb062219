import pytest

from idverify.core import validation
from idverify.core.validation import (
    check,
    check_date_of_birth,
    check_full_name,
    is_valid_identity_number,
    is_valid_mobile_number,
    is_valid_otp,
    is_valid_tax_id,
    sanitize_input,
)


@pytest.mark.parametrize("value", ["123456789012", "000000000000", "999999999999"])
def test_identity_number_accepts_twelve_digits(value):
    assert is_valid_identity_number(value)
    assert check("identityNumber", value) == ""


@pytest.mark.parametrize(
    "value",
    ["", "12345678901", "1234567890123", "12345678901a", "1234 5678 9012", " 123456789012", "١٢٣٤٥٦٧٨٩٠١٢", None],
)
def test_identity_number_rejects_everything_else(value):
    assert not is_valid_identity_number(value)
    assert check("identityNumber", value) == "Identity number must be exactly 12 digits"


@pytest.mark.parametrize("first", ["6", "7", "8", "9"])
def test_mobile_accepts_ten_digits_starting_six_to_nine(first):
    assert is_valid_mobile_number(first + "876543210")


@pytest.mark.parametrize(
    "value",
    ["5876543210", "0876543210", "987654321", "98765432101", "98765x3210", "+919876543210", ""],
)
def test_mobile_rejects_everything_else(value):
    assert not is_valid_mobile_number(value)
    assert "start with 6-9" in check("mobileNumber", value)


@pytest.mark.parametrize("value", ["ABCDE1234F", "ZZZZZ0000A", "PQRST9876Z"])
def test_tax_id_accepts_letters_digits_letter(value):
    assert is_valid_tax_id(value)


@pytest.mark.parametrize(
    "value",
    ["abcde1234f", "ABCD1234F", "ABCDE123F", "ABCDE12345", "1BCDE1234F", "ABCDE1234FG", "ABCDE-1234F", ""],
)
def test_tax_id_rejects_deviations(value):
    assert not is_valid_tax_id(value)
    assert check("taxId", value).startswith("Tax ID format")


def test_otp_rule():
    assert is_valid_otp("123456")
    assert not is_valid_otp("12345")
    assert not is_valid_otp("1234567")
    assert not is_valid_otp("12a456")
    assert check("otp", "") == "OTP must be exactly 6 digits"


def test_full_name_needs_two_characters_after_trim():
    assert check_full_name("Al") == ""
    assert check_full_name("  A  ") == "Name must be at least 2 characters long"
    assert check_full_name("") != ""
    assert check_full_name(None) != ""


def test_date_of_birth_presence_only():
    assert check_date_of_birth("1990-01-31") == ""
    assert check_date_of_birth("") == "Date of birth is required"


def test_check_ignores_fields_without_a_rule():
    assert check("fullName", "") == ""


def test_sanitize_rejects_non_digits_for_digit_fields():
    assert sanitize_input("identityNumber", "1234a") is None
    assert sanitize_input("mobileNumber", "98-76") is None
    assert sanitize_input("identityNumber", "") == ""


def test_sanitize_uppercases_and_truncates():
    assert sanitize_input("taxId", "abcde1234f") == "ABCDE1234F"
    assert sanitize_input("taxId", "abcde1234fxyz") == "ABCDE1234F"
    assert sanitize_input("identityNumber", "1234567890123456") == "123456789012"
    assert sanitize_input("fullName", "x" * 150) == "x" * 100
    # free-text fields keep what was typed
    assert sanitize_input("fullName", "Asha Rao") == "Asha Rao"
    assert sanitize_input("dateOfBirth", "2000-02-29") == "2000-02-29"


def test_invalid_otp_message_uses_configured_demo_value(monkeypatch):
    monkeypatch.setattr(validation.settings, "DEMO_OTP", "654321")
    assert validation.invalid_otp_message() == "Invalid OTP. Use 654321 for demo."
