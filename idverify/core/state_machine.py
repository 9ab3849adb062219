from enum import Enum


class Step(str, Enum):
    # Surface: identity number + mobile, confirmed by OTP
    IDENTITY = "IDENTITY"

    # Surface: tax identifier, name and date of birth
    TAX = "TAX"

    # Surface: read-only summary, restart only
    SUCCESS = "SUCCESS"

    @property
    def number(self) -> int:
        return _ORDER.index(self) + 1

    def next(self) -> "Step":
        """Following step; SUCCESS is terminal and maps to itself."""
        i = _ORDER.index(self)
        return _ORDER[min(i + 1, len(_ORDER) - 1)]

    def previous(self) -> "Step":
        """Preceding step; IDENTITY is the first and maps to itself."""
        i = _ORDER.index(self)
        return _ORDER[max(i - 1, 0)]

    @classmethod
    def from_number(cls, n: int) -> "Step":
        if n < 1 or n > len(_ORDER):
            raise ValueError(f"no step numbered {n}")
        return _ORDER[n - 1]


_ORDER = (Step.IDENTITY, Step.TAX, Step.SUCCESS)

# Steps shown in the progress indicator (SUCCESS has none)
PROGRESS_STEPS = (
    (Step.IDENTITY, "Identity Verification", "Verify your identity"),
    (Step.TAX, "Tax ID Verification", "Validate your tax ID details"),
)

# Identity step sub-states
AWAITING_OTP_REQUEST = "awaiting-otp-request"
OTP_SENT = "otp-sent"
