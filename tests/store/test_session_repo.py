from unittest.mock import patch

from idverify.core.state_machine import Step
from idverify.store import session_repo
from idverify.store.models import FlowSession, RegistrationDraft


def test_unknown_id_creates_fresh_session():
    s = session_repo.load_session("does-not-exist")
    assert s.sessionId and s.sessionId != "does-not-exist"
    assert s.step == Step.IDENTITY
    assert s.draft == RegistrationDraft()
    assert session_repo.session_count() == 1


def test_same_id_returns_same_session():
    s = session_repo.load_session(None)
    s.draft.mobileNumber = "98"
    session_repo.save_session(s)
    again = session_repo.load_session(s.sessionId)
    assert again is s
    assert again.draft.mobileNumber == "98"


def test_idle_sessions_expire():
    with patch("idverify.store.session_repo.now_ms", return_value=1_000_000):
        s = session_repo.load_session(None)
    ttl_ms = session_repo.settings.SESSION_IDLE_TTL_SEC * 1000
    with patch("idverify.store.session_repo.now_ms", return_value=1_000_000 + ttl_ms + 1):
        fresh = session_repo.load_session(s.sessionId)
    assert fresh.sessionId != s.sessionId
    assert session_repo.session_count() == 1


def test_drop_session():
    s = session_repo.load_session(None)
    session_repo.drop_session(s.sessionId)
    assert session_repo.session_count() == 0


def test_draft_clear_and_dict():
    d = RegistrationDraft(identityNumber="123456789012", taxId="ABCDE1234F")
    assert d.as_dict()["taxId"] == "ABCDE1234F"
    d.clear()
    assert set(d.as_dict().values()) == {""}
    assert RegistrationDraft.field_names() == {
        "identityNumber", "mobileNumber", "otp", "taxId", "fullName", "dateOfBirth"
    }


def test_new_sessions_get_independent_state():
    a, b = FlowSession(), FlowSession()
    a.draft.otp = "1"
    a.errors["otp"] = "x"
    assert b.draft.otp == "" and b.errors == {}
    assert a.countdown is not b.countdown
