"""
Form flow controller.

FormFlow wraps one FlowSession (draft, errors, step, identity sub-state) and a
VerificationProvider. All handlers run synchronously to completion and mutate
only the session they were given; the web layer loads the session, calls one
handler, and saves it back.
"""
from typing import Dict, Optional

from idverify.core import validation
from idverify.core.state_machine import Step, AWAITING_OTP_REQUEST, OTP_SENT
from idverify.core.verification import VerificationProvider, VerificationError
from idverify.observability.logging import log
from idverify.settings import settings
from idverify.store.models import FlowSession

GENERAL = "general"

OTP_SEND_FAILED = "Failed to send OTP. Please try again."
OTP_VERIFY_FAILED = "OTP verification failed. Please try again."
TAX_VERIFY_FAILED = "Tax ID verification failed. Please try again."


class FormFlow:
    def __init__(
        self,
        session: FlowSession,
        provider: VerificationProvider,
        resend_seconds: Optional[int] = None,
    ):
        self.session = session
        self.provider = provider
        self.resend_seconds = int(resend_seconds if resend_seconds is not None else settings.OTP_RESEND_SECONDS)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def step(self) -> Step:
        return self.session.step

    @property
    def draft(self):
        return self.session.draft

    @property
    def errors(self) -> Dict[str, str]:
        return self.session.errors

    @property
    def otp_sent(self) -> bool:
        return self.session.identityState == OTP_SENT

    @property
    def resend_remaining(self) -> int:
        return self.session.countdown.remaining

    @property
    def can_resend(self) -> bool:
        return self.otp_sent and self.resend_remaining == 0

    def snapshot(self) -> dict:
        return {
            "step": self.step.value,
            "stepNumber": self.step.number,
            "identityState": self.session.identityState,
            "resendRemaining": self.resend_remaining,
            "canResend": self.can_resend,
            "draft": self.draft.as_dict(),
            "errors": dict(self.errors),
        }

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def _move_to(self, target: Step, reason: str) -> None:
        current = self.session.step
        if current == Step.IDENTITY and target != Step.IDENTITY:
            self._teardown_identity_step()
        self.session.step = target
        self.session.errors = {}
        log(
            event="flow_step_changed",
            sessionId=self.session.sessionId,
            fromStep=current.value,
            toStep=target.value,
            reason=reason,
        )

    def _teardown_identity_step(self) -> None:
        self.session.countdown.cancel()
        self.session.identityState = AWAITING_OTP_REQUEST

    def advance(self) -> Step:
        self._move_to(self.step.next(), "advance")
        return self.step

    def retreat(self) -> Step:
        self._move_to(self.step.previous(), "retreat")
        return self.step

    def restart(self) -> Step:
        self._teardown_identity_step()
        self.session.draft.clear()
        self._move_to(Step.IDENTITY, "restart")
        return self.step

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------
    def edit_field(self, name: str, value: Optional[str]) -> bool:
        """
        Apply one input edit. Returns False if the edit was rejected, in which
        case the draft is untouched (digits-only fields ignore non-digits).
        """
        if name not in self.draft.field_names():
            return False
        cleaned = validation.sanitize_input(name, value)
        if cleaned is None:
            return False
        setattr(self.draft, name, cleaned)
        if self.errors.get(name):
            self.errors.pop(name, None)
        return True

    def apply_edits(self, values: Dict[str, Optional[str]]) -> Dict[str, bool]:
        return {name: self.edit_field(name, value) for name, value in values.items()}

    def dismiss_error(self) -> None:
        self.errors.pop(GENERAL, None)

    # ------------------------------------------------------------------
    # Step 1: identity verification
    # ------------------------------------------------------------------
    def submit_identity(self) -> Step:
        if self.step != Step.IDENTITY:
            return self.step
        if not self.otp_sent:
            self.request_otp()
        else:
            self.verify_otp()
        return self.step

    def request_otp(self) -> bool:
        d = self.draft
        found = {
            "identityNumber": validation.check("identityNumber", d.identityNumber),
            "mobileNumber": validation.check("mobileNumber", d.mobileNumber),
        }
        if any(found.values()):
            self.session.errors = {k: v for k, v in found.items() if v}
            return False

        try:
            res = self.provider.request_code(d.identityNumber, d.mobileNumber)
        except VerificationError as e:
            log(event="otp_request_failed", sessionId=self.session.sessionId, error=str(e)[:200])
            self.session.errors = {GENERAL: OTP_SEND_FAILED}
            return False

        if not res.ok:
            log(event="otp_request_rejected", sessionId=self.session.sessionId, message=res.message)
            self.session.errors = {GENERAL: OTP_SEND_FAILED}
            return False

        self.session.identityState = OTP_SENT
        self.session.errors = {}
        self.session.countdown.start(self.resend_seconds)
        log(
            event="otp_requested",
            sessionId=self.session.sessionId,
            mobileNumber=d.mobileNumber,
            resendSeconds=self.resend_seconds,
        )
        return True

    def verify_otp(self) -> bool:
        d = self.draft
        otp_error = validation.check("otp", d.otp)
        if otp_error:
            self.session.errors = {"otp": otp_error}
            return False

        try:
            res = self.provider.verify_code(d.identityNumber, d.mobileNumber, d.otp)
        except VerificationError as e:
            log(event="otp_verify_failed", sessionId=self.session.sessionId, error=str(e)[:200])
            self.session.errors = {GENERAL: OTP_VERIFY_FAILED}
            return False

        if not res.ok:
            log(event="otp_rejected", sessionId=self.session.sessionId)
            self.session.errors = {"otp": res.message or validation.invalid_otp_message()}
            return False

        log(event="otp_verified", sessionId=self.session.sessionId, identityNumber=d.identityNumber)
        self.advance()
        return True

    def resend_otp(self) -> bool:
        """Restart the countdown. No-op unless an otp was sent and the countdown is at zero."""
        if self.step != Step.IDENTITY or not self.can_resend:
            return False
        self.session.countdown.start(self.resend_seconds)
        log(event="otp_resend", sessionId=self.session.sessionId)
        return True

    # ------------------------------------------------------------------
    # Step 2: tax identifier verification
    # ------------------------------------------------------------------
    def submit_tax(self) -> Step:
        if self.step != Step.TAX:
            return self.step
        d = self.draft
        found = {
            "taxId": validation.check("taxId", d.taxId),
            "fullName": validation.check_full_name(d.fullName),
            "dateOfBirth": validation.check_date_of_birth(d.dateOfBirth),
        }
        if any(found.values()):
            self.session.errors = {k: v for k, v in found.items() if v}
            return self.step

        try:
            res = self.provider.verify_secondary_id(d.identityNumber, d.taxId, d.fullName.strip(), d.dateOfBirth)
        except VerificationError as e:
            log(event="tax_verify_failed", sessionId=self.session.sessionId, error=str(e)[:200])
            self.session.errors = {GENERAL: TAX_VERIFY_FAILED}
            return self.step

        if not res.ok:
            log(event="tax_verify_rejected", sessionId=self.session.sessionId, message=res.message)
            self.session.errors = {GENERAL: TAX_VERIFY_FAILED}
            return self.step

        log(event="tax_verified", sessionId=self.session.sessionId, taxId=d.taxId, data=res.data)
        return self.advance()

    def back(self) -> Step:
        if self.step != Step.TAX:
            return self.step
        return self.retreat()