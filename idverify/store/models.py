from dataclasses import dataclass, field, fields
from typing import Dict

from idverify.core.countdown import Countdown
from idverify.core.state_machine import Step, AWAITING_OTP_REQUEST


@dataclass
class RegistrationDraft:
    identityNumber: str = ""
    mobileNumber: str = ""
    otp: str = ""
    taxId: str = ""
    fullName: str = ""
    # ISO date string as posted by a date input (YYYY-MM-DD)
    dateOfBirth: str = ""

    @classmethod
    def field_names(cls) -> set:
        return {f.name for f in fields(cls)}

    def clear(self) -> None:
        for name in self.field_names():
            setattr(self, name, "")

    def as_dict(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in sorted(self.field_names())}


@dataclass
class FlowSession:
    sessionId: str = ""
    step: Step = Step.IDENTITY
    draft: RegistrationDraft = field(default_factory=RegistrationDraft)
    # field name -> message; "general" is the banner error
    errors: Dict[str, str] = field(default_factory=dict)

    # Identity-step state; discarded whenever the flow leaves that step
    identityState: str = AWAITING_OTP_REQUEST
    countdown: Countdown = field(default_factory=Countdown)

    createdAtMs: int = 0
    lastSeenAtMs: int = 0
