"""
Verification providers.

The form flow never decides on its own whether a code or tax identifier is
valid: it asks a VerificationProvider. DemoVerificationProvider holds the fixed
demo values (placeholders for a real identity/tax authority);
HttpVerificationProvider talks to any service exposing the /api/generate-otp,
/api/verify-otp and /api/verify-tax-id endpoints of this app.
"""
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

import httpx

from idverify.settings import settings
from idverify.observability.logging import log


class VerificationError(Exception):
    """Provider could not give an answer (transport/protocol failure)."""


@dataclass
class VerificationResult:
    ok: bool
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)


class VerificationProvider(Protocol):
    def request_code(self, identity_number: str, mobile_number: str) -> VerificationResult: ...

    def verify_code(self, identity_number: str, mobile_number: str, code: str) -> VerificationResult: ...

    def verify_secondary_id(
        self, identity_number: str, tax_id: str, full_name: str, date_of_birth: str
    ) -> VerificationResult: ...


def mask_mobile(mobile: str) -> str:
    """'9876543210' -> '987654****' (first run of ten digits only)."""
    return re.sub(r"([0-9]{6})([0-9]{4})", r"\1****", mobile or "", count=1)


class DemoVerificationProvider:
    def __init__(self, demo_otp: Optional[str] = None, secondary_delay_sec: float = 0.0, sleep=time.sleep):
        self.demo_otp = demo_otp if demo_otp is not None else settings.DEMO_OTP
        self.secondary_delay_sec = float(secondary_delay_sec or 0.0)
        self._sleep = sleep

    def request_code(self, identity_number: str, mobile_number: str) -> VerificationResult:
        if not identity_number or not mobile_number:
            return VerificationResult(ok=False, message="Identity number and mobile number are required")
        # Nothing is sent; the demo code is fixed
        return VerificationResult(
            ok=True,
            message="OTP sent successfully",
            data={"mobileNumber": mask_mobile(mobile_number)},
        )

    def verify_code(self, identity_number: str, mobile_number: str, code: str) -> VerificationResult:
        if code == self.demo_otp:
            return VerificationResult(
                ok=True,
                message="OTP verified successfully",
                data={"identityVerified": True, "mobileVerified": True},
            )
        return VerificationResult(ok=False, message=f"Invalid OTP. Use {self.demo_otp} for demo.")

    def verify_secondary_id(
        self, identity_number: str, tax_id: str, full_name: str, date_of_birth: str
    ) -> VerificationResult:
        if self.secondary_delay_sec > 0:
            self._sleep(self.secondary_delay_sec)
        return VerificationResult(
            ok=True,
            message="Tax ID verified successfully",
            data={"panVerified": True, "nameMatch": True, "dobMatch": True},
        )


class HttpVerificationProvider:
    def __init__(self, base_url: str, timeout: float = 5.0, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _post(self, path: str, body: Dict[str, Any]) -> VerificationResult:
        url = f"{self.base_url}{path}"
        start = time.time()
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(url, json=body)
        except httpx.HTTPError as e:
            log(event="verification_http_error", path=path, error=str(e)[:200])
            raise VerificationError(f"{path}: {e}") from e

        latency_ms = int((time.time() - start) * 1000)
        try:
            payload = resp.json()
        except ValueError as e:
            log(event="verification_http_bad_body", path=path, status=resp.status_code, latencyMs=latency_ms)
            raise VerificationError(f"{path}: non-JSON response ({resp.status_code})") from e

        log(event="verification_http_response", path=path, status=resp.status_code, latencyMs=latency_ms)

        # 4xx with a failure payload is a definite "no"; anything else unexpected is an error
        if resp.status_code >= 500 or not isinstance(payload, dict) or "success" not in payload:
            raise VerificationError(f"{path}: unexpected response ({resp.status_code})")
        return VerificationResult(
            ok=bool(payload.get("success")),
            message=str(payload.get("message") or ""),
            data=payload.get("data") or {},
        )

    def request_code(self, identity_number: str, mobile_number: str) -> VerificationResult:
        return self._post(
            "/api/generate-otp",
            {"identityNumber": identity_number, "mobileNumber": mobile_number},
        )

    def verify_code(self, identity_number: str, mobile_number: str, code: str) -> VerificationResult:
        return self._post(
            "/api/verify-otp",
            {"identityNumber": identity_number, "mobileNumber": mobile_number, "otp": code},
        )

    def verify_secondary_id(
        self, identity_number: str, tax_id: str, full_name: str, date_of_birth: str
    ) -> VerificationResult:
        return self._post(
            "/api/verify-tax-id",
            {
                "identityNumber": identity_number,
                "taxId": tax_id,
                "fullName": full_name,
                "dateOfBirth": date_of_birth,
            },
        )


def get_flow_provider() -> VerificationProvider:
    """Provider used by the form pages, chosen by VERIFICATION_BACKEND."""
    if settings.VERIFICATION_BACKEND == "http":
        return HttpVerificationProvider(
            settings.VERIFICATION_API_URL, timeout=settings.VERIFICATION_TIMEOUT_SEC
        )
    return DemoVerificationProvider(secondary_delay_sec=settings.TAX_VERIFY_DELAY_SEC)


def get_service_provider() -> VerificationProvider:
    """Provider behind the JSON service handlers (always answers locally)."""
    return DemoVerificationProvider()
