from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from idverify.api.normalize import normalize_body
from idverify.api.schemas import (
    ApiResponse,
    GenerateOtpRequest,
    HealthResponse,
    VerifyOtpRequest,
    VerifyTaxIdRequest,
)
from idverify.core.verification import VerificationProvider, get_service_provider
from idverify.observability.logging import log
from idverify.utils.time import now_iso

router = APIRouter()

# Served both under /api (primary) and at the root (bare service paths)
PREFIXES = ("/api", "")

REQUIRED_FIELDS_MESSAGE = "Identity number and mobile number are required"


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _ok(message: str, data: dict) -> ApiResponse:
    return ApiResponse(success=True, message=message, data=data)


def health() -> HealthResponse:
    return HealthResponse(success=True, message="Server is healthy", timestamp=now_iso())


def generate_otp(payload: Any = Body(None), provider: VerificationProvider = Depends(get_service_provider)):
    req = GenerateOtpRequest.model_validate(normalize_body(payload))
    if not req.identityNumber or not req.mobileNumber:
        log(event="api_generate_otp_missing_fields",
            hasIdentityNumber=bool(req.identityNumber), hasMobileNumber=bool(req.mobileNumber))
        return _failure(400, REQUIRED_FIELDS_MESSAGE)

    res = provider.request_code(req.identityNumber, req.mobileNumber)
    if not res.ok:
        return _failure(400, res.message or REQUIRED_FIELDS_MESSAGE)
    log(event="api_otp_generated", mobileNumber=req.mobileNumber)
    return _ok(res.message, res.data)


def verify_otp(payload: Any = Body(None), provider: VerificationProvider = Depends(get_service_provider)):
    req = VerifyOtpRequest.model_validate(normalize_body(payload))
    res = provider.verify_code(req.identityNumber or "", req.mobileNumber or "", req.otp or "")
    if not res.ok:
        log(event="api_otp_rejected", mobileNumber=req.mobileNumber or "")
        return _failure(400, res.message)
    log(event="api_otp_verified", mobileNumber=req.mobileNumber or "")
    return _ok(res.message, res.data)


def verify_tax_id(payload: Any = Body(None), provider: VerificationProvider = Depends(get_service_provider)):
    """The supplied tax fields are not checked against anything (demo approval)."""
    req = VerifyTaxIdRequest.model_validate(normalize_body(payload))
    res = provider.verify_secondary_id(
        req.identityNumber or "", req.taxId or "", req.fullName or "", req.dateOfBirth or ""
    )
    if not res.ok:
        return _failure(400, res.message)
    log(event="api_tax_id_verified", taxId=req.taxId or "")
    return _ok(res.message, res.data)


for _prefix in PREFIXES:
    router.add_api_route(f"{_prefix}/health", health, methods=["GET"], response_model=HealthResponse)
    router.add_api_route(f"{_prefix}/generate-otp", generate_otp, methods=["POST"], response_model=ApiResponse)
    router.add_api_route(f"{_prefix}/verify-otp", verify_otp, methods=["POST"], response_model=ApiResponse)
    router.add_api_route(f"{_prefix}/verify-tax-id", verify_tax_id, methods=["POST"], response_model=ApiResponse)
    # Older path for the same check
    router.add_api_route(f"{_prefix}/verify-pan", verify_tax_id, methods=["POST"], response_model=ApiResponse)
