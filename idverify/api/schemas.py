from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict

class _Body(BaseModel):
    model_config = ConfigDict(extra="ignore")

class GenerateOtpRequest(_Body):
    identityNumber: Optional[str] = None
    mobileNumber: Optional[str] = None

class VerifyOtpRequest(_Body):
    identityNumber: Optional[str] = None
    mobileNumber: Optional[str] = None
    otp: Optional[str] = None

class VerifyTaxIdRequest(_Body):
    identityNumber: Optional[str] = None
    taxId: Optional[str] = None
    fullName: Optional[str] = None
    dateOfBirth: Optional[str] = None

class ApiResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None

class HealthResponse(BaseModel):
    success: bool = True
    message: str = "Server is healthy"
    # ISO-8601
    timestamp: str

class FieldEdit(_Body):
    name: str
    value: Optional[str] = None
