# playergate/app/schemas/account.py
"""
Pydantic schemas for the auth endpoints.

Secrets (password, security answer) only ever appear in request
schemas; no response schema carries them or their verifier tokens.
"""
from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    identity: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1)
    security_question: str = Field(..., min_length=1, max_length=255)
    security_answer: str = Field(..., min_length=1)


class RegisterResponse(BaseModel):
    account_id: int
    message: str = "Account registered successfully"


class LoginRequest(BaseModel):
    identity: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1)
    device_identifier: str = Field(..., min_length=1, max_length=255)


class LoginResponse(BaseModel):
    """
    Login outcome.

    requires_verification=True means the client must present the
    security question before the device is trusted. access_token is
    only issued for trusted devices.
    """
    account_id: int
    requires_verification: bool
    message: str
    access_token: Optional[str] = None
    token_type: Optional[str] = None


class VerifyDeviceRequest(BaseModel):
    identity: str = Field(..., min_length=1, max_length=254)
    device_identifier: str = Field(..., min_length=1, max_length=255)
    security_answer: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    identity: str = Field(..., min_length=1, max_length=254)
    security_answer: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class SuccessResponse(BaseModel):
    success: bool
    message: str


class SecurityQuestionResponse(BaseModel):
    question: str


class TokenPayload(BaseModel):
    sub: Optional[str] = None
