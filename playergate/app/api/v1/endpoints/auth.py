# playergate/app/api/v1/endpoints/auth.py
"""
Auth endpoints.

- POST /auth/register                    - create account + security question
- POST /auth/login                       - password login, device trust check
- POST /auth/verify-device               - trust a device via security answer
- GET  /auth/security-question/{identity} - recovery prompt
- POST /auth/reset-password              - new password via security answer

Domain errors raised by the service are turned into JSON responses by
the handlers installed in main.py.
"""
from datetime import timedelta

from fastapi import APIRouter, Depends, status

from playergate.app.api import deps
from playergate.app.core.config import Settings
from playergate.app.schemas.account import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    SecurityQuestionResponse,
    SuccessResponse,
    VerifyDeviceRequest,
)
from playergate.app.security import tokens
from playergate.app.services.auth import AuthService
from playergate.app.services.devices import DeviceStatus

router = APIRouter()

_LOGIN_MESSAGES = {
    DeviceStatus.TRUSTED: "Login successful",
    DeviceStatus.UNTRUSTED: "Device requires verification",
    DeviceStatus.NEW_UNTRUSTED: "New device requires verification",
}


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    service: AuthService = Depends(deps.get_auth_service),
):
    account_id = await service.register(
        request.identity,
        request.password,
        request.security_question,
        request.security_answer,
    )
    return RegisterResponse(account_id=account_id)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    service: AuthService = Depends(deps.get_auth_service),
    settings: Settings = Depends(deps.get_settings),
):
    """
    Check the password, then the device.

    A trusted device completes the login and receives an access token.
    Anything else tells the client to show the security question.
    """
    result = await service.login(request.identity, request.password, request.device_identifier)

    response = LoginResponse(
        account_id=result.account_id,
        requires_verification=result.requires_verification,
        message=_LOGIN_MESSAGES[result.device_status],
    )
    if not result.requires_verification:
        response.access_token = tokens.create_access_token(
            result.account_id,
            settings.SECRET_KEY,
            settings.ALGORITHM,
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        response.token_type = "bearer"
    return response


@router.post("/verify-device", response_model=SuccessResponse)
async def verify_device(
    request: VerifyDeviceRequest,
    service: AuthService = Depends(deps.get_auth_service),
):
    await service.verify_device_for_recovery(
        request.identity,
        request.device_identifier,
        request.security_answer,
    )
    return SuccessResponse(success=True, message="Device verified successfully")


@router.get("/security-question/{identity}", response_model=SecurityQuestionResponse)
async def get_security_question(
    identity: str,
    service: AuthService = Depends(deps.get_auth_service),
):
    """Public: the client needs the prompt before it has a session."""
    question = await service.get_security_question(identity)
    return SecurityQuestionResponse(question=question)


@router.post("/reset-password", response_model=SuccessResponse)
async def reset_password(
    request: ResetPasswordRequest,
    service: AuthService = Depends(deps.get_auth_service),
):
    await service.reset_password(request.identity, request.security_answer, request.new_password)
    return SuccessResponse(
        success=True,
        message="Password reset successful. You can now log in with your new password."
    )
