from typing import Optional

from fastapi import APIRouter, Depends

from . import schemas
from .core.deps import get_account_service, get_bearer_token
from .services.account_service import AccountService
from .adapters.auth_adapter import (
    register_api,
    sign_in_api,
    verify_otp_api,
    resend_otp_api,
    change_password_api,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])

_ERROR = {"model": schemas.MessageResponse}


def get_auth_router() -> APIRouter:
    """Return the JSON auth APIRouter for integration into other FastAPI apps.

    The host app must populate ``app.state`` the way ``create_app`` does.
    """
    return router


@router.post("/signup", response_model=schemas.MessageResponse, responses={400: _ERROR, 500: _ERROR})
def signup(payload: schemas.RegisterRequest, service: AccountService = Depends(get_account_service)):
    return register_api(payload, service)


@router.post("/signin", response_model=schemas.SignInResponse, responses={400: _ERROR, 500: _ERROR})
def signin(payload: schemas.SignInRequest, service: AccountService = Depends(get_account_service)):
    return sign_in_api(payload, service)


@router.post("/verify-email-otp", response_model=schemas.StatusResponse, responses={400: _ERROR})
def verify_email_otp(payload: schemas.VerifyOtpRequest, service: AccountService = Depends(get_account_service)):
    return verify_otp_api(payload, service)


@router.post("/resend-email-otp", response_model=schemas.StatusResponse, responses={400: _ERROR})
def resend_email_otp(payload: schemas.ResendOtpRequest, service: AccountService = Depends(get_account_service)):
    return resend_otp_api(payload, service)


@router.post(
    "/change-password",
    response_model=schemas.StatusResponse,
    responses={400: _ERROR, 401: _ERROR, 404: _ERROR},
)
def change_password(
    payload: schemas.ChangePasswordRequest,
    token: Optional[str] = Depends(get_bearer_token),
    service: AccountService = Depends(get_account_service),
):
    return change_password_api(token, payload, service)
