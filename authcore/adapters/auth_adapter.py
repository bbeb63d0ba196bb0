from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse

from .. import schemas
from ..domain.errors import AuthError
from ..domain.results import Result
from ..services.account_service import AccountService


def error_response(error: AuthError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"message": error.message})


def register_api(payload: schemas.RegisterRequest, service: AccountService):
    result = service.register(payload)
    if not result.ok:
        return error_response(result.error)
    return schemas.MessageResponse(
        message="Registration successful! A verification code has been sent to your email."
    )


def sign_in_api(payload: schemas.SignInRequest, service: AccountService):
    result = service.sign_in(payload.email, payload.password)
    if not result.ok:
        return error_response(result.error)
    return schemas.SignInResponse(
        status=True,
        message="Signed in successfully.",
        user=schemas.UserProfile.from_account(result.value.account),
        token=result.value.token,
    )


def verify_otp_api(payload: schemas.VerifyOtpRequest, service: AccountService):
    result = service.verify_otp(payload.email, payload.code)
    return _status_or_error(result, "Email verified successfully! You can sign in now.")


def resend_otp_api(payload: schemas.ResendOtpRequest, service: AccountService):
    result = service.resend_otp(payload.email)
    return _status_or_error(result, "A new verification code has been sent to your email.")


def change_password_api(token: Optional[str], payload: schemas.ChangePasswordRequest, service: AccountService):
    result = service.change_password(token, payload)
    return _status_or_error(result, "Password changed successfully!", status_value="success")


def _status_or_error(result: Result, message: str, status_value=True):
    if not result.ok:
        return error_response(result.error)
    return JSONResponse(status_code=status.HTTP_200_OK, content={"status": status_value, "message": message})
