from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, StrictBool
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Requests. Fields are optional here so that absent values reach the
# service's own guards and get the matching error message.

class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    phone: Optional[str] = None
    agreed_to_terms: Optional[StrictBool] = None


class SignInRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class VerifyOtpRequest(CamelModel):
    email: Optional[str] = None
    code: Optional[str] = None


class ResendOtpRequest(CamelModel):
    email: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None
    confirm_new_password: Optional[str] = None


# Responses

class UserProfile(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    role: str
    image: Optional[str] = None
    email_verified: bool
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None

    @classmethod
    def from_account(cls, account) -> "UserProfile":
        return cls(
            id=str(account.id),
            name=account.name,
            email=account.email,
            phone=account.phone,
            role=account.role,
            image=account.image,
            email_verified=bool(account.email_verified),
            gender=account.gender,
            date_of_birth=account.date_of_birth,
        )


class MessageResponse(BaseModel):
    message: str


class StatusResponse(BaseModel):
    status: Union[bool, str]
    message: str


class SignInResponse(BaseModel):
    status: bool = True
    message: str
    user: UserProfile
    token: str
