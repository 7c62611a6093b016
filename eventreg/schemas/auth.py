from typing import Optional
from pydantic import BaseModel, EmailStr, Field, model_validator
from eventreg.schemas.user import UserPublic


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    mobile: str = Field(..., pattern=r"^\d{10}$")
    university: str = Field(..., min_length=1, max_length=255)
    rollno: str = Field(..., min_length=1, max_length=15)


class SignupResponse(BaseModel):
    status: str = "success"
    message: str
    user: UserPublic
    email_sent: bool


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)


class LoginResponse(BaseModel):
    status: str = "success"
    message: str
    user: UserPublic


class ConfirmEmailRequest(BaseModel):
    token: str = Field(..., min_length=1)


class EmailRequest(BaseModel):
    email: EmailStr


class VerifyOTPRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., pattern=r"^\d{6}$")


class ResetPasswordRequest(BaseModel):
    """Either ``reset_token`` or both ``email`` and ``otp``."""

    reset_token: Optional[str] = None
    email: Optional[EmailStr] = None
    otp: Optional[str] = Field(None, pattern=r"^\d{6}$")
    new_password: str = Field(..., min_length=8, max_length=100)

    @model_validator(mode="after")
    def check_reset_channel(self):
        if self.reset_token:
            return self
        if self.email and self.otp:
            return self
        raise ValueError("Either reset_token or email and otp are required")


class CheckUserResponse(BaseModel):
    exists: bool
    is_email_confirmed: bool


class MessageResponse(BaseModel):
    status: str = "success"
    message: str
