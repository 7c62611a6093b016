import logging
from fastapi import APIRouter, Depends, Request, Response, Cookie, Header, Query, status
from pydantic import EmailStr
from sqlalchemy.orm import Session
from typing import Optional
from eventreg.core.cache import OTPStore, get_otp_store
from eventreg.core.config import settings
from eventreg.core.database import get_db
from eventreg.core.exceptions import TokenInvalid
from eventreg.core.mailer import Mailer, get_mailer
from eventreg.core.security import to_epoch, verify_token
from eventreg.models.user import User
from eventreg.schemas.auth import (
    SignupRequest,
    SignupResponse,
    LoginRequest,
    LoginResponse,
    ConfirmEmailRequest,
    EmailRequest,
    VerifyOTPRequest,
    ResetPasswordRequest,
    CheckUserResponse,
    MessageResponse,
)
from eventreg.schemas.user import UserPublic
from eventreg.services.credentials import CredentialManager

logger = logging.getLogger(__name__)
router = APIRouter()


def get_credential_manager(
    db: Session = Depends(get_db),
    otp_store: OTPStore = Depends(get_otp_store),
    mailer: Mailer = Depends(get_mailer),
) -> CredentialManager:
    return CredentialManager(db, otp_store, mailer)


def get_current_user(
    request: Request,
    session_cookie: Optional[str] = Cookie(None, alias=settings.cookie_name),
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """Resolve the session token to a user.

    The token is read from the session cookie, falling back to an
    ``Authorization: Bearer`` header. A token issued before the user's last
    password change is rejected even if it has not expired yet.
    """
    token = session_cookie
    if not token and authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            token = credentials.strip()

    if not token:
        raise TokenInvalid("You are not logged in. Please log in to get access.")

    payload = verify_token(token)

    user = db.query(User).filter(User.email == payload["email"]).first()
    if user is None:
        raise TokenInvalid("The user belonging to this token no longer exists.")

    if user.password_changed_at and to_epoch(user.password_changed_at) > payload["iat"]:
        raise TokenInvalid("Password was changed recently. Please log in again.")

    request.state.session = {"email": payload["email"], "issued_at": payload["iat"]}
    return user


@router.post(
    "/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED
)
def signup(
    user_data: SignupRequest,
    manager: CredentialManager = Depends(get_credential_manager),
):
    user, email_sent = manager.signup(
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
        mobile=user_data.mobile,
        university=user_data.university,
        rollno=user_data.rollno,
    )
    if email_sent:
        message = "User created, please check your email to confirm your account"
    else:
        message = "User created, but the confirmation email could not be sent"
    return {"message": message, "user": user, "email_sent": email_sent}


@router.post("/confirmemail", response_model=MessageResponse)
def confirm_email(
    body: ConfirmEmailRequest,
    manager: CredentialManager = Depends(get_credential_manager),
):
    manager.confirm_email(body.token)
    return {"message": "Email confirmed"}


@router.post("/resendconfirmation", response_model=MessageResponse)
def resend_confirmation(
    body: EmailRequest,
    manager: CredentialManager = Depends(get_credential_manager),
):
    if manager.resend_confirmation(body.email):
        return {"message": "Confirmation email sent"}
    return {"message": "Email already confirmed"}


@router.get("/checkuser", response_model=CheckUserResponse)
def check_user(
    email: EmailStr = Query(...),
    manager: CredentialManager = Depends(get_credential_manager),
):
    exists, confirmed = manager.check_user(email)
    return {"exists": exists, "is_email_confirmed": confirmed}


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    response: Response,
    manager: CredentialManager = Depends(get_credential_manager),
):
    user, token = manager.login(credentials.email, credentials.password)

    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.jwt_expires_in_days * 24 * 60 * 60,
    )
    return {"message": "User logged in", "user": user}


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return {"message": "Successfully logged out"}


@router.post("/forgetpassword", response_model=MessageResponse)
def forget_password(
    body: EmailRequest,
    manager: CredentialManager = Depends(get_credential_manager),
):
    manager.request_password_reset(body.email)
    return {"message": "Password reset link has been sent to your email"}


@router.post("/resetpassword", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest,
    manager: CredentialManager = Depends(get_credential_manager),
):
    if body.reset_token:
        manager.reset_password(body.reset_token, body.new_password)
    else:
        manager.reset_password_with_otp(body.email, body.new_password, body.otp)
    return {"message": "Password successfully reset"}


@router.post("/generateotp", response_model=MessageResponse)
def generate_otp(
    body: EmailRequest,
    manager: CredentialManager = Depends(get_credential_manager),
):
    manager.generate_otp(body.email)
    return {"message": "OTP has been sent to your email"}


@router.post("/verifyotp", response_model=MessageResponse)
def verify_otp(
    body: VerifyOTPRequest,
    manager: CredentialManager = Depends(get_credential_manager),
):
    manager.verify_otp(body.email, body.otp)
    return {"message": "OTP verified successfully"}


@router.get("/isauthenticated")
def is_authenticated(request: Request, current_user: User = Depends(get_current_user)):
    return {
        "status": "success",
        "user": UserPublic.model_validate(current_user).model_dump(),
        "session": request.state.session,
    }
