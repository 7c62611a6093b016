"""
Credential lifecycle: signup, email confirmation, login and both password
reset channels (emailed reset link, emailed OTP).

The store session, the OTP store and the mailer are passed in by the caller
so route handlers share the request's session and tests can swap in fakes.
"""

import hmac
import logging
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventreg.core.cache import OTPStore
from eventreg.core.config import settings
from eventreg.core.exceptions import (
    EmailDeliveryError,
    EmailNotConfirmed,
    InvalidOrExpiredToken,
    InvalidOTP,
    PasswordIncorrect,
    UserAlreadyExists,
    UserNotExist,
)
from eventreg.core.mailer import Mailer
from eventreg.core.security import (
    create_access_token,
    create_single_use_token,
    generate_otp,
    get_password_hash,
    hash_token,
    utcnow,
    verify_password,
)
from eventreg.models.user import User

logger = logging.getLogger(__name__)


class CredentialManager:
    def __init__(self, db: Session, otp_store: OTPStore, mailer: Mailer):
        self.db = db
        self.otp_store = otp_store
        self.mailer = mailer

    def _get_user(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def _require_user(self, email: str, status_code: Optional[int] = None) -> User:
        user = self._get_user(email)
        if user is None:
            raise UserNotExist(email, status_code=status_code)
        return user

    def signup(
        self,
        name: str,
        email: str,
        password: str,
        mobile: str,
        university: str,
        rollno: str,
    ) -> Tuple[User, bool]:
        """Create an unconfirmed user and mail the confirmation link.

        Returns the user and whether the confirmation email went out. The
        account is kept when mail delivery fails; the client can ask for the
        link again through ``resend_confirmation``.
        """
        if self._get_user(email):
            raise UserAlreadyExists()

        raw_token, hashed_token = create_single_use_token()
        user = User(
            name=name,
            email=email,
            passwordhash=get_password_hash(password),
            mobile=mobile,
            university=university,
            rollno=rollno,
            is_email_confirmed=False,
            email_token=hashed_token,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Another signup for the same email committed first
            self.db.rollback()
            raise UserAlreadyExists()
        self.db.refresh(user)
        logger.info(f"User {user.id} signed up")

        return user, self._send_confirmation(user, raw_token)

    def _send_confirmation(self, user: User, raw_token: str) -> bool:
        try:
            self.mailer.send_confirmation_email(user.email, user.name, raw_token)
        except EmailDeliveryError:
            logger.error(f"Confirmation email for user {user.id} was not delivered")
            return False
        return True

    def resend_confirmation(self, email: str) -> bool:
        user = self._require_user(email)
        if user.is_email_confirmed:
            return False

        raw_token, hashed_token = create_single_use_token()
        user.email_token = hashed_token
        self.db.commit()

        self.mailer.send_confirmation_email(user.email, user.name, raw_token)
        return True

    def confirm_email(self, raw_token: str) -> User:
        # The hash is kept after use, so presenting the same link again on a
        # confirmed account succeeds without changing anything
        user = (
            self.db.query(User)
            .filter(User.email_token == hash_token(raw_token))
            .first()
        )
        if user is None:
            raise InvalidOrExpiredToken("Invalid email confirmation token.")

        if not user.is_email_confirmed:
            user.is_email_confirmed = True
            self.db.commit()
            self.db.refresh(user)
            logger.info(f"User {user.id} confirmed email")
        return user

    def login(self, email: str, password: str) -> Tuple[User, str]:
        # Unknown email and wrong password share a status code
        user = self._require_user(email, status_code=PasswordIncorrect.status_code)

        if not verify_password(password, user.passwordhash):
            raise PasswordIncorrect()

        if not user.is_email_confirmed:
            raise EmailNotConfirmed()

        token = create_access_token(user.email)
        logger.info(f"User {user.id} logged in")
        return user, token

    def check_user(self, email: str) -> Tuple[bool, bool]:
        user = self._get_user(email)
        if user is None:
            return False, False
        return True, user.is_email_confirmed

    def request_password_reset(self, email: str) -> None:
        user = self._require_user(email)

        raw_token, hashed_token = create_single_use_token()
        user.password_reset_token = hashed_token
        user.password_reset_token_expiry = utcnow() + timedelta(
            minutes=settings.reset_token_expire_minutes
        )
        self.db.commit()
        logger.info(f"Password reset requested for user {user.id}")

        self.mailer.send_reset_email(user.email, raw_token)

    def reset_password(self, raw_token: str, new_password: str) -> User:
        user = (
            self.db.query(User)
            .filter(
                User.password_reset_token == hash_token(raw_token),
                User.password_reset_token_expiry > utcnow(),
            )
            .first()
        )
        if user is None:
            raise InvalidOrExpiredToken()

        # Clearing the token and storing the new hash go out as one UPDATE
        user.passwordhash = get_password_hash(new_password)
        user.password_reset_token = None
        user.password_reset_token_expiry = None
        user.password_changed_at = utcnow()
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Password reset for user {user.id}")
        return user

    def generate_otp(self, email: str) -> None:
        user = self._require_user(email)

        otp = generate_otp()
        self.otp_store.set_code(user.email, otp)
        self.mailer.send_otp_email(user.email, otp)

    def verify_otp(self, email: str, otp: str) -> None:
        stored = self.otp_store.get_code(email)
        if stored is None or not hmac.compare_digest(stored, otp):
            raise InvalidOTP()

    def reset_password_with_otp(self, email: str, new_password: str, otp: str) -> User:
        user = self._require_user(email)
        self.verify_otp(email, otp)

        user.passwordhash = get_password_hash(new_password)
        user.password_changed_at = utcnow()
        self.db.commit()
        self.db.refresh(user)

        self.otp_store.delete_code(email)
        logger.info(f"Password reset with OTP for user {user.id}")
        return user
