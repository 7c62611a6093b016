import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from jose import JWTError, jwt
from passlib.context import CryptContext
from eventreg.core.config import settings
from eventreg.core.exceptions import TokenInvalid

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_epoch(value: datetime) -> int:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # Truncate password to 72 bytes for bcrypt compatibility
    plain_password_bytes = plain_password.encode('utf-8')[:72].decode('utf-8', errors='ignore')
    return pwd_context.verify(plain_password_bytes, hashed_password)


def get_password_hash(password: str) -> str:
    # Truncate password to 72 bytes for bcrypt compatibility
    password_bytes = password.encode('utf-8')[:72].decode('utf-8', errors='ignore')
    return pwd_context.hash(password_bytes)


def create_access_token(
    email: str,
    expires_delta: Optional[timedelta] = None,
    issued_at: Optional[datetime] = None,
) -> str:
    issued_at = issued_at or utcnow()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.jwt_expires_in_days)
    to_encode = {
        "email": email,
        "iat": to_epoch(issued_at),
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> dict:
    """Decode a session token, returning ``{"email", "iat", "exp"}``.

    Malformed, tampered and expired tokens all raise ``TokenInvalid``.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        raise TokenInvalid("Invalid or expired session. Please log in again.")

    if not payload.get("email") or not isinstance(payload.get("iat"), int):
        raise TokenInvalid("Token payload invalid")
    return payload


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def create_single_use_token() -> Tuple[str, str]:
    """Return ``(raw, hashed)``. Only the hash may be persisted."""
    raw_token = secrets.token_hex(32)
    return raw_token, hash_token(raw_token)


def generate_otp() -> str:
    return str(secrets.randbelow(1000000)).zfill(6)
