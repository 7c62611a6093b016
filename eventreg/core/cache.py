import logging
from typing import Optional

import redis

from eventreg.core.config import settings

logger = logging.getLogger(__name__)

# Connections are opened lazily by the pool on first command
redis_client = redis.Redis.from_url(settings.redis_url, decode_responses=True)


class OTPStore:
    """One-time password codes in Redis, keyed by email."""

    prefix = "otp:"

    def __init__(self, client: redis.Redis, expire_seconds: Optional[int] = None):
        self.client = client
        self.expire_seconds = expire_seconds

    def _key(self, email: str) -> str:
        return f"{self.prefix}{email}"

    def set_code(self, email: str, code: str) -> None:
        # Overwrites any previous code for this email
        self.client.set(self._key(email), code, ex=self.expire_seconds)

    def get_code(self, email: str) -> Optional[str]:
        return self.client.get(self._key(email))

    def delete_code(self, email: str) -> None:
        self.client.delete(self._key(email))


def get_otp_store() -> OTPStore:
    return OTPStore(redis_client, expire_seconds=settings.otp_expire_seconds)


def ping() -> bool:
    try:
        return bool(redis_client.ping())
    except redis.RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return False
