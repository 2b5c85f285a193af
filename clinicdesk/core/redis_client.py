"""Redis connection and the refresh-token blacklist stored in it."""

import redis
import structlog

from clinicdesk.config import settings

logger = structlog.get_logger()

# Global Redis client instance
_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client instance.

    Returns:
        Redis client instance
    """
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password,
            decode_responses=settings.redis_decode_responses,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )

    return _redis_client


async def check_redis_connection() -> bool:
    """Check if Redis connection is healthy."""
    try:
        get_redis_client().ping()
        return True
    except redis.RedisError:
        return False


def close_redis_connection() -> None:
    """Close Redis connection."""
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class TokenBlacklist:
    """
    Revoked refresh tokens, each kept until it would have expired anyway.

    Redis outages are logged and treated as "not revoked" so sign-in keeps
    working; a revocation attempted during an outage is reported as failed.
    """

    KEY_PREFIX = "blacklist:"

    def __init__(self, redis_client: redis.Redis):
        """Initialize blacklist with Redis client."""
        self.redis = redis_client

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    def revoke(self, token: str, ttl: int) -> bool:
        """
        Blacklist a token.

        Args:
            token: Encoded refresh token
            ttl: Seconds to keep the entry

        Returns:
            True if stored, False if Redis was unavailable
        """
        try:
            self.redis.setex(self._key(token), ttl, "1")
            return True
        except redis.RedisError as e:
            logger.warning("token_blacklist_unavailable", operation="revoke", error=str(e))
            return False

    def is_revoked(self, token: str) -> bool:
        """Check whether a token has been blacklisted."""
        try:
            return bool(self.redis.exists(self._key(token)))
        except redis.RedisError as e:
            logger.warning("token_blacklist_unavailable", operation="lookup", error=str(e))
            return False

