"""Tests for the Redis-backed refresh-token blacklist."""

from unittest.mock import MagicMock

import pytest
import redis
from httpx import AsyncClient

from clinicdesk.config import settings
from clinicdesk.core.redis_client import TokenBlacklist
from clinicdesk.services.auth_service import AuthService


def test_revoke():
    """Test that revoking stores a prefixed key with a TTL."""
    mock_redis = MagicMock()
    blacklist = TokenBlacklist(redis_client=mock_redis)

    assert blacklist.revoke("abc", ttl=300) is True
    mock_redis.setex.assert_called_once_with("blacklist:abc", 300, "1")


def test_is_revoked():
    """Test blacklist lookups."""
    mock_redis = MagicMock()
    blacklist = TokenBlacklist(redis_client=mock_redis)

    mock_redis.exists.return_value = 0
    assert blacklist.is_revoked("abc") is False
    mock_redis.exists.assert_called_once_with("blacklist:abc")

    mock_redis.exists.return_value = 1
    assert blacklist.is_revoked("abc") is True


def test_degrades_without_redis():
    """Test that Redis errors are reported as failed writes and misses."""
    mock_redis = MagicMock()
    mock_redis.setex.side_effect = redis.ConnectionError("Connection refused")
    mock_redis.exists.side_effect = redis.ConnectionError("Connection refused")
    blacklist = TokenBlacklist(redis_client=mock_redis)

    assert blacklist.revoke("abc", ttl=60) is False
    assert blacklist.is_revoked("abc") is False


def test_revoke_token_uses_refresh_lifetime(redis_mock):
    """Test that blacklist entries expire with the refresh token."""
    AuthService(TokenBlacklist(redis_mock)).revoke_token("abc")

    key, ttl, value = redis_mock.setex.call_args.args
    assert key == "blacklist:abc"
    assert value == "1"
    assert ttl == settings.refresh_token_expire_days * 24 * 3600


@pytest.mark.asyncio
async def test_refresh_works_when_redis_is_down(client: AsyncClient, patient, redis_mock):
    """Test that an unreachable blacklist does not lock users out."""
    login = await client.post(
        "/api/v1/auth/login", json={"email": "patient@example.com", "password": "secret123"}
    )
    refresh_token = login.json()["data"]["tokens"]["refresh_token"]
    redis_mock.exists.side_effect = redis.ConnectionError("Connection refused")

    response = await client.post(
        "/api/v1/auth/refresh-token", json={"refresh_token": refresh_token}
    )

    assert response.status_code == 200
