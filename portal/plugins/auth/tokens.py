"""
Access/refresh token pairs as HS256 JWTs.

Access tokens are stateless: signature and expiry only. The current refresh
token of each user is kept in the cache under refresh_token:<user_id>; a
refresh token that does not match the stored one is treated as revoked.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel

from portal.core.cache_helper import CacheHelper
from portal.core.errors import Unauthorized

ALGORITHM = "HS256"
ACCESS_TYPE = "access"
REFRESH_TYPE = "refresh"


class TokenIdentity(BaseModel):
    """Identity claims carried by both tokens."""
    id: int
    student_id: str
    email: str
    role: str = "student"


class AuthTokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int


def refresh_key(user_id: int) -> str:
    return f"refresh_token:{user_id}"


class TokenService:

    def __init__(
        self,
        cache: CacheHelper,
        secret: str,
        refresh_secret: str,
        access_ttl_seconds: int = 3600,
        refresh_ttl_seconds: int = 7 * 24 * 3600,
        logger: Optional[logging.Logger] = None,
    ):
        if not secret or not refresh_secret:
            raise ValueError("JWT secrets must be configured")
        self.cache = cache
        self.secret = secret
        self.refresh_secret = refresh_secret
        self.access_ttl_seconds = access_ttl_seconds
        self.refresh_ttl_seconds = refresh_ttl_seconds
        self.logger = logger or logging.getLogger(__name__)

    def _encode(self, identity: TokenIdentity, token_type: str, secret: str, ttl_seconds: int) -> str:
        now = datetime.now(timezone.utc)
        payload = identity.model_dump()
        payload.update({
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds),
        })
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    def _decode(self, token: str, secret: str, token_type: str) -> TokenIdentity:
        try:
            payload = jwt.decode(token, secret, algorithms=[ALGORITHM], options={"require": ["exp", "jti"]})
        except jwt.ExpiredSignatureError as e:
            raise Unauthorized(f"{token_type.capitalize()} token has expired") from e
        except jwt.InvalidTokenError as e:
            raise Unauthorized(f"Invalid {token_type} token") from e
        if payload.get("type") != token_type:
            raise Unauthorized(f"Invalid {token_type} token")
        try:
            return TokenIdentity.model_validate(payload)
        except ValueError as e:
            raise Unauthorized(f"Invalid {token_type} token claims") from e

    async def issue(self, identity: TokenIdentity) -> AuthTokenPair:
        """New pair; the refresh token replaces any earlier one for this user."""
        pair = AuthTokenPair(
            access_token=self._encode(identity, ACCESS_TYPE, self.secret, self.access_ttl_seconds),
            refresh_token=self._encode(identity, REFRESH_TYPE, self.refresh_secret, self.refresh_ttl_seconds),
            expires_in=self.access_ttl_seconds,
        )
        self.cache.set(refresh_key(identity.id), pair.refresh_token, self.refresh_ttl_seconds)
        return pair

    async def verify_access(self, token: str) -> TokenIdentity:
        return self._decode(token, self.secret, ACCESS_TYPE)

    async def verify_refresh(self, token: str) -> TokenIdentity:
        return self._decode(token, self.refresh_secret, REFRESH_TYPE)

    async def refresh(self, refresh_token: str) -> AuthTokenPair:
        identity = await self.verify_refresh(refresh_token)
        if self.cache.get(refresh_key(identity.id)) != refresh_token:
            self.logger.warning(f"Rejected superseded or revoked refresh token for user {identity.id}")
            raise Unauthorized("Refresh token has been revoked")
        pair = await self.issue(identity)
        self.logger.info(f"Access token refreshed for user: {identity.student_id}")
        return pair

    async def revoke(self, user_id: int) -> None:
        """Stop future refreshes. Access tokens already issued stay valid until they expire."""
        self.cache.delete(refresh_key(user_id))
        self.logger.info(f"Refresh token revoked for user: {user_id}")
