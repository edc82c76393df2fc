"""
Bearer-token authentication against Supabase Auth.

The identity provider is the authority on whether a token is valid. Claims are
then read locally with PyJWT: ES256/RS256 tokens are checked against the JWKS
endpoint, HS256 tokens are decoded as-is since the provider already accepted them.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
import jwt
from jwt import PyJWKClient
import azure.functions as func

from .errors import RemoteOperationFailed, UnauthorizedError
from .identity import IdentityProvider

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
ASYMMETRIC_ALGORITHMS = ("ES256", "RS256")
TOKEN_AUDIENCE = "authenticated"


@dataclass(frozen=True)
class CallerIdentity:
    """The verified caller of one request."""

    subject_id: str
    email: Optional[str]
    raw_claims: Mapping[str, Any]
    token: str = field(repr=False)


def extract_bearer_token(req: func.HttpRequest) -> str:
    """
    Pull the token out of `Authorization: Bearer <token>`.

    Raises:
        UnauthorizedError: If the header is missing, malformed or empty
    """
    auth_header = req.headers.get("Authorization", "")

    if not auth_header.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Missing or invalid Authorization header")

    token = auth_header[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthorizedError("Missing or invalid Authorization header")
    return token


class IdentityVerifier:
    """Exchanges a bearer token for a CallerIdentity. Stateless, no caching."""

    def __init__(self, provider: IdentityProvider, jwks_client: Optional[PyJWKClient] = None):
        self.provider = provider
        self.jwks_client = jwks_client

    async def verify(self, token: str) -> CallerIdentity:
        """
        Verify a token with the identity provider.

        Raises:
            UnauthorizedError: If the token is empty, rejected or inconsistent
        """
        if not token:
            raise UnauthorizedError("Missing or invalid Authorization header")

        try:
            user = await self.provider.get_user(token)
        except RemoteOperationFailed as e:
            logger.warning(f"Identity provider rejected token: {e.raw_message}")
            raise UnauthorizedError("Invalid or expired token") from e

        if not user or not user.get("id"):
            raise UnauthorizedError("Invalid or expired token")

        claims = await self._read_claims(token)
        subject = claims.get("sub")
        if subject and subject != user["id"]:
            logger.warning("Token subject does not match provider user")
            raise UnauthorizedError("Invalid token")

        logger.info(f"Token validated for user: {user['id']}")
        return CallerIdentity(
            subject_id=user["id"],
            email=user.get("email"),
            raw_claims=claims,
            token=token,
        )

    async def _read_claims(self, token: str) -> Dict[str, Any]:
        try:
            algorithm = jwt.get_unverified_header(token).get("alg")
            if algorithm in ASYMMETRIC_ALGORITHMS and self.jwks_client is not None:
                return await asyncio.to_thread(self._verify_with_jwks, token, algorithm)
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as e:
            logger.warning(f"Invalid token: {str(e)}")
            raise UnauthorizedError("Invalid token") from e

    def _verify_with_jwks(self, token: str, algorithm: str) -> Dict[str, Any]:
        """Verify an asymmetric token using the JWKS signing keys."""
        signing_key = self.jwks_client.get_signing_key_from_jwt(token)

        return jwt.decode(
            token,
            signing_key.key,
            algorithms=[algorithm],
            audience=TOKEN_AUDIENCE,
            options={
                "verify_signature": True,
                "verify_aud": True,
                "verify_exp": True,
                "require": ["sub", "exp", "aud"]
            }
        )
