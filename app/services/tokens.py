"""JWT issuance and verification for session tokens.

Tokens carry the subject (username), role, user id, token type, jti, iat and
exp. Verification checks the signature first, then the claims, then expiry
against an injectable clock, so the outcome depends only on the token, the
key and the current time.
"""

import json
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import jwt
from jwt.utils import base64url_decode, base64url_encode

from app.core.errors import ServiceError
from app.core.roles import Role

logger = logging.getLogger(__name__)

TokenType = Literal["access", "refresh"]

# Minimum HMAC key length in bytes: the digest size of each algorithm.
MIN_KEY_BYTES = {"HS256": 32, "HS384": 48, "HS512": 64}

REQUIRED_CLAIMS = ["sub", "role", "typ", "jti", "iat", "exp"]


class TokenConfigError(Exception):
    """Raised at startup when the signing key or algorithm is unusable."""


class TokenError(ServiceError):
    """Base class for recognized token failures (401)."""

    code = "token_invalid"
    status_code = 401


class TokenMalformedError(TokenError):
    code = "token_malformed"


class TokenSignatureError(TokenError):
    code = "token_signature_invalid"


class TokenExpiredError(TokenError):
    code = "token_expired"


class TokenRevokedError(TokenError):
    code = "token_revoked"


@dataclass(frozen=True)
class Identity:
    """Authenticated principal decoded from a verified token."""

    subject: str
    role: Role
    user_id: int | None
    token_type: TokenType
    token_id: str
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _has_valid_signing_input(token: str) -> bool:
    """True if the token has three segments and the first two decode to JSON objects."""
    segments = token.split(".")
    if len(segments) != 3:
        return False
    try:
        return all(isinstance(json.loads(base64url_decode(s)), dict) for s in segments[:2])
    except (ValueError, TypeError):
        return False


def _signature_is_canonical(token: str) -> bool:
    """
    True if the signature segment is the exact base64url encoding of its bytes.

    Decoders ignore the unused low bits of the last character, so two
    segments can decode to the same HMAC; only the canonical one is accepted.
    """
    segment = token.rsplit(".", 1)[-1]
    try:
        return base64url_encode(base64url_decode(segment)).decode("ascii") == segment
    except (ValueError, TypeError):
        return False


class TokenService:
    """Signs and verifies HMAC JWTs with a single process-wide key."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if algorithm not in MIN_KEY_BYTES:
            raise TokenConfigError(f"Unsupported JWT algorithm: {algorithm!r}")
        if not secret:
            raise TokenConfigError("JWT signing secret is not configured")
        min_len = MIN_KEY_BYTES[algorithm]
        if len(secret.encode("utf-8")) < min_len:
            raise TokenConfigError(
                f"JWT signing secret must be at least {min_len} bytes for {algorithm}"
            )
        self._secret = secret
        self.algorithm = algorithm
        self._clock = clock

    def issue(
        self,
        subject: str,
        role: Role,
        ttl: timedelta,
        *,
        user_id: int | None = None,
        token_type: TokenType = "access",
    ) -> str:
        """Create a signed token for ``subject`` that expires ``ttl`` from now."""
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": subject,
            "role": role.value,
            "typ": token_type,
            "jti": uuid.uuid4().hex,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        if user_id is not None:
            payload["uid"] = user_id
        logger.debug("Issued %s token for subject=%s", token_type, subject)
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str, *, expected_type: TokenType = "access") -> Identity:
        """
        Validate ``token`` and return the embedded identity.

        Raises TokenMalformedError, TokenSignatureError or TokenExpiredError.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise TokenSignatureError("JWT signature validation failed") from e
        except jwt.DecodeError as e:
            # Header and payload decode, so only the signature segment is broken.
            if _has_valid_signing_input(token):
                raise TokenSignatureError("JWT signature validation failed") from e
            raise TokenMalformedError("JWT token is malformed") from e
        except jwt.InvalidTokenError as e:
            raise TokenMalformedError("JWT token is malformed") from e
        if not _signature_is_canonical(token):
            raise TokenSignatureError("JWT signature validation failed")

        identity = self._identity_from_claims(payload)
        if identity.token_type != expected_type:
            raise TokenMalformedError(f"Expected a {expected_type} token")
        if self._clock() >= identity.expires_at:
            raise TokenExpiredError("JWT token has expired")
        return identity

    @staticmethod
    def _identity_from_claims(payload: dict[str, Any]) -> Identity:
        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub:
            raise TokenMalformedError("JWT token is malformed")
        try:
            role = Role(payload["role"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
        except (TypeError, ValueError, OverflowError) as e:
            raise TokenMalformedError("JWT token is malformed") from e
        token_type = payload.get("typ")
        if token_type not in ("access", "refresh"):
            raise TokenMalformedError("JWT token is malformed")
        uid = payload.get("uid")
        if uid is not None and not isinstance(uid, int):
            raise TokenMalformedError("JWT token is malformed")
        return Identity(
            subject=sub,
            role=role,
            user_id=uid,
            token_type=token_type,
            token_id=str(payload["jti"]),
            issued_at=issued_at,
            expires_at=expires_at,
        )
