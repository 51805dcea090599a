"""Access filter: authenticate the bearer token and apply the authorization policy."""

import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from app.api.errors import access_denied_response, unauthorized_response
from app.services.authorization import DENY_UNAUTHENTICATED, AuthorizationPolicy
from app.services.revocation import RevocationRegistry
from app.services.tokens import Identity, TokenError, TokenRevokedError, TokenService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def extract_bearer_token(header: str | None) -> str | None:
    """Return the raw token from an ``Authorization: Bearer <token>`` header, else None."""
    if not header or header[: len(BEARER_PREFIX)].lower() != BEARER_PREFIX:
        return None
    return header[len(BEARER_PREFIX) :].strip()


class AccessFilterMiddleware(BaseHTTPMiddleware):
    """
    Runs once per request before any handler.

    Recognized token failures (malformed, bad signature, expired, revoked) end
    the request with 401. Unexpected errors while authenticating either reject
    the request (``fail_closed``) or let it continue without an identity; they
    never produce an authenticated request. Public routes skip token checks.
    """

    def __init__(
        self,
        app: ASGIApp,
        policy: AuthorizationPolicy,
        tokens: TokenService,
        revocations: RevocationRegistry,
        fail_closed: bool = True,
    ) -> None:
        super().__init__(app)
        self.policy = policy
        self.tokens = tokens
        self.revocations = revocations
        self.fail_closed = fail_closed

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        method, path = request.method, request.url.path
        request.state.identity = None
        request.state.raw_token = None

        if self.policy.is_public(method, path):
            return await call_next(request)

        try:
            identity, raw_token = self._authenticate(request)
        except TokenError as e:
            logger.warning("Rejected token on %s %s: %s", method, path, e.code)
            return unauthorized_response(e.code, e.message)
        except Exception:
            logger.exception("Unexpected error authenticating %s %s", method, path)
            if self.fail_closed:
                return unauthorized_response(
                    "authentication_error", "Could not authenticate request."
                )
            identity, raw_token = None, None

        if identity is not None:
            request.state.identity = identity
            request.state.raw_token = raw_token

        decision = self.policy.authorize(identity, method, path)
        if not decision.allowed:
            if decision.reason == DENY_UNAUTHENTICATED:
                return unauthorized_response("unauthenticated", "Authentication required.")
            return access_denied_response(path)

        # Outside the try: handler errors are not authentication errors.
        return await call_next(request)

    def _authenticate(self, request: Request) -> tuple[Identity | None, str | None]:
        raw_token = extract_bearer_token(request.headers.get("Authorization"))
        if raw_token is None:
            return None, None
        identity = self.tokens.verify(raw_token)
        if self.revocations.is_revoked(raw_token):
            raise TokenRevokedError("Token has been revoked. Please login again.")
        logger.debug("Authenticated subject=%s role=%s", identity.subject, identity.role.value)
        return identity, raw_token
