"""Username/password login, token refresh and logout."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from app.core.errors import ServiceError
from app.core.security import hash_password, verify_password
from app.models.user import User
from app.services.revocation import RevocationRegistry
from app.services.tokens import Identity, TokenRevokedError, TokenService
from app.services.users import CredentialStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."


class LoginError(ServiceError):
    """Login failed. Clients see one code for unknown users and bad passwords."""

    code = "invalid_credentials"
    status_code = 401


class UserNotFoundError(LoginError):
    pass


class InvalidCredentialsError(LoginError):
    pass


class AccountDisabledError(ServiceError):
    code = "account_disabled"
    status_code = 403


@dataclass(frozen=True)
class LoginResult:
    user: User
    access_token: str
    refresh_token: str


@lru_cache
def _timing_hash(rounds: int | None) -> str:
    # Compared against when the user does not exist, so both paths pay for one bcrypt check.
    return hash_password("ridepool-unknown-user", rounds=rounds)


class Authenticator:
    """Validates credentials against the store and issues token pairs."""

    def __init__(
        self,
        store: CredentialStore,
        tokens: TokenService,
        revocations: RevocationRegistry,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        password_verifier: Callable[[str, str], bool] = verify_password,
        password_rounds: int | None = None,
    ) -> None:
        self.store = store
        self.tokens = tokens
        self.revocations = revocations
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._verify = password_verifier
        self.password_rounds = password_rounds

    def login(self, login: str, password: str) -> LoginResult:
        """Authenticate by username or email and return new access and refresh tokens."""
        user = self.store.get_by_login(login)
        if user is None:
            self._verify(password, _timing_hash(self.password_rounds))
            logger.warning("Login failed: unknown user %r", login)
            raise UserNotFoundError(INVALID_CREDENTIALS_MESSAGE)
        if not self._verify(password, user.password_hash):
            logger.warning("Login failed: wrong password for user id=%s", user.id)
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)
        if not user.is_active:
            logger.warning("Login refused: account disabled for user id=%s", user.id)
            raise AccountDisabledError("Account is disabled.")
        logger.info("Login succeeded for user id=%s", user.id)
        return self._issue_pair(user)

    def refresh(self, refresh_token: str) -> LoginResult:
        """Exchange a valid refresh token for a new pair; the old refresh token is revoked."""
        identity = self.tokens.verify(refresh_token, expected_type="refresh")
        # Claimed before any other work: of concurrent refreshes with one token, only one proceeds.
        if not self.revocations.revoke_if_absent(refresh_token, identity.expires_at):
            raise TokenRevokedError("Token has been revoked. Please login again.")
        user = self._user_for(identity)
        if user is None:
            raise InvalidCredentialsError("User no longer exists.")
        if not user.is_active:
            raise AccountDisabledError("Account is disabled.")
        logger.info("Token refreshed for user id=%s", user.id)
        return self._issue_pair(user)

    def logout(self, access_token: str) -> Identity:
        """Revoke a valid access token until its natural expiry. Idempotent."""
        identity = self.tokens.verify(access_token)
        self.revocations.revoke(access_token, identity.expires_at)
        logger.info("Logout: token revoked for subject=%s", identity.subject)
        return identity

    def _user_for(self, identity: Identity) -> User | None:
        if identity.user_id is not None:
            user = self.store.get_by_id(identity.user_id)
            if user is not None and user.username == identity.subject:
                return user
            return None
        return self.store.get_by_login(identity.subject)

    def _issue_pair(self, user: User) -> LoginResult:
        access = self.tokens.issue(user.username, user.role, self.access_ttl, user_id=user.id)
        refresh = self.tokens.issue(
            user.username, user.role, self.refresh_ttl, user_id=user.id, token_type="refresh"
        )
        return LoginResult(user=user, access_token=access, refresh_token=refresh)
