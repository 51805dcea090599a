"""Credential store: user lookup and registration over SQLAlchemy."""

import logging
from typing import Protocol

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ServiceError
from app.core.roles import SELF_SERVICE_ROLES, Role
from app.core.security import hash_password
from app.models.user import User

logger = logging.getLogger(__name__)


class UserExistsError(ConflictError):
    code = "user_exists"


class RoleNotAllowedError(ServiceError):
    code = "role_not_allowed"
    status_code = 422


class CredentialStore(Protocol):
    """Read access to user records needed by the authenticator."""

    def get_by_login(self, login: str) -> User | None: ...

    def get_by_id(self, user_id: int) -> User | None: ...


class SqlUserStore:
    """CredentialStore backed by the ``users`` table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_login(self, login: str) -> User | None:
        """Look up by username, or by email (case-insensitive)."""
        login = login.strip()
        return (
            self.db.query(User)
            .filter(or_(User.username == login, func.lower(User.email) == login.lower()))
            .order_by(User.id)
            .first()
        )

    def get_by_id(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def list_users(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    def create(
        self,
        username: str,
        email: str,
        password: str,
        role: Role,
        *,
        is_verified: bool = False,
        rounds: int | None = None,
    ) -> User:
        """Insert a new user with a bcrypt-hashed password. Raises UserExistsError on duplicates."""
        username = username.strip()
        email = email.strip().lower()
        existing = (
            self.db.query(User)
            .filter(or_(User.username == username, func.lower(User.email) == email))
            .first()
        )
        if existing is not None:
            raise UserExistsError("Username or email already registered.")
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password, rounds=rounds),
            role=role,
            is_verified=is_verified,
            is_active=True,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise UserExistsError("Username or email already registered.") from e
        self.db.refresh(user)
        logger.info("User registered: id=%s username=%s role=%s", user.id, user.username, role.value)
        return user

    def set_active(self, user_id: int, is_active: bool) -> User:
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found.", code="user_not_found")
        user.is_active = is_active
        self.db.commit()
        self.db.refresh(user)
        logger.info("User id=%s is_active=%s", user.id, is_active)
        return user


def register_user(
    store: SqlUserStore,
    username: str,
    email: str,
    password: str,
    role: Role,
    rounds: int | None = None,
) -> User:
    """Self-service registration; ADMIN cannot be chosen here."""
    if role not in SELF_SERVICE_ROLES:
        raise RoleNotAllowedError(f"Role {role.value} cannot be chosen at registration.")
    return store.create(username, email, password, role, rounds=rounds)
