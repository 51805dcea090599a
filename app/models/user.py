"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import Boolean, Column, Enum, Integer, String

from app.core.roles import Role
from app.models.base import Base, CreatedAtMixin


class User(CreatedAtMixin, Base):
    """
    User account for JWT authentication and role-based access control.

    role: PASSENGER, DRIVER, BOTH or ADMIN; fixed after registration.
    is_active: False blocks login (set by admins).
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(Role, name="user_role", native_enum=False, length=16),
        nullable=False,
        default=Role.PASSENGER,
    )
    is_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
