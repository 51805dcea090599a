"""Route access rules for the API."""

from app.core.roles import Role
from app.services.authorization import (
    AccessRule,
    AuthorizationPolicy,
    authenticated,
    public,
    require_roles,
)


def default_rules(api_prefix: str = "/api/v1") -> list[AccessRule]:
    p = api_prefix.rstrip("/")
    return [
        public("/"),
        public("/docs/**"),
        public("/redoc"),
        public("/openapi.json"),
        public(f"{p}/health"),
        public(f"{p}/auth/register", methods=["POST"]),
        public(f"{p}/auth/login", methods=["POST"]),
        public(f"{p}/auth/refresh", methods=["POST"]),
        # Logout reads the header itself so a missing token gets the logout reply, not a 401.
        public(f"{p}/auth/logout", methods=["POST"]),
        public(f"{p}/rides/search", methods=["GET"]),
        public(f"{p}/rides/{{ride_id}}", methods=["GET"]),
        authenticated(f"{p}/users/**"),
        require_roles(f"{p}/driver/**", Role.DRIVER),
        require_roles(f"{p}/bookings/**", Role.PASSENGER),
        require_roles(f"{p}/notifications/**", Role.PASSENGER, Role.DRIVER),
        require_roles(f"{p}/admin/**", Role.ADMIN),
    ]


def build_policy(api_prefix: str = "/api/v1") -> AuthorizationPolicy:
    """Build the validated policy; raises PolicyConfigError on ambiguous rules."""
    return AuthorizationPolicy(default_rules(api_prefix))
