"""Closed set of user roles used for coarse-grained authorization."""

import enum


class Role(str, enum.Enum):
    """Account role. BOTH is a driver who also rides as a passenger."""

    PASSENGER = "PASSENGER"
    DRIVER = "DRIVER"
    BOTH = "BOTH"
    ADMIN = "ADMIN"

    def satisfies(self, required: "Role") -> bool:
        """True if this role meets a requirement for ``required``."""
        if self is required:
            return True
        return self is Role.BOTH and required in (Role.DRIVER, Role.PASSENGER)


# Roles a user may pick at registration; ADMIN accounts are created with the CLI.
SELF_SERVICE_ROLES = frozenset({Role.PASSENGER, Role.DRIVER, Role.BOTH})
