"""Route-pattern based authorization: maps request paths to required roles.

Patterns are slash-separated. A segment is a literal, a single-segment
wildcard (``*`` or ``{name}``), or a trailing ``**`` that matches any number
of remaining segments (including none). When several rules match a request,
the most specific one wins; rules that are equally specific and can match the
same request are rejected when the policy is built.
"""

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from app.core.roles import Role
from app.services.tokens import Identity

logger = logging.getLogger(__name__)

DENY_UNAUTHENTICATED = "unauthenticated"
DENY_FORBIDDEN = "forbidden"


class PolicyConfigError(Exception):
    """Raised when the rule table is invalid or ambiguous."""


class Access(str, enum.Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ROLES = "roles"


@dataclass(frozen=True)
class AccessRule:
    """Access requirement for every route matching ``pattern`` (and ``methods``, if set)."""

    pattern: str
    access: Access
    roles: frozenset[Role] = frozenset()
    methods: frozenset[str] | None = None


def public(pattern: str, methods: Iterable[str] | None = None) -> AccessRule:
    return AccessRule(pattern, Access.PUBLIC, methods=_methods(methods))


def authenticated(pattern: str, methods: Iterable[str] | None = None) -> AccessRule:
    return AccessRule(pattern, Access.AUTHENTICATED, methods=_methods(methods))


def require_roles(pattern: str, *roles: Role, methods: Iterable[str] | None = None) -> AccessRule:
    if not roles:
        raise PolicyConfigError(f"Rule {pattern!r} requires at least one role")
    return AccessRule(pattern, Access.ROLES, roles=frozenset(roles), methods=_methods(methods))


def _methods(methods: Iterable[str] | None) -> frozenset[str] | None:
    if methods is None:
        return None
    return frozenset(m.upper() for m in methods)


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check."""

    allowed: bool
    reason: str | None = None
    rule: AccessRule | None = None

    @classmethod
    def allow(cls, rule: AccessRule | None = None) -> "Decision":
        return cls(True, None, rule)

    @classmethod
    def deny(cls, reason: str, rule: AccessRule | None = None) -> "Decision":
        return cls(False, reason, rule)


def split_path(path: str) -> list[str]:
    """Split a URL path into non-empty segments ("/a//b/" -> ["a", "b"])."""
    return [s for s in path.split("/") if s]


def _is_wildcard(segment: str) -> bool:
    return segment == "*" or (segment.startswith("{") and segment.endswith("}"))


def _compatible(a: str, b: str) -> bool:
    return _is_wildcard(a) or _is_wildcard(b) or a == b


@dataclass(frozen=True)
class _CompiledRule:
    rule: AccessRule
    segments: tuple[str, ...]
    has_tail: bool
    specificity: tuple[int, int, int, int] = field(compare=False)

    @classmethod
    def compile(cls, rule: AccessRule) -> "_CompiledRule":
        if not rule.pattern.startswith("/"):
            raise PolicyConfigError(f"Pattern must start with '/': {rule.pattern!r}")
        segments = split_path(rule.pattern)
        has_tail = bool(segments) and segments[-1] == "**"
        if has_tail:
            segments = segments[:-1]
        if "**" in segments:
            raise PolicyConfigError(f"'**' is only allowed as the last segment: {rule.pattern!r}")
        literals = sum(1 for s in segments if not _is_wildcard(s))
        singles = len(segments) - literals
        specificity = (
            literals,
            singles,
            0 if has_tail else 1,
            0 if rule.methods is None else 1,
        )
        return cls(rule, tuple(segments), has_tail, specificity)

    def matches(self, method: str, path_segments: list[str]) -> bool:
        if self.rule.methods is not None and method.upper() not in self.rule.methods:
            return False
        n = len(self.segments)
        if self.has_tail:
            if len(path_segments) < n:
                return False
        elif len(path_segments) != n:
            return False
        return all(
            _is_wildcard(pattern) or pattern == segment
            for pattern, segment in zip(self.segments, path_segments)
        )

    def overlaps(self, other: "_CompiledRule") -> bool:
        """True if some request could match both rules."""
        a, b = self.rule.methods, other.rule.methods
        if a is not None and b is not None and not (a & b):
            return False
        la, lb = len(self.segments), len(other.segments)
        if not self.has_tail and not other.has_tail and la != lb:
            return False
        if self.has_tail and not other.has_tail and lb < la:
            return False
        if other.has_tail and not self.has_tail and la < lb:
            return False
        return all(_compatible(x, y) for x, y in zip(self.segments, other.segments))


class AuthorizationPolicy:
    """Validated rule table; resolve the rule for a request and decide access."""

    def __init__(self, rules: Iterable[AccessRule]) -> None:
        compiled = [_CompiledRule.compile(r) for r in rules]
        for i, first in enumerate(compiled):
            for second in compiled[i + 1 :]:
                if first.specificity == second.specificity and first.overlaps(second):
                    raise PolicyConfigError(
                        f"Ambiguous access rules: {first.rule.pattern!r} and {second.rule.pattern!r}"
                    )
        # Most specific first; ties cannot overlap, so their order does not matter.
        self._rules = sorted(compiled, key=lambda c: c.specificity, reverse=True)

    @property
    def rules(self) -> list[AccessRule]:
        return [c.rule for c in self._rules]

    def match(self, method: str, path: str) -> AccessRule | None:
        """Return the most specific rule for the request, or None if no rule matches."""
        segments = split_path(path)
        for compiled in self._rules:
            if compiled.matches(method, segments):
                return compiled.rule
        return None

    def is_public(self, method: str, path: str) -> bool:
        rule = self.match(method, path)
        return rule is not None and rule.access is Access.PUBLIC

    def authorize(self, identity: Identity | None, method: str, path: str) -> Decision:
        """
        Decide whether ``identity`` may access ``method path``.

        Unmatched routes require any authenticated identity.
        """
        rule = self.match(method, path)
        if rule is not None and rule.access is Access.PUBLIC:
            return Decision.allow(rule)
        if identity is None:
            return Decision.deny(DENY_UNAUTHENTICATED, rule)
        if rule is None or rule.access is Access.AUTHENTICATED:
            return Decision.allow(rule)
        if any(identity.role.satisfies(required) for required in rule.roles):
            return Decision.allow(rule)
        logger.info(
            "Access denied: subject=%s role=%s %s %s requires %s",
            identity.subject,
            identity.role.value,
            method,
            path,
            sorted(r.value for r in rule.roles),
        )
        return Decision.deny(DENY_FORBIDDEN, rule)
