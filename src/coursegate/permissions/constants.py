"""Scope levels, course status values and roles.

Provides:
- ``Scope``: granularity of a grant or tree node (course / module / unit).
- ``SCOPE_PRECEDENCE``: scope levels ordered most specific first.
- ``CourseStatus``: admin badge classification (full / partial / none).
- ``Role``: default account roles.
"""

from __future__ import annotations

from enum import Enum


class Scope(str, Enum):
    """Granularity level of a grant.

    Hierarchy: ``course`` > ``module`` > ``unit``, course being the least
    specific. A grant names exactly one scope.
    """

    COURSE = "course"
    MODULE = "module"
    UNIT = "unit"


# Most specific first. Resolution walks this order and stops at the first
# level that carries a grant.
SCOPE_PRECEDENCE: tuple[Scope, ...] = (Scope.UNIT, Scope.MODULE, Scope.COURSE)


class CourseStatus(str, Enum):
    """Raw-grant classification of a course for admin summary badges."""

    FULL = "full"  # Course granted, no finer overrides
    PARTIAL = "partial"  # Some module/unit override exists
    NONE = "none"  # Course denied or absent, no overrides


class Role:
    """Default account roles. Overridable via ``AccessConfig``."""

    ADMIN = "admin"
    MEMBER = "member"

    ALL = frozenset({"admin", "member"})


__all__ = [
    "SCOPE_PRECEDENCE",
    "CourseStatus",
    "Role",
    "Scope",
]
