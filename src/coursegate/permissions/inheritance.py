"""Admin-facing views of grant inheritance.

Provides:
- ``effective_access()``: which rule currently governs a node (strict
  fallback to the parent's grant), used for per-row toggles.
- ``has_overrides()``: whether any module/unit grant exists under a course.
- ``course_status()``: ``full`` / ``partial`` / ``none`` badge from raw grants.

These answer a different question than :func:`~.access.module_access` and
:func:`~.access.course_access`: they describe the grant rules, not whether
any content under the node is reachable. A module whose own grant is denied
but which contains one granted unit is visible to the member, yet its admin
toggle shows "off".
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from .access import lookup_grant, resolve_chain, scope_chain
from .constants import CourseStatus, Scope

if TYPE_CHECKING:
    from ..models import Course, CourseTree, Grant, Module, Unit


def effective_access(grants: Sequence[Grant], node: Course | Module | Unit) -> bool:
    """Resolve the rule governing ``node`` by precedence with fallback.

    Specific grant if present, else the parent's grant, else the parent's
    parent, else False. Never looks at children.

    Example::

        grants = [Grant(user_id="x", course_id="c1", is_granted=True),
                  Grant(user_id="x", unit_id="u1", is_granted=False)]
        effective_access(grants, module_m1)  # True, inherited from course
        effective_access(grants, unit_u1)    # False, own grant
    """
    return resolve_chain(grants, scope_chain(node)) is True


def has_overrides(grants: Sequence[Grant], course_id: str, tree: CourseTree) -> bool:
    """Check if any module- or unit-level grant exists under ``course_id``."""
    if any(lookup_grant(grants, Scope.MODULE, m.id) is not None for m in tree.modules_of(course_id)):
        return True
    return any(lookup_grant(grants, Scope.UNIT, u.id) is not None for u in tree.units_of_course(course_id))


def course_status(grants: Sequence[Grant], course_id: str, tree: CourseTree) -> CourseStatus:
    """Classify a course for the admin summary badge.

    - ``full``: course grant is True and no module/unit override exists.
    - ``partial``: some module/unit override exists, whatever the course grant.
    - ``none``: course grant is False or absent and no override exists.

    Computed from the raw grant records only.
    """
    if has_overrides(grants, course_id, tree):
        return CourseStatus.PARTIAL
    if lookup_grant(grants, Scope.COURSE, course_id) is True:
        return CourseStatus.FULL
    return CourseStatus.NONE


__all__ = [
    "course_status",
    "effective_access",
    "has_overrides",
]
