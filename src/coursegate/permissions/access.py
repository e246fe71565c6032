"""Access resolution for units, modules and courses.

"Most specific rule wins": a unit grant beats a module grant, which beats a
course grant; with no applicable grant access is denied. Module and course
visibility are existential rollups over their units.

All functions here are pure. They never raise for a grant list, even a
malformed one; with duplicate grants for the same scope the first one in
storage order wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence

from .constants import SCOPE_PRECEDENCE, Scope

if TYPE_CHECKING:
    from ..models import Course, Grant, Module, Unit

ScopeChain = list[tuple[Scope, str]]


def grant_matches(grant: Grant, scope: Scope, scope_id: str) -> bool:
    """Check whether ``grant`` is the grant recorded for ``(scope, scope_id)``.

    The scope's id field must equal ``scope_id`` and every more specific
    id field must be empty, so a unit grant never counts as a module or
    course grant.
    """
    if getattr(grant, f"{scope.value}_id", None) != scope_id:
        return False
    finer = SCOPE_PRECEDENCE[: SCOPE_PRECEDENCE.index(scope)]
    return all(getattr(grant, f"{s.value}_id", None) is None for s in finer)


def find_grant(grants: Iterable[Grant], scope: Scope, scope_id: str) -> Grant | None:
    """Return the first grant recorded for ``(scope, scope_id)``, or None."""
    return next((g for g in grants if grant_matches(g, scope, scope_id)), None)


def lookup_grant(grants: Iterable[Grant], scope: Scope, scope_id: str) -> bool | None:
    """Tri-state lookup: the grant's ``is_granted``, or None if no grant exists."""
    grant = find_grant(grants, scope, scope_id)
    return grant.is_granted if grant is not None else None


def scope_chain(node: Course | Module | Unit) -> ScopeChain:
    """Build the ``(scope, id)`` chain from ``node`` up to its course.

    Walks :data:`SCOPE_PRECEDENCE` from the node's own level upwards and
    reads the parent id from ``{scope}_id``. Levels the node does not
    belong to (a unit without a module) are skipped.

    Example::

        scope_chain(Unit(id="u1", course_id="c1", module_id="m1"))
        # [(Scope.UNIT, "u1"), (Scope.MODULE, "m1"), (Scope.COURSE, "c1")]

        scope_chain(Unit(id="u3", course_id="c1"))
        # [(Scope.UNIT, "u3"), (Scope.COURSE, "c1")]
    """
    start = SCOPE_PRECEDENCE.index(node.scope)
    chain: ScopeChain = [(node.scope, node.id)]
    for scope in SCOPE_PRECEDENCE[start + 1 :]:
        parent_id = getattr(node, f"{scope.value}_id", None)
        if parent_id is not None:
            chain.append((scope, parent_id))
    return chain


def resolve_chain(grants: Sequence[Grant], chain: ScopeChain) -> bool | None:
    """Return ``is_granted`` of the first level in ``chain`` that has a grant.

    Returns None when no level carries a grant; callers decide the default.
    """
    for scope, scope_id in chain:
        decision = lookup_grant(grants, scope, scope_id)
        if decision is not None:
            return decision
    return None


# ── Member-facing access checks ─────────────────────────


def unit_access(grants: Sequence[Grant], unit: Unit) -> bool:
    """Check if a user's grants give access to ``unit``.

    Checks in order, first match wins:
    1. grant on the unit itself
    2. grant on the unit's module (if the unit has one)
    3. grant on the unit's course
    4. otherwise denied

    Args:
        grants: All grants of one user.
        unit: Unit to check.

    Returns:
        True if access is granted.

    Example::

        grants = [Grant(user_id="x", course_id="c1", is_granted=True),
                  Grant(user_id="x", unit_id="u2", is_granted=False)]
        unit_access(grants, u1)  # True  (course grant)
        unit_access(grants, u2)  # False (unit grant overrides)
    """
    return resolve_chain(grants, scope_chain(unit)) is True


def module_access(grants: Sequence[Grant], module: Module, units: Iterable[Unit]) -> bool:
    """Check if a module is visible: at least one of its units is accessible.

    ``units`` may be the whole unit list; only units of ``module`` are
    considered. A module with no units falls back to the module grant,
    then the course grant, else denied.
    """
    module_units = [u for u in units if u.module_id == module.id]
    if not module_units:
        return resolve_chain(grants, scope_chain(module)) is True
    return any(unit_access(grants, u) for u in module_units)


def course_access(grants: Sequence[Grant], course: Course, units: Iterable[Unit]) -> bool:
    """Check if a course is visible: at least one of its units is accessible.

    ``units`` may be the whole unit list; only units of ``course`` (with or
    without a module) are considered. A course with no units falls back to
    the direct course grant, else denied.
    """
    course_units = [u for u in units if u.course_id == course.id]
    if not course_units:
        return lookup_grant(grants, Scope.COURSE, course.id) is True
    return any(unit_access(grants, u) for u in course_units)


__all__ = [
    "ScopeChain",
    "course_access",
    "find_grant",
    "grant_matches",
    "lookup_grant",
    "module_access",
    "resolve_chain",
    "scope_chain",
    "unit_access",
]
