"""Member portal read models.

Combines one store snapshot (grants + tree) with the access checks to
build what a member may see: the dashboard course list, a course outline
and a single unit with previous/next navigation.

A course or unit the member cannot access is reported exactly like one
that does not exist (``None``), so denied structure is never revealed.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field

from .exceptions import CourseGateError, StorageError
from .interfaces import GrantStore
from .models import Course, Grant, Module, Unit
from .permissions.access import course_access, module_access, unit_access

logger = logging.getLogger(__name__)


class UserAccessData(BaseModel):
    """Grants of one user plus the tree they apply to."""

    grants: list[Grant] = Field(default_factory=list)
    courses: list[Course] = Field(default_factory=list)
    modules: list[Module] = Field(default_factory=list)
    units: list[Unit] = Field(default_factory=list)


class ModuleAccess(BaseModel):
    module: Module
    has_access: bool


class UnitAccess(BaseModel):
    unit: Unit
    has_access: bool


class CourseView(BaseModel):
    """Course outline with access flags for every module and unit."""

    course: Course
    modules: list[ModuleAccess] = Field(default_factory=list)
    units: list[UnitAccess] = Field(default_factory=list)


class UnitView(BaseModel):
    """One accessible unit with its accessible neighbours in course order."""

    course: Course
    unit: Unit
    prev_unit: Optional[Unit] = None
    next_unit: Optional[Unit] = None


def load_user_access_data(store: GrantStore, user_id: str, active_only: bool = True) -> UserAccessData:
    """Read the grant set and tree needed to evaluate ``user_id``.

    Args:
        store: Grant store to read from.
        user_id: Member whose grants are loaded.
        active_only: Drop inactive courses (members never see them).

    Raises:
        StorageError: if the store fails; other exceptions are wrapped.
    """
    try:
        grants = store.list_grants(user_id)
        tree = store.list_tree()
    except CourseGateError:
        raise
    except Exception as e:
        raise StorageError(f"Failed to load access data: {e}", user_id=user_id) from e

    courses = [c for c in tree.courses if c.is_active or not active_only]
    return UserAccessData(grants=grants, courses=courses, modules=tree.modules, units=tree.units)


def accessible_courses(store: GrantStore, user_id: str) -> list[Course]:
    """Active courses in which ``user_id`` can reach at least one unit (dashboard)."""
    data = load_user_access_data(store, user_id)
    return [c for c in data.courses if course_access(data.grants, c, data.units)]


def course_view(store: GrantStore, user_id: str, course_id: str) -> CourseView | None:
    """Course outline for ``user_id``, or None if absent, inactive or denied."""
    data = load_user_access_data(store, user_id)

    course = next((c for c in data.courses if c.id == course_id), None)
    if course is None:
        return None
    if not course_access(data.grants, course, data.units):
        logger.debug("Course %s hidden from %s", course_id, user_id)
        return None

    course_units = [u for u in data.units if u.course_id == course_id]
    return CourseView(
        course=course,
        modules=[
            ModuleAccess(module=m, has_access=module_access(data.grants, m, course_units))
            for m in data.modules
            if m.course_id == course_id
        ],
        units=[UnitAccess(unit=u, has_access=unit_access(data.grants, u)) for u in course_units],
    )


def unit_view(store: GrantStore, user_id: str, course_id: str, unit_id: str) -> UnitView | None:
    """A unit with previous/next accessible units, or None if absent or denied."""
    data = load_user_access_data(store, user_id)

    course = next((c for c in data.courses if c.id == course_id), None)
    if course is None:
        return None

    unit = next((u for u in data.units if u.id == unit_id and u.course_id == course_id), None)
    if unit is None or not unit_access(data.grants, unit):
        return None

    reachable = [u for u in data.units if u.course_id == course_id and unit_access(data.grants, u)]
    index = next(i for i, u in enumerate(reachable) if u.id == unit_id)
    return UnitView(
        course=course,
        unit=unit,
        prev_unit=reachable[index - 1] if index > 0 else None,
        next_unit=reachable[index + 1] if index < len(reachable) - 1 else None,
    )


__all__ = [
    "CourseView",
    "ModuleAccess",
    "UnitAccess",
    "UnitView",
    "UserAccessData",
    "accessible_courses",
    "course_view",
    "load_user_access_data",
    "unit_view",
]
