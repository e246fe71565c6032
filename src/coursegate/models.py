"""Core data models for coursegate.

Pydantic models for the course tree, access grants, members and mutation
results. The tree is read-only from the resolver's perspective.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from .permissions.constants import Scope

if TYPE_CHECKING:
    from .exceptions import CourseGateError


# ── Course tree ──────────────────────────────────────────────────


class Course(BaseModel):
    """Top-level node. Owns modules and units (units may skip the module level)."""

    scope: ClassVar[Scope] = Scope.COURSE

    id: str
    title: str = ""
    is_active: bool = True
    sort_order: int = 0


class Module(BaseModel):
    """Groups units inside exactly one course."""

    scope: ClassVar[Scope] = Scope.MODULE

    id: str
    course_id: str
    title: str = ""
    sort_order: int = 0


class Unit(BaseModel):
    """Leaf node holding content. ``module_id`` is None for standalone units."""

    scope: ClassVar[Scope] = Scope.UNIT

    id: str
    course_id: str
    module_id: Optional[str] = None
    title: str = ""
    sort_order: int = 0


class CourseTree(BaseModel):
    """Consistent snapshot of courses, modules and units.

    Lists keep the store's ``sort_order`` ordering. Construction fails if a
    module or unit references an unknown parent, or if a unit's module
    belongs to another course.
    """

    courses: list[Course] = Field(default_factory=list)
    modules: list[Module] = Field(default_factory=list)
    units: list[Unit] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_parent_links(self) -> "CourseTree":
        course_ids = {c.id for c in self.courses}
        module_courses = {m.id: m.course_id for m in self.modules}
        for module in self.modules:
            if module.course_id not in course_ids:
                raise ValueError(f"Module {module.id!r} references unknown course {module.course_id!r}")
        for unit in self.units:
            if unit.course_id not in course_ids:
                raise ValueError(f"Unit {unit.id!r} references unknown course {unit.course_id!r}")
            if unit.module_id is None:
                continue
            if unit.module_id not in module_courses:
                raise ValueError(f"Unit {unit.id!r} references unknown module {unit.module_id!r}")
            if module_courses[unit.module_id] != unit.course_id:
                raise ValueError(
                    f"Unit {unit.id!r} is in course {unit.course_id!r} "
                    f"but its module {unit.module_id!r} is not"
                )
        return self

    def get_course(self, course_id: str) -> Course | None:
        return next((c for c in self.courses if c.id == course_id), None)

    def get_module(self, module_id: str) -> Module | None:
        return next((m for m in self.modules if m.id == module_id), None)

    def get_unit(self, unit_id: str) -> Unit | None:
        return next((u for u in self.units if u.id == unit_id), None)

    def modules_of(self, course_id: str) -> list[Module]:
        return [m for m in self.modules if m.course_id == course_id]

    def units_of_course(self, course_id: str) -> list[Unit]:
        """All units of a course, with or without a module."""
        return [u for u in self.units if u.course_id == course_id]

    def units_of_module(self, module_id: str) -> list[Unit]:
        return [u for u in self.units if u.module_id == module_id]

    def standalone_units(self, course_id: str) -> list[Unit]:
        """Units attached directly to the course, outside any module."""
        return [u for u in self.units if u.course_id == course_id and u.module_id is None]


# ── Grants ───────────────────────────────────────────────────────


class Grant(BaseModel):
    """Stored override asserting access at exactly one scope for one user.

    Exactly one of ``course_id``, ``module_id`` and ``unit_id`` is set.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    course_id: Optional[str] = None
    module_id: Optional[str] = None
    unit_id: Optional[str] = None
    is_granted: bool
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _check_single_scope(self) -> "Grant":
        named = [s for s in (self.course_id, self.module_id, self.unit_id) if s is not None]
        if len(named) != 1:
            raise ValueError("A grant must name exactly one of course_id, module_id, unit_id")
        return self

    @classmethod
    def for_scope(cls, user_id: str, scope: Scope, scope_id: str, is_granted: bool) -> "Grant":
        """Build a grant with only the id field of ``scope`` populated."""
        return cls(user_id=user_id, is_granted=is_granted, **{f"{Scope(scope).value}_id": scope_id})

    @property
    def scope(self) -> Scope:
        if self.unit_id is not None:
            return Scope.UNIT
        if self.module_id is not None:
            return Scope.MODULE
        return Scope.COURSE

    @property
    def scope_id(self) -> str:
        return getattr(self, f"{self.scope.value}_id")


# ── Members ──────────────────────────────────────────────────────


class Member(BaseModel):
    """Account listed by the member directory."""

    id: str
    full_name: str = ""
    email: str = ""
    role: str = "member"
    is_active: bool = True


# ── Mutation results ─────────────────────────────────────────────


class MemberFailure(BaseModel):
    """One failed per-member write inside a bulk operation."""

    user_id: str
    code: str
    message: str


class MutationResult(BaseModel):
    """Outcome of a mutation entry point.

    ``success`` is False whenever ``error`` is set. Bulk operations report
    every failed member in ``failures`` and the number of members written in
    ``applied``.
    """

    success: bool = True
    error: Optional[str] = None
    code: Optional[str] = None
    applied: int = 0
    failures: list[MemberFailure] = Field(default_factory=list)

    @classmethod
    def ok(cls, applied: int = 1) -> "MutationResult":
        return cls(success=True, applied=applied)

    @classmethod
    def from_error(cls, error: "CourseGateError") -> "MutationResult":
        return cls(success=False, error=error.message, code=error.code)


__all__ = [
    "Course",
    "CourseTree",
    "Grant",
    "Member",
    "MemberFailure",
    "Module",
    "MutationResult",
    "Unit",
]
