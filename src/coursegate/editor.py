"""Admin access editors.

``MemberAccessEditor`` backs the per-member access screen: it keeps a local
copy of the member's grants, shows per-row effective access and course
badges, and patches the copy only after the store write succeeded. On a
failed write the copy is left untouched and the error result is returned,
so the screen never shows a state the store does not hold.

``course_member_access`` backs the per-course screen listing every member
with their direct course grant.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from .interfaces import GrantStore, MemberDirectory
from .models import Course, CourseTree, Grant, Member, Module, MutationResult, Unit
from .mutator import GrantMutator
from .permissions.access import grant_matches, lookup_grant
from .permissions.constants import CourseStatus, Role, Scope
from .permissions.inheritance import course_status, effective_access


class UnitRow(BaseModel):
    unit: Unit
    granted: Optional[bool] = None  # Own grant, None if inherited
    effective: bool = False


class ModuleRow(BaseModel):
    module: Module
    granted: Optional[bool] = None
    effective: bool = False
    units: list[UnitRow] = Field(default_factory=list)


class CourseRow(BaseModel):
    """One course of the member editor with its badge and child rows."""

    course: Course
    granted: Optional[bool] = None
    status: CourseStatus = CourseStatus.NONE
    modules: list[ModuleRow] = Field(default_factory=list)
    units: list[UnitRow] = Field(default_factory=list)  # Units without a module


class MemberAccessEditor:
    """Grant editor for a single member with a locally cached grant list.

    Args:
        mutator: Mutation entry points (carries the acting admin).
        store: Store used to (re)load grants and the tree.
        user_id: Member being edited.
    """

    def __init__(self, mutator: GrantMutator, store: GrantStore, user_id: str) -> None:
        self._mutator = mutator
        self._store = store
        self.user_id = user_id
        self.tree: CourseTree = CourseTree()
        self.grants: list[Grant] = []
        self.refresh()

    def refresh(self) -> None:
        """Re-fetch grants and tree from the store, dropping local state."""
        self.tree = self._store.list_tree()
        self.grants = self._store.list_grants(self.user_id)

    # ── Reads (local cache) ─────────────────────────────

    def is_granted(self, scope: Scope, scope_id: str) -> bool | None:
        return lookup_grant(self.grants, scope, scope_id)

    def effective_access(self, node: Course | Module | Unit) -> bool:
        return effective_access(self.grants, node)

    def course_status(self, course_id: str) -> CourseStatus:
        return course_status(self.grants, course_id, self.tree)

    def overview(self) -> list[CourseRow]:
        """Rows for every course, module and unit with own and effective state."""
        rows = []
        for course in self.tree.courses:
            rows.append(
                CourseRow(
                    course=course,
                    granted=self.is_granted(Scope.COURSE, course.id),
                    status=self.course_status(course.id),
                    modules=[
                        ModuleRow(
                            module=module,
                            granted=self.is_granted(Scope.MODULE, module.id),
                            effective=self.effective_access(module),
                            units=[self._unit_row(u) for u in self.tree.units_of_module(module.id)],
                        )
                        for module in self.tree.modules_of(course.id)
                    ],
                    units=[self._unit_row(u) for u in self.tree.standalone_units(course.id)],
                )
            )
        return rows

    def _unit_row(self, unit: Unit) -> UnitRow:
        return UnitRow(
            unit=unit,
            granted=self.is_granted(Scope.UNIT, unit.id),
            effective=self.effective_access(unit),
        )

    # ── Toggles ─────────────────────────────────────────

    def toggle_course(self, course_id: str, value: bool) -> MutationResult:
        """Set course-level access; on success drop cached overrides under the course."""
        result = self._mutator.set_course_level_access(self.user_id, course_id, value)
        if result.success:
            module_ids = {m.id for m in self.tree.modules_of(course_id)}
            unit_ids = {u.id for u in self.tree.units_of_course(course_id)}
            self.grants = [
                g
                for g in self.grants
                if g.module_id not in module_ids
                and g.unit_id not in unit_ids
                and not grant_matches(g, Scope.COURSE, course_id)
            ]
            self.grants.append(Grant.for_scope(self.user_id, Scope.COURSE, course_id, value))
        return result

    def toggle_module(self, module_id: str, value: bool) -> MutationResult:
        return self._toggle(Scope.MODULE, module_id, value)

    def toggle_unit(self, unit_id: str, value: bool) -> MutationResult:
        return self._toggle(Scope.UNIT, unit_id, value)

    def _toggle(self, scope: Scope, scope_id: str, value: bool) -> MutationResult:
        result = self._mutator.set_grant(self.user_id, scope, scope_id, value)
        if not result.success:
            return result
        for grant in self.grants:
            if grant_matches(grant, scope, scope_id):
                grant.is_granted = value
                break
        else:
            self.grants.append(Grant.for_scope(self.user_id, scope, scope_id, value))
        return result


# ── Per-course member overview ──────────────────────────


class MemberCourseGrant(BaseModel):
    member: Member
    granted: bool = False


class CourseMemberAccess(BaseModel):
    """Every member with their direct grant on one course."""

    course: Course
    rows: list[MemberCourseGrant] = Field(default_factory=list)

    @property
    def granted_count(self) -> int:
        return sum(1 for row in self.rows if row.granted)


def course_member_access(
    store: GrantStore,
    directory: MemberDirectory,
    course_id: str,
    member_role: str = Role.MEMBER,
) -> CourseMemberAccess | None:
    """List members with their course-level grant (absent counts as not granted).

    Returns None if the course does not exist.
    """
    course = store.list_tree().get_course(course_id)
    if course is None:
        return None
    rows = [
        MemberCourseGrant(
            member=member,
            granted=lookup_grant(store.list_grants(member.id), Scope.COURSE, course_id) is True,
        )
        for member in directory.list_members(role=member_role)
    ]
    return CourseMemberAccess(course=course, rows=rows)


__all__ = [
    "CourseMemberAccess",
    "CourseRow",
    "MemberAccessEditor",
    "MemberCourseGrant",
    "ModuleRow",
    "UnitRow",
    "course_member_access",
]
