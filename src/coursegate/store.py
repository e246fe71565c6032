"""In-memory grant store and member directory.

Reference implementation of :class:`~coursegate.interfaces.GrantStore` and
:class:`~coursegate.interfaces.MemberDirectory`. Used by tests and by
applications that load a snapshot once and evaluate access in-process.

Tree maintenance follows the delete cascades expected from any backend:
- deleting a module detaches its units (``module_id`` cleared) and drops
  the module's grants;
- deleting a unit drops its grants;
- deleting a course drops its modules, units and every grant under it.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from .exceptions import InvalidGrantError, InvalidTreeError, NotFoundError
from .interfaces import GrantPredicate, GrantStore, MemberDirectory
from .models import Course, CourseTree, Grant, Member, Module, Unit
from .permissions.access import find_grant
from .permissions.constants import Scope

logger = logging.getLogger(__name__)


def _sorted(items: Iterable) -> list:
    return sorted(items, key=lambda item: item.sort_order)


class InMemoryGrantStore(GrantStore, MemberDirectory):
    """Thread-safe in-memory store. Each call is atomic; there are no
    multi-call transactions, so concurrent editors resolve last-write-wins."""

    def __init__(
        self,
        *,
        courses: Iterable[Course] = (),
        modules: Iterable[Module] = (),
        units: Iterable[Unit] = (),
        grants: Iterable[Grant] = (),
        members: Iterable[Member] = (),
    ) -> None:
        self._lock = threading.RLock()
        self._courses: dict[str, Course] = {c.id: c for c in courses}
        self._modules: dict[str, Module] = {m.id: m for m in modules}
        self._units: dict[str, Unit] = {u.id: u.model_copy() for u in units}
        self._grants: list[Grant] = [g.model_copy() for g in grants]
        self._members: dict[str, Member] = {m.id: m for m in members}
        # Fail fast on an inconsistent seed
        self.list_tree()

    # ── GrantStore ──────────────────────────────────────

    def list_grants(self, user_id: str) -> list[Grant]:
        with self._lock:
            return [g.model_copy() for g in self._grants if g.user_id == user_id]

    def list_tree(self) -> CourseTree:
        with self._lock:
            return CourseTree(
                courses=[c.model_copy() for c in _sorted(self._courses.values())],
                modules=[m.model_copy() for m in _sorted(self._modules.values())],
                units=[u.model_copy() for u in _sorted(self._units.values())],
            )

    def upsert_grant(self, user_id: str, scope: Scope, scope_id: str, is_granted: bool) -> Grant:
        if not user_id or not scope_id:
            raise InvalidGrantError("Grant requires a user id and a scope id", user_id=user_id, scope_id=scope_id)
        try:
            scope = Scope(scope)
        except ValueError:
            raise InvalidGrantError(f"Unknown scope: {scope!r}", scope=str(scope))

        with self._lock:
            existing = find_grant((g for g in self._grants if g.user_id == user_id), scope, scope_id)
            if existing is not None:
                existing.is_granted = is_granted
                logger.debug("Updated %s grant %s for %s -> %s", scope.value, scope_id, user_id, is_granted)
                return existing.model_copy()

            grant = Grant.for_scope(user_id, scope, scope_id, is_granted)
            self._grants.append(grant)
            logger.debug("Inserted %s grant %s for %s -> %s", scope.value, scope_id, user_id, is_granted)
            return grant.model_copy()

    def delete_grants(self, user_id: str, predicate: GrantPredicate) -> int:
        with self._lock:
            keep = [g for g in self._grants if g.user_id != user_id or not predicate(g)]
            removed = len(self._grants) - len(keep)
            self._grants = keep
            return removed

    # ── MemberDirectory ─────────────────────────────────

    def list_members(self, role: Optional[str] = None) -> list[Member]:
        with self._lock:
            members = sorted(self._members.values(), key=lambda m: m.full_name)
            return [m.model_copy() for m in members if role is None or m.role == role]

    def add_member(self, member: Member) -> Member:
        with self._lock:
            self._members[member.id] = member
            return member

    # ── Tree maintenance ────────────────────────────────

    def add_course(self, course: Course) -> Course:
        with self._lock:
            self._courses[course.id] = course
            return course

    def add_module(self, module: Module) -> Module:
        """Add or replace a module.

        Moving an existing module to another course is refused while units
        still reference it; the store is left unchanged.
        """
        with self._lock:
            if module.course_id not in self._courses:
                raise NotFoundError(f"Course {module.course_id!r} not found", course_id=module.course_id)
            current = self._modules.get(module.id)
            if current is not None and current.course_id != module.course_id:
                attached = [u.id for u in self._units.values() if u.module_id == module.id]
                if attached:
                    raise InvalidTreeError(
                        f"Module {module.id!r} still has units in course {current.course_id!r}",
                        module_id=module.id,
                        unit_ids=attached,
                    )
            self._modules[module.id] = module.model_copy()
            return module

    def add_unit(self, unit: Unit) -> Unit:
        with self._lock:
            if unit.course_id not in self._courses:
                raise NotFoundError(f"Course {unit.course_id!r} not found", course_id=unit.course_id)
            if unit.module_id is not None:
                module = self._modules.get(unit.module_id)
                if module is None:
                    raise NotFoundError(f"Module {unit.module_id!r} not found", module_id=unit.module_id)
                if module.course_id != unit.course_id:
                    raise InvalidTreeError(
                        f"Module {module.id!r} belongs to course {module.course_id!r}, not {unit.course_id!r}",
                        module_id=module.id,
                        course_id=unit.course_id,
                    )
            self._units[unit.id] = unit.model_copy()
            return unit

    def delete_unit(self, unit_id: str) -> None:
        with self._lock:
            if self._units.pop(unit_id, None) is None:
                raise NotFoundError(f"Unit {unit_id!r} not found", unit_id=unit_id)
            self._grants = [g for g in self._grants if g.unit_id != unit_id]

    def delete_module(self, module_id: str) -> list[str]:
        """Delete a module; its units stay in the course without a module.

        Returns:
            Ids of the units that were detached.
        """
        with self._lock:
            if self._modules.pop(module_id, None) is None:
                raise NotFoundError(f"Module {module_id!r} not found", module_id=module_id)
            detached = []
            for unit in self._units.values():
                if unit.module_id == module_id:
                    unit.module_id = None
                    detached.append(unit.id)
            self._grants = [g for g in self._grants if g.module_id != module_id]
            logger.info("Deleted module %s, detached %d unit(s)", module_id, len(detached))
            return detached

    def delete_course(self, course_id: str) -> None:
        with self._lock:
            if self._courses.pop(course_id, None) is None:
                raise NotFoundError(f"Course {course_id!r} not found", course_id=course_id)
            module_ids = {m.id for m in self._modules.values() if m.course_id == course_id}
            unit_ids = {u.id for u in self._units.values() if u.course_id == course_id}
            self._modules = {k: v for k, v in self._modules.items() if k not in module_ids}
            self._units = {k: v for k, v in self._units.items() if k not in unit_ids}
            self._grants = [
                g
                for g in self._grants
                if g.course_id != course_id and g.module_id not in module_ids and g.unit_id not in unit_ids
            ]
            logger.info(
                "Deleted course %s with %d module(s) and %d unit(s)",
                course_id,
                len(module_ids),
                len(unit_ids),
            )


__all__ = ["InMemoryGrantStore"]
