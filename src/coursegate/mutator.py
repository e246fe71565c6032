"""Write-side operations that keep a user's grant set well-formed.

Every entry point checks that the acting account is an admin before it
touches the store, and returns a :class:`~coursegate.models.MutationResult`
instead of raising.
"""

from __future__ import annotations

from typing import Optional

from .config import AccessConfig
from .exceptions import CourseGateError, InvalidGrantError, mutation_handler
from .identity import Actor, require_admin
from .interfaces import GrantStore, MemberDirectory
from .logging import get_access_logger
from .models import Grant, MemberFailure, MutationResult
from .permissions.constants import Scope


class GrantMutator:
    """Admin mutation entry points for access grants.

    Args:
        store: Grant store to read and write.
        directory: Source of member accounts for bulk operations.
        actor: Authenticated account performing the mutations.
        config: Role names; defaults to ``AccessConfig()``.

    Example::

        mutator = GrantMutator(store, store, Actor("admin-1", role="admin"))
        mutator.set_grant("member-7", Scope.UNIT, "u2", False)
        mutator.set_course_level_access("member-7", "c1", True)  # clears u2 override
    """

    def __init__(
        self,
        store: GrantStore,
        directory: MemberDirectory,
        actor: Actor,
        config: Optional[AccessConfig] = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._actor = actor
        self._config = config or AccessConfig()
        self._logger = get_access_logger(__name__, actor_id=actor.user_id if actor else None)

    @property
    def actor(self) -> Actor:
        return self._actor

    def _require_admin(self) -> None:
        require_admin(self._actor, self._config.admin_role)

    # ── Entry points ────────────────────────────────────

    @mutation_handler
    def set_grant(self, user_id: str, scope: Scope | str, scope_id: str, is_granted: bool) -> MutationResult:
        """Upsert the grant of ``user_id`` at ``(scope, scope_id)``. No cascading."""
        self._require_admin()
        self._write_grant(user_id, scope, scope_id, is_granted)
        return MutationResult.ok()

    @mutation_handler
    def set_course_level_access(self, user_id: str, course_id: str, is_granted: bool) -> MutationResult:
        """Set the course grant and clear every finer override under the course.

        Without the cleanup an older module or unit grant would keep
        winning over the new course-level decision.
        """
        self._require_admin()
        self._apply_course_level(user_id, course_id, is_granted)
        return MutationResult.ok()

    @mutation_handler
    def set_course_access_for_all(self, course_id: str, is_granted: bool) -> MutationResult:
        """Apply course-level access to every member account.

        Members are written one at a time without a spanning transaction.
        A failing member does not stop the remaining ones; all failures are
        returned in ``failures``.
        """
        self._require_admin()
        members = self._directory.list_members(role=self._config.member_role)

        failures: list[MemberFailure] = []
        applied = 0
        for member in members:
            try:
                self._apply_course_level(member.id, course_id, is_granted)
            except CourseGateError as e:
                failures.append(MemberFailure(user_id=member.id, code=e.code, message=e.message))
                self._logger.warning("Course access failed: [%s] %s", e.code, e.message, user_id=member.id)
            except Exception as e:
                failures.append(MemberFailure(user_id=member.id, code=CourseGateError.code, message=str(e)))
                self._logger.exception("Course access failed unexpectedly", user_id=member.id)
            else:
                applied += 1

        self._logger.info(
            "Bulk course access %s for course %s: %d applied, %d failed",
            "granted" if is_granted else "revoked",
            course_id,
            applied,
            len(failures),
        )
        if failures:
            return MutationResult(
                success=False,
                error=f"{len(failures)} of {len(members)} member(s) could not be updated",
                code="PARTIAL_FAILURE",
                applied=applied,
                failures=failures,
            )
        return MutationResult.ok(applied=applied)

    # ── Internals (no admin check) ──────────────────────

    def _write_grant(self, user_id: str, scope: Scope | str, scope_id: str, is_granted: bool) -> Grant:
        try:
            scope = Scope(scope)
        except ValueError:
            raise InvalidGrantError(f"Unknown scope: {scope!r}", scope=str(scope))
        if not user_id or not scope_id:
            raise InvalidGrantError("Grant requires a user id and a scope id", user_id=user_id, scope_id=scope_id)

        grant = self._store.upsert_grant(user_id, scope, scope_id, is_granted)
        self._logger.info("Set %s grant %s -> %s", scope.value, scope_id, is_granted, user_id=user_id)
        return grant

    def _apply_course_level(self, user_id: str, course_id: str, is_granted: bool) -> int:
        self._write_grant(user_id, Scope.COURSE, course_id, is_granted)

        tree = self._store.list_tree()
        module_ids = {m.id for m in tree.modules_of(course_id)}
        unit_ids = {u.id for u in tree.units_of_course(course_id)}
        if not module_ids and not unit_ids:
            return 0

        removed = self._store.delete_grants(
            user_id,
            lambda g: g.module_id in module_ids or g.unit_id in unit_ids,
        )
        if removed:
            self._logger.info("Cleared %d override(s) under course %s", removed, course_id, user_id=user_id)
        return removed


__all__ = ["GrantMutator"]
