"""Tests for access resolution: precedence, rollups, effective access and status."""

from __future__ import annotations

import pytest
from coursegate import (
    SCOPE_PRECEDENCE,
    Course,
    CourseStatus,
    CourseTree,
    Grant,
    Module,
    Scope,
    Unit,
    course_access,
    course_status,
    effective_access,
    lookup_grant,
    module_access,
    scope_chain,
    unit_access,
)
from pydantic import ValidationError


def course_grant(course_id: str, granted: bool, user_id: str = "x") -> Grant:
    return Grant(user_id=user_id, course_id=course_id, is_granted=granted)


def module_grant(module_id: str, granted: bool, user_id: str = "x") -> Grant:
    return Grant(user_id=user_id, module_id=module_id, is_granted=granted)


def unit_grant(unit_id: str, granted: bool, user_id: str = "x") -> Grant:
    return Grant(user_id=user_id, unit_id=unit_id, is_granted=granted)


class TestScopeChain:
    """Tests for scope chain construction."""

    def test_precedence_order(self) -> None:
        """Unit is most specific, course least."""
        assert SCOPE_PRECEDENCE == (Scope.UNIT, Scope.MODULE, Scope.COURSE)

    def test_unit_in_module(self, tree: CourseTree) -> None:
        chain = scope_chain(tree.get_unit("u1"))
        assert chain == [(Scope.UNIT, "u1"), (Scope.MODULE, "m1"), (Scope.COURSE, "c1")]

    def test_standalone_unit_skips_module(self, tree: CourseTree) -> None:
        chain = scope_chain(tree.get_unit("u3"))
        assert chain == [(Scope.UNIT, "u3"), (Scope.COURSE, "c1")]

    def test_module_and_course(self, tree: CourseTree) -> None:
        assert scope_chain(tree.get_module("m1")) == [(Scope.MODULE, "m1"), (Scope.COURSE, "c1")]
        assert scope_chain(tree.get_course("c1")) == [(Scope.COURSE, "c1")]


class TestLookupGrant:
    """Tests for tri-state grant lookup."""

    def test_absent_is_none(self) -> None:
        assert lookup_grant([], Scope.COURSE, "c1") is None

    def test_unit_grant_is_not_a_course_grant(self) -> None:
        grants = [unit_grant("u1", True)]
        assert lookup_grant(grants, Scope.UNIT, "u1") is True
        assert lookup_grant(grants, Scope.COURSE, "c1") is None
        assert lookup_grant(grants, Scope.MODULE, "m1") is None

    def test_false_is_not_absent(self) -> None:
        assert lookup_grant([module_grant("m1", False)], Scope.MODULE, "m1") is False


class TestUnitAccess:
    """Tests for unit precedence resolution."""

    def test_unit_grant_wins_over_everything(self, tree: CourseTree) -> None:
        """The unit grant decides regardless of module and course grants."""
        u1 = tree.get_unit("u1")
        for outer in (True, False):
            grants = [course_grant("c1", outer), module_grant("m1", outer), unit_grant("u1", not outer)]
            assert unit_access(grants, u1) is (not outer)

    def test_fallback_chain(self, tree: CourseTree) -> None:
        """Removing levels one by one falls back module → course → deny."""
        u1 = tree.get_unit("u1")
        grants = [course_grant("c1", True), module_grant("m1", False), unit_grant("u1", True)]
        assert unit_access(grants, u1) is True
        grants = grants[:2]
        assert unit_access(grants, u1) is False  # module grant
        grants = grants[:1]
        assert unit_access(grants, u1) is True  # course grant
        assert unit_access([], u1) is False

    def test_standalone_unit_ignores_module_grants(self, tree: CourseTree) -> None:
        grants = [module_grant("m1", True), course_grant("c1", False)]
        assert unit_access(grants, tree.get_unit("u3")) is False

    def test_grants_of_other_course_do_not_apply(self, tree: CourseTree) -> None:
        assert unit_access([course_grant("c2", True)], tree.get_unit("u1")) is False

    def test_duplicate_grants_first_wins(self, tree: CourseTree) -> None:
        """Malformed sets with duplicates resolve to the first in storage order."""
        u1 = tree.get_unit("u1")
        assert unit_access([unit_grant("u1", True), unit_grant("u1", False)], u1) is True
        assert unit_access([unit_grant("u1", False), unit_grant("u1", True)], u1) is False

    def test_multi_scope_record_does_not_crash(self, tree: CourseTree) -> None:
        """A record naming two scopes only counts at its most specific one."""
        broken = Grant.model_construct(
            id="g", user_id="x", course_id="c1", module_id=None, unit_id="u1", is_granted=True
        )
        assert unit_access([broken], tree.get_unit("u1")) is True
        assert unit_access([broken], tree.get_unit("u2")) is False


class TestDefaultDeny:
    """With zero grants nothing is visible."""

    def test_everything_denied(self, tree: CourseTree) -> None:
        for unit in tree.units:
            assert unit_access([], unit) is False
        for module in tree.modules:
            assert module_access([], module, tree.units) is False
        for course in tree.courses:
            assert course_access([], course, tree.units) is False


class TestModuleAccess:
    """Tests for the existential module rollup."""

    def test_one_granted_unit_makes_module_visible(self, tree: CourseTree) -> None:
        m1 = tree.get_module("m1")
        grants = [module_grant("m1", False), unit_grant("u2", True)]
        assert module_access(grants, m1, tree.units) is True

    def test_all_units_denied(self, tree: CourseTree) -> None:
        m1 = tree.get_module("m1")
        grants = [course_grant("c1", True), unit_grant("u1", False), unit_grant("u2", False)]
        assert module_access(grants, m1, tree.units) is False

    def test_rollup_is_monotonic(self, tree: CourseTree) -> None:
        """Flipping one unit to granted never hides the module."""
        m1 = tree.get_module("m1")
        base = [unit_grant("u1", False), unit_grant("u2", False)]
        assert module_access(base, m1, tree.units) is False
        flipped = [unit_grant("u1", True), unit_grant("u2", False)]
        assert module_access(flipped, m1, tree.units) is True

    def test_empty_module_uses_module_then_course_grant(self) -> None:
        empty = Module(id="m9", course_id="c1")
        assert module_access([module_grant("m9", True)], empty, []) is True
        assert module_access([course_grant("c1", True)], empty, []) is True
        assert module_access([module_grant("m9", False), course_grant("c1", True)], empty, []) is False
        assert module_access([], empty, []) is False

    def test_units_of_other_modules_are_ignored(self, tree: CourseTree) -> None:
        """Passing the full unit list only considers units of the module."""
        m1 = tree.get_module("m1")
        assert module_access([unit_grant("u3", True)], m1, tree.units) is False


class TestCourseAccess:
    """Tests for the existential course rollup."""

    def test_standalone_unit_counts(self, tree: CourseTree) -> None:
        c1 = tree.get_course("c1")
        assert course_access([unit_grant("u3", True)], c1, tree.units) is True

    def test_course_grant_denied_but_unit_granted(self, tree: CourseTree) -> None:
        c1 = tree.get_course("c1")
        assert course_access([course_grant("c1", False), unit_grant("u1", True)], c1, tree.units) is True

    def test_empty_course_uses_direct_grant(self) -> None:
        empty = Course(id="c9")
        assert course_access([course_grant("c9", True)], empty, []) is True
        assert course_access([course_grant("c9", False)], empty, []) is False
        assert course_access([], empty, []) is False


class TestEffectiveAccess:
    """Strict fallback used by admin toggles, distinct from the rollups."""

    def test_differs_from_module_rollup(self, tree: CourseTree) -> None:
        """Module grant off with one unit on: member sees it, toggle shows off."""
        m1 = tree.get_module("m1")
        grants = [module_grant("m1", False), unit_grant("u1", True)]
        assert module_access(grants, m1, tree.units) is True
        assert effective_access(grants, m1) is False

    def test_inherits_from_course(self, tree: CourseTree) -> None:
        grants = [course_grant("c1", True)]
        assert effective_access(grants, tree.get_module("m1")) is True
        assert effective_access(grants, tree.get_unit("u3")) is True

    def test_unit_inherits_from_module(self, tree: CourseTree) -> None:
        """Module grant beats the course grant for a unit without its own grant."""
        grants = [module_grant("m1", True), course_grant("c1", False)]
        assert effective_access(grants, tree.get_unit("u1")) is True
        assert effective_access(grants, tree.get_unit("u3")) is False

    def test_unit_grant_beats_module(self, tree: CourseTree) -> None:
        grants = [module_grant("m1", True), course_grant("c1", False), unit_grant("u1", False)]
        assert effective_access(grants, tree.get_unit("u1")) is False
        assert effective_access(grants, tree.get_unit("u2")) is True

    def test_unit_skips_to_course_without_module_grant(self, tree: CourseTree) -> None:
        grants = [course_grant("c1", True), module_grant("m2", False)]
        assert effective_access(grants, tree.get_unit("u1")) is True

    def test_course_ignores_children(self, tree: CourseTree) -> None:
        grants = [unit_grant("u1", True)]
        assert effective_access(grants, tree.get_course("c1")) is False
        assert course_access(grants, tree.get_course("c1"), tree.units) is True

    def test_no_grants(self, tree: CourseTree) -> None:
        assert effective_access([], tree.get_unit("u1")) is False


class TestCourseStatus:
    """Tests for the full / partial / none classification."""

    def test_full(self, tree: CourseTree) -> None:
        assert course_status([course_grant("c1", True)], "c1", tree) == CourseStatus.FULL

    def test_partial_with_course_grant(self, tree: CourseTree) -> None:
        grants = [course_grant("c1", True), unit_grant("u2", False)]
        assert course_status(grants, "c1", tree) == CourseStatus.PARTIAL

    def test_partial_without_course_grant(self, tree: CourseTree) -> None:
        assert course_status([module_grant("m1", True)], "c1", tree) == CourseStatus.PARTIAL
        assert course_status([course_grant("c1", False), unit_grant("u3", True)], "c1", tree) == CourseStatus.PARTIAL

    def test_none(self, tree: CourseTree) -> None:
        assert course_status([], "c1", tree) == CourseStatus.NONE
        assert course_status([course_grant("c1", False)], "c1", tree) == CourseStatus.NONE

    def test_overrides_in_other_course_are_ignored(self, tree: CourseTree) -> None:
        grants = [course_grant("c1", True), unit_grant("u4", False)]
        assert course_status(grants, "c1", tree) == CourseStatus.FULL

    def test_status_is_not_rollup(self, tree: CourseTree) -> None:
        """All units denied by override: course hidden from member, status partial."""
        grants = [course_grant("c1", True)] + [unit_grant(u, False) for u in ("u1", "u2", "u3")]
        assert course_access(grants, tree.get_course("c1"), tree.units) is False
        assert course_status(grants, "c1", tree) == CourseStatus.PARTIAL


class TestModels:
    """Grant and tree invariants enforced by the models."""

    def test_grant_requires_exactly_one_scope(self) -> None:
        with pytest.raises(ValidationError, match="exactly one"):
            Grant(user_id="x", is_granted=True)
        with pytest.raises(ValidationError, match="exactly one"):
            Grant(user_id="x", course_id="c1", unit_id="u1", is_granted=True)

    def test_grant_for_scope(self) -> None:
        grant = Grant.for_scope("x", Scope.MODULE, "m1", True)
        assert grant.module_id == "m1"
        assert grant.course_id is None and grant.unit_id is None
        assert grant.scope == Scope.MODULE
        assert grant.scope_id == "m1"

    def test_tree_rejects_cross_course_module(self) -> None:
        with pytest.raises(ValidationError, match="its module"):
            CourseTree(
                courses=[Course(id="c1"), Course(id="c2")],
                modules=[Module(id="m1", course_id="c1")],
                units=[Unit(id="u1", course_id="c2", module_id="m1")],
            )

    def test_tree_lookups(self, tree: CourseTree) -> None:
        assert [u.id for u in tree.units_of_course("c1")] == ["u1", "u2", "u3"]
        assert [u.id for u in tree.units_of_module("m1")] == ["u1", "u2"]
        assert [u.id for u in tree.standalone_units("c1")] == ["u3"]
        assert tree.get_unit("missing") is None
