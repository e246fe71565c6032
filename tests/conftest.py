"""Shared fixtures: course C1 with module M1 (units U1, U2) and standalone unit U3."""

from __future__ import annotations

import pytest
from coursegate import (
    Actor,
    Course,
    CourseTree,
    GrantMutator,
    InMemoryGrantStore,
    Member,
    Module,
    Unit,
)


@pytest.fixture
def tree() -> CourseTree:
    return CourseTree(
        courses=[
            Course(id="c1", title="Grundlagen", sort_order=0),
            Course(id="c2", title="Aufbau", sort_order=1),
        ],
        modules=[
            Module(id="m1", course_id="c1", title="Modul 1", sort_order=0),
            Module(id="m2", course_id="c2", title="Modul 2", sort_order=0),
        ],
        units=[
            Unit(id="u1", course_id="c1", module_id="m1", sort_order=0),
            Unit(id="u2", course_id="c1", module_id="m1", sort_order=1),
            Unit(id="u3", course_id="c1", sort_order=2),
            Unit(id="u4", course_id="c2", module_id="m2", sort_order=0),
        ],
    )


@pytest.fixture
def store(tree: CourseTree) -> InMemoryGrantStore:
    return InMemoryGrantStore(
        courses=tree.courses,
        modules=tree.modules,
        units=tree.units,
        members=[
            Member(id="x", full_name="Anna Beck", role="member"),
            Member(id="y", full_name="Ben Claus", role="member"),
            Member(id="admin-1", full_name="Admin", role="admin"),
        ],
    )


@pytest.fixture
def admin() -> Actor:
    return Actor("admin-1", role="admin")


@pytest.fixture
def mutator(store: InMemoryGrantStore, admin: Actor) -> GrantMutator:
    return GrantMutator(store, store, admin)
