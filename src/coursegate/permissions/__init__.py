"""Hierarchical access resolution for courses, modules and units.

Defines:
- Scope / SCOPE_PRECEDENCE: grant granularity, most specific first
- CourseStatus: admin badge classification
- unit_access / module_access / course_access: member-facing checks
- effective_access / course_status: admin-facing views of the grant rules
"""

from .access import (
    course_access,
    find_grant,
    grant_matches,
    lookup_grant,
    module_access,
    resolve_chain,
    scope_chain,
    unit_access,
)
from .constants import SCOPE_PRECEDENCE, CourseStatus, Role, Scope
from .inheritance import (
    course_status,
    effective_access,
    has_overrides,
)

__all__ = [
    "SCOPE_PRECEDENCE",
    "CourseStatus",
    "Role",
    "Scope",
    "course_access",
    "course_status",
    "effective_access",
    "find_grant",
    "grant_matches",
    "has_overrides",
    "lookup_grant",
    "module_access",
    "resolve_chain",
    "scope_chain",
    "unit_access",
]
