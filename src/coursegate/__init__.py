from .permissions import (
    SCOPE_PRECEDENCE,
    CourseStatus,
    Role,
    Scope,
    course_access,
    course_status,
    effective_access,
    find_grant,
    has_overrides,
    lookup_grant,
    module_access,
    resolve_chain,
    scope_chain,
    unit_access,
)
from .models import Course, CourseTree, Grant, Member, MemberFailure, Module, MutationResult, Unit
from .config import AccessConfig, LogLevel, load_config_from_env
from .exceptions import (
    AuthorizationError,
    ConfigurationError,
    CourseGateError,
    InvalidGrantError,
    InvalidTreeError,
    NotFoundError,
    StorageError,
)
from .identity import Actor, require_admin
from .interfaces import GrantStore, MemberDirectory
from .store import InMemoryGrantStore
from .mutator import GrantMutator
from .portal import (
    CourseView,
    UnitView,
    UserAccessData,
    accessible_courses,
    course_view,
    load_user_access_data,
    unit_view,
)
from .editor import CourseMemberAccess, MemberAccessEditor, course_member_access
from .logging import (
    AccessFormatter,
    AccessLoggerAdapter,
    get_access_logger,
    safe_preview,
    setup_logging,
)

__all__ = [
    'SCOPE_PRECEDENCE',
    'CourseStatus',
    'Role',
    'Scope',
    'course_access',
    'course_status',
    'effective_access',
    'find_grant',
    'has_overrides',
    'lookup_grant',
    'module_access',
    'resolve_chain',
    'scope_chain',
    'unit_access',
    'Course',
    'CourseTree',
    'Grant',
    'Member',
    'MemberFailure',
    'Module',
    'MutationResult',
    'Unit',
    'AccessConfig',
    'LogLevel',
    'load_config_from_env',
    'AuthorizationError',
    'ConfigurationError',
    'CourseGateError',
    'InvalidGrantError',
    'InvalidTreeError',
    'NotFoundError',
    'StorageError',
    'Actor',
    'require_admin',
    'GrantStore',
    'MemberDirectory',
    'InMemoryGrantStore',
    'GrantMutator',
    'CourseView',
    'UnitView',
    'UserAccessData',
    'accessible_courses',
    'course_view',
    'load_user_access_data',
    'unit_view',
    'CourseMemberAccess',
    'MemberAccessEditor',
    'course_member_access',
    'AccessFormatter',
    'AccessLoggerAdapter',
    'get_access_logger',
    'safe_preview',
    'setup_logging',
]
