from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from .models import CourseTree, Grant, Member
from .permissions.constants import Scope

GrantPredicate = Callable[[Grant], bool]


class GrantStore(ABC):
    """Persistence contract for access grants and the course tree.

    Implementations raise ``StorageError`` when the backend fails.
    """

    @abstractmethod
    def list_grants(self, user_id: str) -> List[Grant]:
        """All grants of ``user_id``, in storage order."""
        raise NotImplementedError

    @abstractmethod
    def list_tree(self) -> CourseTree:
        """Snapshot of all courses, modules and units, ordered by sort_order."""
        raise NotImplementedError

    @abstractmethod
    def upsert_grant(self, user_id: str, scope: Scope, scope_id: str, is_granted: bool) -> Grant:
        """Update the grant for ``(user_id, scope, scope_id)`` or insert a new one."""
        raise NotImplementedError

    @abstractmethod
    def delete_grants(self, user_id: str, predicate: GrantPredicate) -> int:
        """Delete the grants of ``user_id`` matching ``predicate``; return the count."""
        raise NotImplementedError


class MemberDirectory(ABC):
    """Read access to member accounts."""

    @abstractmethod
    def list_members(self, role: Optional[str] = None) -> List[Member]:
        raise NotImplementedError


__all__ = ["GrantPredicate", "GrantStore", "MemberDirectory"]
