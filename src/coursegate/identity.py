"""Caller identity for grant mutations.

Authentication happens outside coursegate; the surrounding application
hands in an ``Actor`` describing the already-authenticated account.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import AuthorizationError
from .permissions.constants import Role


@dataclass(frozen=True)
class Actor:
    """Authenticated account performing an operation.

    Attributes:
        user_id: Account id (None = not authenticated).
        role: Role from the account profile ("admin", "member", ...).
    """

    user_id: str | None
    role: str = Role.MEMBER

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    def has_role(self, role: str) -> bool:
        return self.role == role


def require_admin(actor: Actor | None, admin_role: str = Role.ADMIN) -> Actor:
    """Ensure ``actor`` is an authenticated admin.

    Raises:
        AuthorizationError: if there is no actor, it is anonymous, or its
            role is not ``admin_role``.
    """
    if actor is None or not actor.is_authenticated:
        raise AuthorizationError("Not authenticated", reason="unauthenticated")
    if not actor.has_role(admin_role):
        raise AuthorizationError(
            "Permission denied",
            reason="not_admin",
            actor_id=actor.user_id,
            role=actor.role,
        )
    return actor


__all__ = ["Actor", "require_admin"]
