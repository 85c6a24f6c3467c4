"""
auth/guard.py -- The authorization pipeline every protected operation runs through.

Pattern: Chain of Responsibility with a fixed prefix and a pluggable tail.

  1. Token resolvable   -- signed by us and stored as a session   else ATHR-001
  2. Session active     -- not signed out and not expired         else ATHR-002
  3. Resource exists    -- policy-supplied                        else ANS-001 / QUES-001 / USR-001
  4. Permission         -- policy-supplied (require_owner...)     else ATHR-003

Steps 1-2 live here and nowhere else. Resource services pass a policy
callable for steps 3-4; the policy receives the resolved User and returns
whatever resource it loaded, which comes back on the Authorization result.

Expiry: a session past expires_at fails step 2 with ATHR-002, the same as an
explicit sign-out. Sign-out (auth/service.py) applies the same rule, so one
expiry policy holds everywhere.

Layer rule: no imports from api/ or forum/.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generic, TypeVar

from auth.models import User, UserAuth
from auth.store import UserStore
from auth.tokens import decode_access_token
from core.errors import AuthorizationFailedError

T = TypeVar("T")

Policy = Callable[[User], T]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Authorization(Generic[T]):
    """Outcome of a successful guard pass."""

    session: UserAuth
    user: User
    resource: T | None = None


class AuthorizationGuard:
    """Resolve a presented token to an active session, then apply a policy.

    Usage:
        guard = AuthorizationGuard(user_store)
        session = guard.resolve(token, action="get the answers")
        auth = guard.authorize(token, load_answer_for_edit, action="edit an answer")
        answer = auth.resource
    """

    def __init__(self, store: UserStore, clock: Clock = utcnow) -> None:
        self.store = store
        self.clock = clock

    def resolve(self, token: str | None, action: str = "access this resource") -> UserAuth:
        """Run the fixed prefix (steps 1-2) and return the active session.

        action completes the ATHR-002 message ("...Sign in first to <action>").
        """
        if not token or decode_access_token(token) is None:
            raise AuthorizationFailedError.not_signed_in()
        session = self.store.get_session_by_token(token)
        if session is None:
            raise AuthorizationFailedError.not_signed_in()
        if not session.is_active(self.clock()):
            raise AuthorizationFailedError.signed_out(action)
        return session

    def authorize(
        self,
        token: str | None,
        policy: Policy[T] | None = None,
        action: str = "access this resource",
    ) -> Authorization[T]:
        """Run steps 1-2, then the policy (steps 3-4) against the resolved user."""
        session = self.resolve(token, action)
        resource = policy(session.user) if policy is not None else None
        return Authorization(session=session, user=session.user, resource=resource)


# ---------------------------------------------------------------------------
# Permission checks (step 4 building blocks)
# ---------------------------------------------------------------------------


def require_owner(user: User, owner_uuid: str, message: str) -> None:
    """Pass only if user owns the resource. Roles grant nothing here."""
    if user.uuid != owner_uuid:
        raise AuthorizationFailedError.forbidden(message)


def require_owner_or_admin(user: User, owner_uuid: str, message: str) -> None:
    """Pass if user owns the resource or holds the admin role."""
    if user.uuid != owner_uuid and not user.is_admin:
        raise AuthorizationFailedError.forbidden(message)
