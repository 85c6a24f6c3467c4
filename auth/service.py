"""
auth/service.py -- Account lifecycle: signup, signin, signout.

UserService is the only place that composes the credential verifier and the
token issuer (auth/tokens.py) with the session store (auth/store.py). Routes
call these methods and never combine the pieces themselves.

Layer rule: no imports from api/ or forum/.
"""

from __future__ import annotations

import uuid

from auth.guard import Clock, utcnow
from auth.models import Role, User, UserAuth
from auth.store import UserStore
from auth.tokens import authenticate_user, generate_salt, hash_password, issue_session
from core.errors import AlreadyLoggedOutError, SessionNotFoundError, SignOutRestrictedError


class UserService:
    def __init__(self, store: UserStore, clock: Clock = utcnow) -> None:
        self.store = store
        self.clock = clock

    def signup(
        self,
        username: str,
        email: str,
        password: str,
        role: Role = Role.NONADMIN,
        **profile: str | None,
    ) -> User:
        """Register a new account.

        profile holds the display fields (first_name, last_name, country,
        about_me, dob, contact_number). Raises SignUpRestrictedError
        (SGR-001 / SGR-002) on a duplicate username or email.
        """
        salt = generate_salt()
        user = User(
            uuid=str(uuid.uuid4()),
            username=username,
            email=email,
            password=hash_password(password, salt),
            salt=salt,
            role=role,
            **profile,
        )
        user.id = self.store.create_user(user)
        return user

    def signin(self, username: str, password: str) -> UserAuth:
        """Verify credentials and issue an 8-hour session."""
        user = authenticate_user(self.store, username, password)
        return issue_session(self.store, user, self.clock())

    def signout(self, access_token: str) -> UserAuth:
        """Close an active session.

        Fails with SGR-001 if the token is unknown, already signed out, or
        expired. Two concurrent sign-outs of one token: the store lets
        exactly one through, the other lands here as AlreadyLoggedOutError.
        """
        now = self.clock()
        session = self.store.get_session_by_token(access_token) if access_token else None
        if session is None or not session.is_active(now):
            raise SignOutRestrictedError()
        try:
            return self.store.mark_logged_out(access_token, now)
        except (SessionNotFoundError, AlreadyLoggedOutError) as exc:
            raise SignOutRestrictedError() from exc
