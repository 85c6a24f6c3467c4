"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class. Mirrors forum/models.py: dataclasses own domain shape;
stores and services do the work. The only behaviour here is the two derived
predicates (User.is_admin, UserAuth.is_active).

Layer rule: no imports from api/ or forum/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Closed set of account roles. Fixed at account creation."""

    ADMIN = "admin"
    NONADMIN = "nonadmin"


@dataclass
class User:
    """A registered forum account (an Identity).

    uuid is the public identifier used in URLs and token subjects; id is the
    database primary key and never leaves the store.

    password holds the bcrypt hash computed with salt. Both are stored so the
    verifier can recompute the hash deterministically at sign-in.
    """

    uuid: str
    username: str
    email: str
    password: str
    salt: str
    first_name: str = ""
    last_name: str = ""
    country: str | None = None
    about_me: str | None = None
    dob: str | None = None
    contact_number: str | None = None
    role: Role = Role.NONADMIN
    id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass
class UserAuth:
    """An issued access token and its validity window (a Session).

    expires_at is fixed at issuance (login_at + 8h) and never extended.
    logout_at is set once, at sign-out; the row itself is never deleted.
    """

    uuid: str
    user: User
    access_token: str
    login_at: datetime
    expires_at: datetime
    logout_at: datetime | None = None
    id: int | None = None

    def is_active(self, now: datetime) -> bool:
        return self.logout_at is None and now < self.expires_at
