"""
auth/tokens.py -- Password hashing, credential verification, and session issuance.

Security design decisions:
  Passwords: bcrypt, called directly (no passlib wrapper). The salt is
       generated per user at signup and stored next to the hash, so the
       verifier can recompute bcrypt(password, salt) deterministically and
       compare the result byte-for-byte with hmac.compare_digest. The
       _DUMMY_SALT constant enables timing equalization in authenticate_user()
       so response time does not reveal whether a username exists.

  Tokens: python-jose HS256 JWTs signed with SECRET_KEY. Claims: sub (user
       uuid), jti (128-bit random id that makes every token value unique),
       iat, exp. The stored session row, not the JWT claims, is the source of
       truth for validity -- the guard only uses the signature to reject
       forged values before touching the database.

  Session window: SESSION_TTL is fixed at 8 hours. It is deliberately not a
       settings field.

Layer rule: no imports from api/ or forum/. Import from core/ is allowed.
"""

from __future__ import annotations

import hmac
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import UserAuth
from core.config import get_settings
from core.errors import AuthenticationFailedError

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

_settings = get_settings()

_ALGORITHM = "HS256"

SESSION_TTL = timedelta(hours=8)

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def generate_salt() -> str:
    """Return a fresh bcrypt salt (cost from Settings.bcrypt_rounds)."""
    return bcrypt.gensalt(rounds=_settings.bcrypt_rounds).decode("utf-8")


def hash_password(plain: str, salt: str) -> str:
    """Return bcrypt(plain, salt). Same inputs always give the same hash.

    bcrypt rejects passwords over 72 bytes; the API caps password length
    below that (Pydantic field).
    """
    return bcrypt.hashpw(plain.encode("utf-8"), salt.encode("utf-8")).decode("utf-8")


def verify_password(plain: str, salt: str, hashed: str) -> bool:
    """Return True if bcrypt(plain, salt) equals the stored hash."""
    try:
        candidate = hash_password(plain, salt)
    except ValueError:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), hashed.encode("utf-8"))


# Computed once at module load so the first failed login is not measurably
# faster than later ones.
_DUMMY_SALT: str = generate_salt()


# ---------------------------------------------------------------------------
# Credential verifier (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, username: str, password: str) -> User:
    """Verify a username/password pair and return the matching User.

    Always runs bcrypt whether or not the user exists:
    - Unknown username: bcrypt runs against _DUMMY_SALT, then ATH-001.
    - Wrong password: bcrypt runs against the real salt, then ATH-002.

    Both failures are AuthenticationFailedError (HTTP 401); only the code
    differs.
    """
    user = store.get_by_username(username)
    if user is None:
        verify_password(password, _DUMMY_SALT, "")
        raise AuthenticationFailedError("ATH-001", "This username does not exist")
    if not verify_password(password, user.salt, user.password):
        raise AuthenticationFailedError("ATH-002", "Password failed")
    return user


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_uuid: str, issued_at: datetime, expires_at: datetime) -> str:
    """Encode a signed JWT for user_uuid valid from issued_at to expires_at."""
    payload = {
        "sub": user_uuid,
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Verify the token signature and return its claims, or None on any failure.

    exp is not checked here: expiry is judged against the stored session and
    the caller's clock, so a single clock governs the whole guard.
    """
    try:
        payload = jwt.decode(
            token,
            _settings.secret_key,
            algorithms=[_ALGORITHM],
            options={"verify_exp": False, "verify_iat": False},
        )
    except JWTError:
        return None
    if "sub" not in payload or "jti" not in payload:
        return None
    return payload


# ---------------------------------------------------------------------------
# Token issuer
# ---------------------------------------------------------------------------


def issue_session(store: UserStore, user: User, now: datetime) -> UserAuth:
    """Mint a session for a verified user and persist it.

    expires_at is exactly now + SESSION_TTL. The session is written through
    UserStore.create_session, which raises ConflictError on a token clash.
    """
    expires_at = now + SESSION_TTL
    session = UserAuth(
        uuid=str(uuid.uuid4()),
        user=user,
        access_token=create_access_token(user.uuid, now, expires_at),
        login_at=now,
        expires_at=expires_at,
    )
    store.create_session(session)
    return session
