"""
auth/store.py -- SQLAlchemy Core persistence layer for identities and sessions.

Pattern: Repository + Data Mapper (same as forum/store.py).
UserStore is the repository; _row_to_user / _row_to_session are the mappers.
Service and route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Uniqueness:
  users.username, users.email, and user_auth.access_token are UNIQUE in SQL.
  IntegrityError on insert is translated into the domain errors the services
  expect (SignUpRestrictedError, ConflictError) so callers never import
  sqlalchemy.exc.

Session lifecycle:
  Sessions are append-only. The single mutation is mark_logged_out(), a
  conditional UPDATE guarded by "logout_at IS NULL" -- the database applies it
  at most once per token, so two concurrent sign-outs cannot both succeed.

Layer rule: no imports from api/ or forum/.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import Role, User, UserAuth
from core.errors import AlreadyLoggedOutError, ConflictError, SessionNotFoundError, SignUpRestrictedError

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", String(200), nullable=False, unique=True),
    Column("username", String(30), nullable=False, unique=True),
    Column("email", String(50), nullable=False, unique=True),
    Column("password", String(255), nullable=False),  # bcrypt hash
    Column("salt", String(200), nullable=False),
    Column("first_name", String(30), nullable=False, server_default=""),
    Column("last_name", String(30), nullable=False, server_default=""),
    Column("country", String(30)),
    Column("about_me", Text),
    Column("dob", String(30)),
    Column("contact_number", String(30)),
    Column("role", String(30), nullable=False, server_default=Role.NONADMIN.value),
)

_user_auth = Table(
    "user_auth",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", String(200), nullable=False, unique=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("access_token", String(500), nullable=False, unique=True),
    Column("login_at", String(32), nullable=False),  # ISO 8601 UTC
    Column("expires_at", String(32), nullable=False),
    Column("logout_at", String(32)),  # NULL while the session is open
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User and UserAuth entities.

    Usage:
        store = UserStore("sqlite:///forum.db")
        user_id = store.create_user(user)
        user = store.get_by_username("alice")
        store.create_session(session)
        store.mark_logged_out(token, now)
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # User queries
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises SignUpRestrictedError on a uniqueness violation. When the
        email is already registered SGR-002 wins, otherwise SGR-001 (username).
        The email check runs after the failed insert so it sees the row that
        caused the conflict, even if a concurrent signup wrote it.
        """
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        uuid=user.uuid,
                        username=user.username,
                        email=user.email,
                        password=user.password,
                        salt=user.salt,
                        first_name=user.first_name,
                        last_name=user.last_name,
                        country=user.country,
                        about_me=user.about_me,
                        dob=user.dob,
                        contact_number=user.contact_number,
                        role=user.role.value,
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as exc:
            if self.get_by_email(user.email) is not None:
                raise SignUpRestrictedError.duplicate_email() from exc
            raise SignUpRestrictedError.duplicate_username() from exc

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_uuid(self, user_uuid: str) -> User | None:
        """Look up a user by public uuid. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.uuid == user_uuid)).fetchone()
        return _row_to_user(row) if row is not None else None

    def has_users(self) -> bool:
        """Return True if at least one user record exists. Doubles as the health probe."""
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return (result or 0) > 0

    # ------------------------------------------------------------------
    # Session queries
    # ------------------------------------------------------------------

    def create_session(self, session: UserAuth) -> int:
        """Persist a newly issued session and return its database ID.

        Raises ConflictError if the token value is already stored. Token
        generation makes this practically unreachable; the UNIQUE constraint
        is what guarantees it.
        """
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _user_auth.insert().values(
                        uuid=session.uuid,
                        user_id=session.user.id,
                        access_token=session.access_token,
                        login_at=session.login_at.isoformat(),
                        expires_at=session.expires_at.isoformat(),
                        logout_at=session.logout_at.isoformat() if session.logout_at else None,
                    )
                )
                conn.commit()
                session_id = result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise ConflictError("ATH-003", "Access token already issued") from exc
        session.id = session_id
        return session_id

    def get_session_by_token(self, access_token: str) -> UserAuth | None:
        """Resolve a token to its session and owning user. No side effects."""
        with self.engine.connect() as conn:
            row = conn.execute(_session_select().where(_user_auth.c.access_token == access_token)).fetchone()
        return _row_to_session(row) if row is not None else None

    def mark_logged_out(self, access_token: str, now: datetime) -> UserAuth:
        """Stamp logout_at on an open session and return the updated session.

        The UPDATE only matches while logout_at IS NULL, which makes sign-out
        linearizable per token. A zero rowcount is disambiguated by re-reading:
          - token unknown          -> SessionNotFoundError
          - logout_at already set  -> AlreadyLoggedOutError
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _user_auth.update()
                .where((_user_auth.c.access_token == access_token) & (_user_auth.c.logout_at.is_(None)))
                .values(logout_at=now.isoformat())
            )
            conn.commit()
        session = self.get_session_by_token(access_token)
        if session is None:
            raise SessionNotFoundError(access_token)
        if result.rowcount == 0:
            raise AlreadyLoggedOutError(access_token)
        return session

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _session_select():
    """SELECT user_auth joined with its owning user, user columns prefixed u_."""
    user_cols = [c.label(f"u_{c.name}") for c in _users.c]
    return select(_user_auth, *user_cols).join(_users, _users.c.id == _user_auth.c.user_id)


def _row_to_user(row, prefix: str = "") -> User:
    m = row._mapping
    return User(
        id=m[f"{prefix}id"],
        uuid=m[f"{prefix}uuid"],
        username=m[f"{prefix}username"],
        email=m[f"{prefix}email"],
        password=m[f"{prefix}password"],
        salt=m[f"{prefix}salt"],
        first_name=m[f"{prefix}first_name"],
        last_name=m[f"{prefix}last_name"],
        country=m[f"{prefix}country"],
        about_me=m[f"{prefix}about_me"],
        dob=m[f"{prefix}dob"],
        contact_number=m[f"{prefix}contact_number"],
        role=Role(m[f"{prefix}role"]),
    )


def _row_to_session(row) -> UserAuth:
    return UserAuth(
        id=row.id,
        uuid=row.uuid,
        user=_row_to_user(row, prefix="u_"),
        access_token=row.access_token,
        login_at=datetime.fromisoformat(row.login_at),
        expires_at=datetime.fromisoformat(row.expires_at),
        logout_at=datetime.fromisoformat(row.logout_at) if row.logout_at else None,
    )
