"""
forum/store.py -- SQLAlchemy-backed persistence layer for questions and answers.

Uses SQLAlchemy Core (not ORM) so the dataclasses in forum/models.py remain
the authoritative domain representation.

Pattern: Repository + Data Mapper. ForumStore is the repository; the
_row_to_* functions are the mappers. Services never touch SQL directly.

Concurrency: answers carry a version column. update_answer_content() and
delete_answer() only match the row when the caller's expected version is
still current, so a stale edit or delete affects nothing and returns False
instead of overwriting a concurrent change.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ForumStore("sqlite:///forum.db")
    store.create_question(question)
    store.create_answer(answer)
    answers = store.list_answers("question-uuid")
    store.update_answer_content("answer-uuid", "new text", expected_version=1)
    store.close()
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, select
from sqlalchemy.engine import Engine

from forum.models import Answer, Question

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_questions = Table(
    "question",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", String(200), nullable=False, unique=True),
    Column("content", String(500), nullable=False),
    Column("user_uuid", String(200), nullable=False),
    Column("created_at", String(32), nullable=False),  # ISO 8601 UTC
)

_answers = Table(
    "answer",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", String(200), nullable=False, unique=True),
    Column("content", Text, nullable=False),
    Column("user_uuid", String(200), nullable=False),
    Column("question_uuid", String(200), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
    Column("version", Integer, nullable=False, server_default="1"),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _answer_select():
    """SELECT answer columns plus the parent question's content."""
    return select(_answers, _questions.c.content.label("question_content")).join(
        _questions, _questions.c.uuid == _answers.c.question_uuid
    )


class ForumStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def create_question(self, question: Question) -> int:
        """Insert a question and return its database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _questions.insert().values(
                    uuid=question.uuid,
                    content=question.content,
                    user_uuid=question.user_uuid,
                    created_at=question.created_at.isoformat(),
                )
            )
            conn.commit()
            question.id = result.inserted_primary_key[0]
        return question.id

    def get_question(self, question_uuid: str) -> Question | None:
        with self.engine.connect() as conn:
            row = conn.execute(_questions.select().where(_questions.c.uuid == question_uuid)).fetchone()
        return _row_to_question(row) if row is not None else None

    def list_questions(self) -> list[Question]:
        """All questions, oldest first. id breaks created_at ties."""
        with self.engine.connect() as conn:
            rows = conn.execute(_questions.select().order_by(_questions.c.created_at, _questions.c.id)).fetchall()
        return [_row_to_question(r) for r in rows]

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    def create_answer(self, answer: Answer) -> int:
        """Insert an answer (version 1) and return its database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _answers.insert().values(
                    uuid=answer.uuid,
                    content=answer.content,
                    user_uuid=answer.user_uuid,
                    question_uuid=answer.question_uuid,
                    created_at=answer.created_at.isoformat(),
                    version=1,
                )
            )
            conn.commit()
            answer.id = result.inserted_primary_key[0]
        answer.version = 1
        return answer.id

    def get_answer(self, answer_uuid: str) -> Answer | None:
        with self.engine.connect() as conn:
            row = conn.execute(_answer_select().where(_answers.c.uuid == answer_uuid)).fetchone()
        return _row_to_answer(row) if row is not None else None

    def list_answers(self, question_uuid: str) -> list[Answer]:
        """Answers for one question in (created_at, id) order -- stable and total."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _answer_select()
                .where(_answers.c.question_uuid == question_uuid)
                .order_by(_answers.c.created_at, _answers.c.id)
            ).fetchall()
        return [_row_to_answer(r) for r in rows]

    def update_answer_content(self, answer_uuid: str, content: str, expected_version: int) -> bool:
        """Replace content and bump version if expected_version is still current.

        Returns True if the row was updated, False if it is gone or was
        changed by someone else since the caller read it.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _answers.update()
                .where((_answers.c.uuid == answer_uuid) & (_answers.c.version == expected_version))
                .values(content=content, version=expected_version + 1)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_answer(self, answer_uuid: str, expected_version: int) -> bool:
        """Delete the answer if expected_version is still current. Same contract as update."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _answers.delete().where((_answers.c.uuid == answer_uuid) & (_answers.c.version == expected_version))
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_question(row) -> Question:
    return Question(
        id=row.id,
        uuid=row.uuid,
        content=row.content,
        user_uuid=row.user_uuid,
        created_at=datetime.fromisoformat(row.created_at),
    )


def _row_to_answer(row) -> Answer:
    return Answer(
        id=row.id,
        uuid=row.uuid,
        content=row.content,
        user_uuid=row.user_uuid,
        question_uuid=row.question_uuid,
        created_at=datetime.fromisoformat(row.created_at),
        version=row.version,
        question_content=row.question_content,
    )
