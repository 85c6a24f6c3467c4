"""
forum/models.py -- Domain dataclasses for forum content.

These are pure data containers with zero logic. Ownership and permission rules
live in forum/services.py; persistence lives in forum/store.py.

id is None before the record is written to the database. uuid is the public
identifier used in URLs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Question:
    """A question. Referenced by answers; never mutated by the answer flow."""

    uuid: str
    content: str
    user_uuid: str  # owner
    created_at: datetime
    id: int | None = None


@dataclass
class Answer:
    """An answer to a question.

    user_uuid, question_uuid, and created_at are fixed at creation. Only
    content changes, and every change bumps version (optimistic concurrency
    token checked by ForumStore on update and delete).
    """

    uuid: str
    content: str
    user_uuid: str  # owner
    question_uuid: str
    created_at: datetime
    version: int = 1
    question_content: str = ""  # filled in on reads, joined from the question
    id: int | None = None
