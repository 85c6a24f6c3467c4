"""Unit tests for forum/services.py -- answer and question operations behind the guard.

Covers:
- Ownership scenario: U1 answers, U2 cannot edit, admin U3 deletes, U1 no longer sees it
- Edit is owner-only (an admin non-owner is forbidden); delete is owner-or-admin
- Existence checks: QUES-001 for unknown questions, ANS-001 for unknown answers
- Edit keeps uuid, owner, question, and created_at; bumps version
- Listing order is (created_at, id) and scoped to one question
- Lost races: a stale version -> ANS-002, a vanished answer -> ANS-001
- Guard failures surface before any resource check
"""

import pytest

from auth.guard import AuthorizationGuard
from auth.models import Role
from auth.service import UserService
from auth.store import UserStore
from core.errors import (
    AnswerNotFoundError,
    AuthorizationFailedError,
    ConflictError,
    InvalidQuestionError,
)
from forum.services import AnswerService, QuestionService
from forum.store import ForumStore

# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def users(user_store: UserStore, clock) -> UserService:
    service = UserService(user_store, clock=clock)
    service.signup("u1", "u1@example.com", "u1pass123")
    service.signup("u2", "u2@example.com", "u2pass123")
    service.signup("u3", "u3@example.com", "u3pass123", role=Role.ADMIN)
    return service


@pytest.fixture
def tokens(users: UserService) -> dict[str, str]:
    return {name: users.signin(name, f"{name}pass123").access_token for name in ("u1", "u2", "u3")}


@pytest.fixture
def guard(user_store: UserStore, clock) -> AuthorizationGuard:
    return AuthorizationGuard(user_store, clock=clock)


@pytest.fixture
def answers(guard: AuthorizationGuard, forum_store: ForumStore, clock) -> AnswerService:
    return AnswerService(guard, forum_store, clock=clock)


@pytest.fixture
def questions(guard: AuthorizationGuard, forum_store: ForumStore, clock) -> QuestionService:
    return QuestionService(guard, forum_store, clock=clock)


@pytest.fixture
def q1(questions: QuestionService, tokens: dict[str, str]):
    return questions.create_question(tokens["u2"], "What is a closure?")


# ---------------------------------------------------------------------------
# TestOwnershipScenario
# ---------------------------------------------------------------------------


class TestOwnershipScenario:
    def test_owner_answers_other_cannot_edit_admin_deletes(self, answers: AnswerService, tokens, users, q1) -> None:
        a1 = answers.create_answer(tokens["u1"], q1.uuid, "hello")
        u1 = users.store.get_by_username("u1")
        assert a1.user_uuid == u1.uuid
        assert a1.question_uuid == q1.uuid

        with pytest.raises(AuthorizationFailedError) as exc_info:
            answers.edit_answer(tokens["u2"], a1.uuid, "x")
        assert exc_info.value.code == "ATHR-003"
        assert exc_info.value.message == "Only the answer owner can edit the answer"

        removed = answers.delete_answer(tokens["u3"], a1.uuid)
        assert removed.uuid == a1.uuid

        assert a1.uuid not in [a.uuid for a in answers.list_answers(tokens["u1"], q1.uuid)]


# ---------------------------------------------------------------------------
# TestEditAnswer
# ---------------------------------------------------------------------------


class TestEditAnswer:
    def test_owner_edit_keeps_identity_fields(self, answers: AnswerService, forum_store, tokens, q1, clock) -> None:
        a1 = answers.create_answer(tokens["u1"], q1.uuid, "hello")
        clock.advance(minutes=10)
        edited = answers.edit_answer(tokens["u1"], a1.uuid, "hello, edited")

        stored = forum_store.get_answer(a1.uuid)
        assert stored.content == "hello, edited"
        assert stored.version == edited.version == 2
        assert (stored.uuid, stored.user_uuid, stored.question_uuid) == (a1.uuid, a1.user_uuid, q1.uuid)
        assert stored.created_at == a1.created_at

    def test_admin_non_owner_cannot_edit(self, answers: AnswerService, forum_store, tokens, q1) -> None:
        a1 = answers.create_answer(tokens["u1"], q1.uuid, "hello")
        with pytest.raises(AuthorizationFailedError) as exc_info:
            answers.edit_answer(tokens["u3"], a1.uuid, "admin was here")
        assert exc_info.value.code == "ATHR-003"
        assert forum_store.get_answer(a1.uuid).content == "hello"

    def test_unknown_answer_is_ans_001(self, answers: AnswerService, tokens) -> None:
        with pytest.raises(AnswerNotFoundError) as exc_info:
            answers.edit_answer(tokens["u1"], "no-such-answer", "x")
        assert exc_info.value.code == "ANS-001"
        assert exc_info.value.message == "Entered answer uuid does not exist"

    def test_signed_out_owner_is_athr_002_not_forbidden(self, answers: AnswerService, users, tokens, q1) -> None:
        a1 = answers.create_answer(tokens["u1"], q1.uuid, "hello")
        users.signout(tokens["u1"])
        with pytest.raises(AuthorizationFailedError) as exc_info:
            answers.edit_answer(tokens["u1"], a1.uuid, "x")
        assert exc_info.value.code == "ATHR-002"
        assert exc_info.value.message == "User is signed out.Sign in first to edit an answer"

    def test_stale_version_is_ans_002(self, answers: AnswerService, forum_store, tokens, q1) -> None:
        """An edit that read version 1 loses to one that already bumped it to 2."""
        a1 = answers.create_answer(tokens["u1"], q1.uuid, "hello")
        assert forum_store.update_answer_content(a1.uuid, "concurrent", expected_version=1)

        real_get = forum_store.get_answer
        reads = []

        def stale_first_read(uuid):
            answer = real_get(uuid)
            if not reads:
                answer.version = 1
            reads.append(uuid)
            return answer

        forum_store.get_answer = stale_first_read
        with pytest.raises(ConflictError) as exc_info:
            answers.edit_answer(tokens["u1"], a1.uuid, "mine")
        assert exc_info.value.code == "ANS-002"
        assert exc_info.value.status_code == 409
        assert real_get(a1.uuid).content == "concurrent"

    def test_vanished_answer_is_ans_001(self, answers: AnswerService, forum_store, tokens, q1) -> None:
        a1 = answers.create_answer(tokens["u1"], q1.uuid, "hello")
        real_update = forum_store.update_answer_content

        def delete_first(uuid, content, expected_version):
            forum_store.delete_answer(uuid, expected_version)
            return real_update(uuid, content, expected_version)

        forum_store.update_answer_content = delete_first
        with pytest.raises(AnswerNotFoundError):
            answers.edit_answer(tokens["u1"], a1.uuid, "mine")


# ---------------------------------------------------------------------------
# TestDeleteAnswer
# ---------------------------------------------------------------------------


class TestDeleteAnswer:
    def test_owner_can_delete(self, answers: AnswerService, forum_store, tokens, q1) -> None:
        a1 = answers.create_answer(tokens["u1"], q1.uuid, "hello")
        answers.delete_answer(tokens["u1"], a1.uuid)
        assert forum_store.get_answer(a1.uuid) is None

    def test_nonadmin_non_owner_forbidden(self, answers: AnswerService, forum_store, tokens, q1) -> None:
        a1 = answers.create_answer(tokens["u1"], q1.uuid, "hello")
        with pytest.raises(AuthorizationFailedError) as exc_info:
            answers.delete_answer(tokens["u2"], a1.uuid)
        assert exc_info.value.code == "ATHR-003"
        assert exc_info.value.message == "Only the answer owner or admin can delete the answer"
        assert forum_store.get_answer(a1.uuid) is not None

    def test_delete_twice_is_ans_001(self, answers: AnswerService, tokens, q1) -> None:
        a1 = answers.create_answer(tokens["u1"], q1.uuid, "hello")
        answers.delete_answer(tokens["u1"], a1.uuid)
        with pytest.raises(AnswerNotFoundError):
            answers.delete_answer(tokens["u3"], a1.uuid)

    def test_delete_after_concurrent_edit_is_ans_002(self, answers: AnswerService, forum_store, tokens, q1) -> None:
        a1 = answers.create_answer(tokens["u1"], q1.uuid, "hello")
        real_delete = forum_store.delete_answer

        def edit_first(uuid, expected_version):
            forum_store.update_answer_content(uuid, "edited meanwhile", expected_version)
            return real_delete(uuid, expected_version)

        forum_store.delete_answer = edit_first
        with pytest.raises(ConflictError) as exc_info:
            answers.delete_answer(tokens["u3"], a1.uuid)
        assert exc_info.value.code == "ANS-002"
        assert forum_store.get_answer(a1.uuid).content == "edited meanwhile"


# ---------------------------------------------------------------------------
# TestCreateAndList
# ---------------------------------------------------------------------------


class TestCreateAndList:
    def test_create_on_unknown_question_is_ques_001(self, answers: AnswerService, tokens) -> None:
        with pytest.raises(InvalidQuestionError) as exc_info:
            answers.create_answer(tokens["u1"], "no-such-question", "hello")
        assert exc_info.value.code == "QUES-001"
        assert exc_info.value.message == "The question entered is invalid"

    def test_list_unknown_question_is_ques_001(self, answers: AnswerService, tokens) -> None:
        with pytest.raises(InvalidQuestionError) as exc_info:
            answers.list_answers(tokens["u1"], "no-such-question")
        assert exc_info.value.message == "The question with entered uuid whose details are to be seen does not exist"

    def test_unknown_token_checked_before_question(self, answers: AnswerService) -> None:
        with pytest.raises(AuthorizationFailedError) as exc_info:
            answers.create_answer("garbage", "no-such-question", "hello")
        assert exc_info.value.code == "ATHR-001"

    def test_list_is_ordered_and_scoped(self, answers: AnswerService, questions, tokens, q1, clock) -> None:
        q2 = questions.create_question(tokens["u1"], "Another question")
        first = answers.create_answer(tokens["u1"], q1.uuid, "first")
        clock.advance(seconds=1)
        second = answers.create_answer(tokens["u2"], q1.uuid, "second")
        # same timestamp as second: id breaks the tie
        third = answers.create_answer(tokens["u3"], q1.uuid, "third")
        answers.create_answer(tokens["u1"], q2.uuid, "elsewhere")

        listed = answers.list_answers(tokens["u2"], q1.uuid)
        assert [a.uuid for a in listed] == [first.uuid, second.uuid, third.uuid]
        assert all(a.question_content == "What is a closure?" for a in listed)

    def test_list_empty_question(self, answers: AnswerService, tokens, q1) -> None:
        assert answers.list_answers(tokens["u1"], q1.uuid) == []

    def test_questions_listed_oldest_first(self, questions: QuestionService, tokens, q1, clock) -> None:
        clock.advance(seconds=1)
        q2 = questions.create_question(tokens["u1"], "Later")
        assert [q.uuid for q in questions.list_questions(tokens["u3"])] == [q1.uuid, q2.uuid]

    def test_question_create_requires_active_session(self, questions: QuestionService, users, tokens) -> None:
        users.signout(tokens["u1"])
        with pytest.raises(AuthorizationFailedError) as exc_info:
            questions.create_question(tokens["u1"], "Too late")
        assert exc_info.value.code == "ATHR-002"
