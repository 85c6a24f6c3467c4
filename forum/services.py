"""
forum/services.py -- Guarded resource operations: answers, questions, profiles.

Every public method takes the caller's access token first and goes through
AuthorizationGuard before touching data. Each operation contributes only its
policy (resource lookup + permission rule); the signed-in / signed-out checks
come from the guard.

Permission rules:
  create answer / list answers   any active session; question must exist
  edit answer                    owner only (admins get no override)
  delete answer                  owner or admin
  create / list questions        any active session
  view profile                   any active session; any profile

Lost updates: edit and delete read the answer (with its version) inside the
policy, then write conditioned on that version. If the write matches nothing
the answer is re-read: gone -> ANS-001, changed -> ANS-002.
"""

import uuid

from auth.guard import AuthorizationGuard, Clock, require_owner, require_owner_or_admin, utcnow
from auth.models import User
from auth.store import UserStore
from core.errors import AnswerNotFoundError, ConflictError, InvalidQuestionError, UserNotFoundError
from forum.models import Answer, Question
from forum.store import ForumStore


class AnswerService:
    def __init__(self, guard: AuthorizationGuard, store: ForumStore, clock: Clock = utcnow) -> None:
        self.guard = guard
        self.store = store
        self.clock = clock

    # ------------------------------------------------------------------
    # Policies (guard steps 3-4)
    # ------------------------------------------------------------------

    def _question_exists(self, question_uuid: str, message: str = "The question entered is invalid"):
        def policy(user: User) -> Question:
            question = self.store.get_question(question_uuid)
            if question is None:
                raise InvalidQuestionError(message)
            return question

        return policy

    def _owned_answer(self, answer_uuid: str, allow_admin: bool):
        def policy(user: User) -> Answer:
            answer = self.store.get_answer(answer_uuid)
            if answer is None:
                raise AnswerNotFoundError()
            if allow_admin:
                require_owner_or_admin(user, answer.user_uuid, "Only the answer owner or admin can delete the answer")
            else:
                require_owner(user, answer.user_uuid, "Only the answer owner can edit the answer")
            return answer

        return policy

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_answer(self, token: str, question_uuid: str, content: str) -> Answer:
        auth = self.guard.authorize(token, self._question_exists(question_uuid), action="post an answer")
        question = auth.resource
        answer = Answer(
            uuid=str(uuid.uuid4()),
            content=content,
            user_uuid=auth.user.uuid,
            question_uuid=question.uuid,
            created_at=self.clock(),
            question_content=question.content,
        )
        self.store.create_answer(answer)
        return answer

    def edit_answer(self, token: str, answer_uuid: str, content: str) -> Answer:
        """Replace an answer's content. uuid, owner, question, and created_at are kept."""
        auth = self.guard.authorize(token, self._owned_answer(answer_uuid, allow_admin=False), action="edit an answer")
        answer = auth.resource
        if not self.store.update_answer_content(answer.uuid, content, expected_version=answer.version):
            self._raise_lost_race(answer.uuid)
        answer.content = content
        answer.version += 1
        return answer

    def delete_answer(self, token: str, answer_uuid: str) -> Answer:
        """Remove an answer and return the removed record."""
        auth = self.guard.authorize(token, self._owned_answer(answer_uuid, allow_admin=True), action="delete an answer")
        answer = auth.resource
        if not self.store.delete_answer(answer.uuid, expected_version=answer.version):
            self._raise_lost_race(answer.uuid)
        return answer

    def list_answers(self, token: str, question_uuid: str) -> list[Answer]:
        self.guard.authorize(
            token,
            self._question_exists(
                question_uuid, "The question with entered uuid whose details are to be seen does not exist"
            ),
            action="get the answers",
        )
        return self.store.list_answers(question_uuid)

    def _raise_lost_race(self, answer_uuid: str) -> None:
        if self.store.get_answer(answer_uuid) is None:
            raise AnswerNotFoundError()
        raise ConflictError("ANS-002", "The answer was modified by another request. Reload and try again")


class QuestionService:
    """Reduced question lifecycle: enough to give answers something to attach to."""

    def __init__(self, guard: AuthorizationGuard, store: ForumStore, clock: Clock = utcnow) -> None:
        self.guard = guard
        self.store = store
        self.clock = clock

    def create_question(self, token: str, content: str) -> Question:
        auth = self.guard.authorize(token, action="post a question")
        question = Question(
            uuid=str(uuid.uuid4()),
            content=content,
            user_uuid=auth.user.uuid,
            created_at=self.clock(),
        )
        self.store.create_question(question)
        return question

    def list_questions(self, token: str) -> list[Question]:
        self.guard.authorize(token, action="get all questions")
        return self.store.list_questions()


class ProfileService:
    def __init__(self, guard: AuthorizationGuard, users: UserStore) -> None:
        self.guard = guard
        self.users = users

    def get_profile(self, token: str, user_uuid: str) -> User:
        """Any signed-in user may view any profile; the profile must exist (USR-001)."""

        def policy(viewer: User) -> User:
            user = self.users.get_by_uuid(user_uuid)
            if user is None:
                raise UserNotFoundError()
            return user

        return self.guard.authorize(token, policy, action="get user details").resource
