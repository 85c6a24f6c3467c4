"""
api/routes/v1/answer.py -- Answer endpoints.

Routes:
  POST   /api/v1/question/{question_id}/answer/create  -- post an answer        201
  PUT    /api/v1/answer/edit/{answer_id}               -- edit (owner only)     200
  DELETE /api/v1/answer/delete/{answer_id}             -- delete (owner/admin)  200
  GET    /api/v1/answer/all/{question_id}              -- list a question's answers

Handlers stay thin: token extraction, one AnswerService call, response
mapping. Authorization, existence checks, and ownership rules all run in
AnswerService through the guard; failures surface as ForumError and are
rendered by the handler in api/main.py.
"""

from fastapi import APIRouter, Depends, Request

from api.models import (
    AnswerDeleteResponse,
    AnswerDetailsResponse,
    AnswerEditResponse,
    AnswerRequest,
    AnswerResponse,
)
from auth.dependencies import get_access_token
from forum.services import AnswerService

router = APIRouter()


@router.post("/question/{question_id}/answer/create", response_model=AnswerResponse, status_code=201)
def create_answer(
    request: Request,
    question_id: str,
    body: AnswerRequest,
    token: str = Depends(get_access_token),
) -> AnswerResponse:
    answers: AnswerService = request.app.state.answer_service
    answer = answers.create_answer(token, question_id, body.answer)
    return AnswerResponse(id=answer.uuid)


@router.put("/answer/edit/{answer_id}", response_model=AnswerEditResponse)
def edit_answer(
    request: Request,
    answer_id: str,
    body: AnswerRequest,
    token: str = Depends(get_access_token),
) -> AnswerEditResponse:
    """Replace the answer's content. Only the owner may edit (ATHR-003 otherwise)."""
    answers: AnswerService = request.app.state.answer_service
    answer = answers.edit_answer(token, answer_id, body.answer)
    return AnswerEditResponse(id=answer.uuid)


@router.delete("/answer/delete/{answer_id}", response_model=AnswerDeleteResponse)
def delete_answer(request: Request, answer_id: str, token: str = Depends(get_access_token)) -> AnswerDeleteResponse:
    """Delete the answer. The owner or any admin may delete."""
    answers: AnswerService = request.app.state.answer_service
    answer = answers.delete_answer(token, answer_id)
    return AnswerDeleteResponse(id=answer.uuid)


@router.get("/answer/all/{question_id}", response_model=list[AnswerDetailsResponse])
def list_answers(
    request: Request,
    question_id: str,
    token: str = Depends(get_access_token),
) -> list[AnswerDetailsResponse]:
    answers: AnswerService = request.app.state.answer_service
    return [AnswerDetailsResponse.from_answer(a) for a in answers.list_answers(token, question_id)]
