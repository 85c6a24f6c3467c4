"""
api/routes/v1/question.py -- Question endpoints (reduced lifecycle).

Routes:
  POST /api/v1/question/create   -- post a question    201
  GET  /api/v1/question/all      -- list all questions 200

Both require an active session; the guard runs inside QuestionService.
"""

from fastapi import APIRouter, Depends, Request

from api.models import QuestionDetailsResponse, QuestionRequest, QuestionResponse
from auth.dependencies import get_access_token
from forum.services import QuestionService

router = APIRouter()


@router.post("/question/create", response_model=QuestionResponse, status_code=201)
def create_question(
    request: Request,
    body: QuestionRequest,
    token: str = Depends(get_access_token),
) -> QuestionResponse:
    questions: QuestionService = request.app.state.question_service
    question = questions.create_question(token, body.content)
    return QuestionResponse(id=question.uuid)


@router.get("/question/all", response_model=list[QuestionDetailsResponse])
def list_questions(request: Request, token: str = Depends(get_access_token)) -> list[QuestionDetailsResponse]:
    questions: QuestionService = request.app.state.question_service
    return [QuestionDetailsResponse.from_question(q) for q in questions.list_questions(token)]
