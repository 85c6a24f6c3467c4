"""
API request and response models for the forum REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
forum/models.py, which own the internal domain representation. Route handlers
map between the two.

Separation of concerns: auth/ + forum/ models = domain truth; api/ models = API contract.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from auth.models import User
from forum.models import Answer, Question

# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


class SignupUserRequest(BaseModel):
    """Request body for POST /api/v1/user/signup.

    user_name and password are stored exactly as sent, because signin compares
    the raw Basic credentials against them. user_name may not contain
    whitespace or ':' (the Basic credential separator). Password is capped at
    72 UTF-8 bytes, bcrypt's input limit. Display fields are trimmed.
    Role is not accepted here -- self-registered accounts are always nonadmin.
    """

    user_name: str = Field(min_length=1, max_length=30, pattern=r"^[^\s:]+$")
    email_address: EmailStr
    password: str = Field(min_length=1)
    first_name: str = Field(default="", max_length=30)
    last_name: str = Field(default="", max_length=30)
    country: Optional[str] = Field(default=None, max_length=30)
    about_me: Optional[str] = Field(default=None, max_length=1000)
    dob: Optional[str] = Field(default=None, max_length=30)
    contact_number: Optional[str] = Field(default=None, max_length=30)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes when UTF-8 encoded")
        return v

    @field_validator("first_name", "last_name", "country", "about_me", "dob", "contact_number", mode="before")
    @classmethod
    def strip_display_fields(cls, v):
        return v.strip() if isinstance(v, str) else v


class SignupUserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: str = "USER SUCCESSFULLY REGISTERED"


class SigninResponse(BaseModel):
    """Response for POST /api/v1/user/signin. The token is also sent in the access-token header."""

    model_config = ConfigDict(frozen=True)

    id: str
    message: str = "SIGNED IN SUCCESSFULLY"
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class SignoutResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    message: str = "SIGNED OUT SUCCESSFULLY"


class UserDetailsResponse(BaseModel):
    """Public view of an account. Never includes password, salt, or role."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    user_name: str
    email_address: str
    country: Optional[str] = None
    about_me: Optional[str] = None
    dob: Optional[str] = None
    contact_number: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserDetailsResponse":
        return cls(
            first_name=user.first_name,
            last_name=user.last_name,
            user_name=user.username,
            email_address=user.email,
            country=user.country,
            about_me=user.about_me,
            dob=user.dob,
            contact_number=user.contact_number,
        )


# ---------------------------------------------------------------------------
# Question
# ---------------------------------------------------------------------------


class QuestionRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(min_length=1, max_length=500)


class QuestionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: str = "QUESTION CREATED"


class QuestionDetailsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    content: str

    @classmethod
    def from_question(cls, question: Question) -> "QuestionDetailsResponse":
        return cls(id=question.uuid, content=question.content)


# ---------------------------------------------------------------------------
# Answer
# ---------------------------------------------------------------------------


class AnswerRequest(BaseModel):
    """Request body for answer create and edit."""

    model_config = ConfigDict(str_strip_whitespace=True)

    answer: str = Field(min_length=1, max_length=5000)


class AnswerResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: str = "ANSWER CREATED"


class AnswerEditResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: str = "ANSWER EDITED"


class AnswerDeleteResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: str = "ANSWER DELETED"


class AnswerDetailsResponse(BaseModel):
    """One row of GET /api/v1/answer/all/{question_id}."""

    model_config = ConfigDict(frozen=True)

    id: str
    question_content: str
    answer_content: str

    @classmethod
    def from_answer(cls, answer: Answer) -> "AnswerDetailsResponse":
        return cls(id=answer.uuid, question_content=answer.question_content, answer_content=answer.content)
