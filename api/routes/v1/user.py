"""
api/routes/v1/user.py -- Account endpoints.

Routes:
  POST /api/v1/user/signup    -- register a nonadmin account           201
  POST /api/v1/user/signin    -- Basic credentials -> 8h access token  200
  POST /api/v1/user/signout   -- close the session named by the token  200

Auth policy:
  signup and signin are public. signout needs a token in the authorization
  header but does not go through the guard: an unknown, expired, or already
  closed session is reported as SGR-001 rather than ATHR-00x.

Security:
  signin answers ATH-001 / ATH-002 with the same 401 status; the verifier
  runs bcrypt on both paths so timing does not reveal which one fired.
  Cache-Control: no-store on signin responses so tokens are never cached.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import SigninResponse, SignoutResponse, SignupUserRequest, SignupUserResponse
from auth.dependencies import get_access_token, get_basic_credentials
from auth.service import UserService
from auth.tokens import SESSION_TTL

router = APIRouter()


@router.post("/user/signup", response_model=SignupUserResponse, status_code=201)
def signup(request: Request, body: SignupUserRequest) -> SignupUserResponse:
    """Register a new account. Duplicate email -> SGR-002, duplicate username -> SGR-001 (409)."""
    user_service: UserService = request.app.state.user_service
    user = user_service.signup(
        username=body.user_name,
        email=body.email_address,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        country=body.country,
        about_me=body.about_me,
        dob=body.dob,
        contact_number=body.contact_number,
    )
    return SignupUserResponse(id=user.uuid)


@router.post("/user/signin", response_model=SigninResponse)
def signin(
    request: Request,
    credentials: tuple[str, str] = Depends(get_basic_credentials),
) -> JSONResponse:
    """Verify Basic credentials and issue a session token.

    The token is returned both in the body and in the access-token header.
    """
    user_service: UserService = request.app.state.user_service
    username, password = credentials
    session = user_service.signin(username, password)
    resp = JSONResponse(
        status_code=200,
        content=SigninResponse(
            id=session.user.uuid,
            access_token=session.access_token,
            expires_in=int(SESSION_TTL.total_seconds()),
        ).model_dump(),
    )
    resp.headers["access-token"] = session.access_token
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/user/signout", response_model=SignoutResponse)
def signout(request: Request, token: str = Depends(get_access_token)) -> SignoutResponse:
    """Close the caller's session. Fails with SGR-001 if there is no active session."""
    user_service: UserService = request.app.state.user_service
    session = user_service.signout(token)
    return SignoutResponse(id=session.user.uuid)
