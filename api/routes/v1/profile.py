"""
api/routes/v1/profile.py -- User profile lookup.

Routes:
  GET /api/v1/userprofile/{user_id}   -- any signed-in user may view any profile
"""

from fastapi import APIRouter, Depends, Request

from api.models import UserDetailsResponse
from auth.dependencies import get_access_token
from forum.services import ProfileService

router = APIRouter()


@router.get("/userprofile/{user_id}", response_model=UserDetailsResponse)
def user_profile(request: Request, user_id: str, token: str = Depends(get_access_token)) -> UserDetailsResponse:
    """Return the public details of user_id (ATHR-001/002 if not signed in, USR-001 if unknown)."""
    profiles: ProfileService = request.app.state.profile_service
    return UserDetailsResponse.from_user(profiles.get_profile(token, user_id))
