"""User profile router."""
from fastapi import APIRouter, Depends

from app.middleware.auth import get_current_user, CurrentUser
from app.routers.auth import get_user_service
from app.schemas.user import UserProfile, UserProfileUpdate
from app.services.user_service import UserService

router = APIRouter(tags=["Users"])


@router.get("/me", response_model=UserProfile)
async def read_profile(
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Profile of the authenticated user."""
    return service.get_user(current_user.user_id)


@router.patch("/me", response_model=UserProfile)
async def update_profile(
    changes: UserProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Update display name and contact fields; only the fields sent are changed."""
    return service.update_profile(current_user.user_id, changes.model_dump(exclude_unset=True))
