from fastapi import APIRouter, Depends

from core.auth import get_current_user
from core.dependencies import get_profile_store
from schemas import Profile, ProfileUpdate, UserIdentity
from services.profile_store import ProfileStore

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=Profile)
async def get_profile(
    user: UserIdentity = Depends(get_current_user),
    profiles: ProfileStore = Depends(get_profile_store),
):
    return profiles.get(user.email)


@router.put("", response_model=Profile)
async def update_profile(
    changes: ProfileUpdate,
    user: UserIdentity = Depends(get_current_user),
    profiles: ProfileStore = Depends(get_profile_store),
):
    """Partial update: only fields present in the body change."""
    return profiles.update(user.email, changes)
