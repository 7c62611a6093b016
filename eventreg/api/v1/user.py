from fastapi import APIRouter, Depends
from eventreg.models.user import User
from eventreg.schemas.user import UserProfileResponse
from eventreg.api.v1.auth import get_current_user

router = APIRouter()


@router.get("/user", response_model=UserProfileResponse)
def get_user_profile(current_user: User = Depends(get_current_user)):
    """
    Profile of the logged-in user together with their event registrations
    """
    return {"user": current_user}
