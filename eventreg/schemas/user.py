from pydantic import BaseModel, ConfigDict, EmailStr
from typing import List, Optional


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_name: str
    team_name: Optional[str] = None


class UserPublic(BaseModel):
    """User as returned after login: no password, mobile or timestamps."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    university: str
    rollno: str
    role: str
    is_email_confirmed: bool


class UserProfile(UserPublic):
    mobile: str
    registrations: List[RegistrationResponse] = []


class UserProfileResponse(BaseModel):
    status: str = "success"
    user: UserProfile


class UserListResponse(BaseModel):
    status: str = "success"
    users: List[UserProfile]
