from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional


class RegisterEventRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    event_name: str = Field(..., min_length=1, max_length=255)
    team_name: Optional[str] = Field(None, min_length=1, max_length=255)
    emails: List[EmailStr] = Field(..., min_length=1)


class EventSummary(BaseModel):
    event_name: str
    teams: int
    participants: int


class EventListResponse(BaseModel):
    status: str = "success"
    events: List[EventSummary]


class PublicParticipant(BaseModel):
    name: str
    team_name: Optional[str] = None


class PublicRosterResponse(BaseModel):
    status: str = "success"
    event_name: str
    participants: List[PublicParticipant]


class RosterParticipant(BaseModel):
    id: int
    name: str
    email: EmailStr
    mobile: str
    team_name: Optional[str] = None


class RosterResponse(BaseModel):
    status: str = "success"
    event_name: str
    participants: List[RosterParticipant]


class DeleteUsersRequest(BaseModel):
    emails: List[EmailStr] = Field(..., min_length=1)


class DeleteRegistrationRequest(BaseModel):
    event_name: str = Field(..., min_length=1)
    emails: Optional[List[EmailStr]] = None
    team_names: Optional[List[str]] = None


class DeleteResponse(BaseModel):
    status: str = "success"
    message: str
    deleted: int
