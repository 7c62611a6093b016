from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from eventreg.core.database import get_db
from eventreg.models.user import User
from eventreg.schemas.event import (
    RegisterEventRequest,
    EventListResponse,
    PublicRosterResponse,
)
from eventreg.schemas.user import UserProfileResponse
from eventreg.services.registration import RegistrationManager
from eventreg.api.v1.auth import get_current_user

router = APIRouter()


def get_registration_manager(db: Session = Depends(get_db)) -> RegistrationManager:
    return RegistrationManager(db)


@router.get("/event", response_model=EventListResponse)
def list_events(manager: RegistrationManager = Depends(get_registration_manager)):
    return {"events": manager.list_events()}


@router.get("/event/participants", response_model=PublicRosterResponse)
def list_event_participants(
    event_name: str = Query(..., min_length=1),
    manager: RegistrationManager = Depends(get_registration_manager),
):
    # Public roster: names and teams only, no contact details
    participants = [
        {"name": row["name"], "team_name": row["team_name"]}
        for row in manager.get_event_roster(event_name)
    ]
    return {"event_name": event_name, "participants": participants}


@router.post("/registerevent", response_model=UserProfileResponse)
def register_event(
    body: RegisterEventRequest,
    current_user: User = Depends(get_current_user),
    manager: RegistrationManager = Depends(get_registration_manager),
):
    manager.register_team(
        current_user_email=current_user.email,
        event_name=body.event_name,
        team_name=body.team_name,
        emails=list(body.emails),
    )
    return {"user": manager.get_user_profile(current_user.email)}
