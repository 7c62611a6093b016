import logging
from fastapi import APIRouter, Depends, Query
from eventreg.core.exceptions import NotAuthorized
from eventreg.models.user import User
from eventreg.schemas.event import (
    RegisterEventRequest,
    RosterResponse,
    DeleteUsersRequest,
    DeleteRegistrationRequest,
    DeleteResponse,
)
from eventreg.schemas.user import UserListResponse
from eventreg.services.registration import RegistrationManager
from eventreg.api.v1.auth import get_current_user
from eventreg.api.v1.event import get_registration_manager

logger = logging.getLogger(__name__)
router = APIRouter()


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != "admin":
        logger.warning(f"User {current_user.id} attempted an admin action")
        raise NotAuthorized()
    return current_user


@router.get("/users", response_model=UserListResponse)
def get_all_users(
    admin: User = Depends(require_admin),
    manager: RegistrationManager = Depends(get_registration_manager),
):
    return {"users": manager.get_all_users()}


@router.delete("/users", response_model=DeleteResponse)
def delete_users(
    body: DeleteUsersRequest,
    admin: User = Depends(require_admin),
    manager: RegistrationManager = Depends(get_registration_manager),
):
    deleted = manager.delete_users(list(body.emails))
    return {"message": "User deleted", "deleted": deleted}


@router.get("/event", response_model=RosterResponse)
def get_event_roster(
    event_name: str = Query(..., min_length=1),
    admin: User = Depends(require_admin),
    manager: RegistrationManager = Depends(get_registration_manager),
):
    return {
        "event_name": event_name,
        "participants": manager.get_event_roster(event_name),
    }


@router.post("/registerevent", response_model=RosterResponse)
def admin_register_event(
    body: RegisterEventRequest,
    admin: User = Depends(require_admin),
    manager: RegistrationManager = Depends(get_registration_manager),
):
    manager.register_team(
        current_user_email=None,
        event_name=body.event_name,
        team_name=body.team_name,
        emails=list(body.emails),
    )
    return {
        "event_name": body.event_name,
        "participants": manager.get_event_roster(body.event_name),
    }


@router.delete("/event", response_model=DeleteResponse)
def delete_event_registration(
    body: DeleteRegistrationRequest,
    admin: User = Depends(require_admin),
    manager: RegistrationManager = Depends(get_registration_manager),
):
    deleted = manager.delete_registrations(
        body.event_name, emails=body.emails, team_names=body.team_names
    )
    return {"message": "Event registration deleted", "deleted": deleted}
