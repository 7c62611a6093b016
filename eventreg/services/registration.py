"""
Event registration: teams of participants registered atomically, rosters
and the admin deletions that go with them.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventreg.core.exceptions import (
    NotInTeam,
    TeammatesAlreadyRegistered,
    TeamNameRequired,
    TeamNameTaken,
    UserNotExist,
    ValidationError,
)
from eventreg.models.registration import EventRegistration, EventTeam
from eventreg.models.user import User

logger = logging.getLogger(__name__)


class RegistrationManager:
    def __init__(self, db: Session):
        self.db = db

    def get_user_profile(self, email: str) -> User:
        user = self.db.query(User).filter(User.email == email).first()
        if user is None:
            raise UserNotExist(email)
        return user

    def _team_name_exists(self, event_name: str, team_name: str) -> bool:
        return (
            self.db.query(EventTeam)
            .filter(EventTeam.event_name == event_name, EventTeam.team_name == team_name)
            .first()
            is not None
        )

    def register_team(
        self,
        current_user_email: Optional[str],
        event_name: str,
        team_name: Optional[str],
        emails: List[str],
    ) -> List[EventRegistration]:
        """Register every email in ``emails`` for ``event_name`` as one team.

        ``current_user_email`` must be one of the participants; pass None for
        admin registrations. Either all rows are committed or none are.
        """
        if len(set(emails)) != len(emails):
            raise ValidationError("Each participant may only be listed once.")

        if len(emails) > 1 and not team_name:
            raise TeamNameRequired()

        if current_user_email is not None and current_user_email not in emails:
            raise NotInTeam()

        # Fast path only; the unique constraint on event_teams decides races
        if team_name and self._team_name_exists(event_name, team_name):
            raise TeamNameTaken()

        users: Dict[str, User] = {
            user.email: user
            for user in self.db.query(User).filter(User.email.in_(emails)).all()
        }
        missing = [email for email in emails if email not in users]
        if missing:
            raise UserNotExist(", ".join(missing))

        team = None
        if team_name:
            team = EventTeam(event_name=event_name, team_name=team_name)
            self.db.add(team)
            try:
                self.db.flush()
            except IntegrityError:
                self.db.rollback()
                raise TeamNameTaken()

        registrations = [
            EventRegistration(
                event_name=event_name,
                team_name=team_name,
                participant=users[email],
                team=team,
            )
            for email in emails
        ]
        self.db.add_all(registrations)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise TeammatesAlreadyRegistered()

        logger.info(
            f"Registered {len(registrations)} participant(s) for '{event_name}'"
            f" (team: {team_name or '-'})"
        )
        return registrations

    def list_events(self) -> List[dict]:
        rows = (
            self.db.query(
                EventRegistration.event_name,
                func.count(EventRegistration.id),
                func.count(func.distinct(EventRegistration.team_name)),
            )
            .group_by(EventRegistration.event_name)
            .order_by(EventRegistration.event_name)
            .all()
        )
        return [
            {"event_name": event_name, "participants": participants, "teams": teams}
            for event_name, participants, teams in rows
        ]

    def get_event_roster(self, event_name: str) -> List[dict]:
        rows = (
            self.db.query(EventRegistration, User)
            .join(User, EventRegistration.user_id == User.id)
            .filter(EventRegistration.event_name == event_name)
            .order_by(EventRegistration.team_name, EventRegistration.id)
            .all()
        )
        return [
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "mobile": user.mobile,
                "team_name": registration.team_name,
            }
            for registration, user in rows
        ]

    def get_all_users(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role != "admin")
            .order_by(User.id)
            .all()
        )

    def _prune_empty_teams(self):
        empty_ids = [
            team_id
            for (team_id,) in self.db.query(EventTeam.id)
            .filter(~EventTeam.registrations.any())
            .all()
        ]
        if empty_ids:
            self.db.query(EventTeam).filter(EventTeam.id.in_(empty_ids)).delete(
                synchronize_session=False
            )

    def delete_users(self, emails: List[str]) -> int:
        users = self.db.query(User).filter(User.email.in_(emails)).all()
        if not users:
            raise UserNotExist(", ".join(emails))

        for user in users:
            # Registrations go with the user through the relationship cascade
            self.db.delete(user)
        self.db.flush()
        self._prune_empty_teams()
        self.db.commit()

        logger.info(f"Deleted {len(users)} user(s)")
        return len(users)

    def delete_registrations(
        self,
        event_name: str,
        emails: Optional[List[str]] = None,
        team_names: Optional[List[str]] = None,
    ) -> int:
        if not emails and not team_names:
            raise ValidationError("Either emails or team_names is required.")

        deleted = 0
        if team_names:
            deleted += (
                self.db.query(EventRegistration)
                .filter(
                    EventRegistration.event_name == event_name,
                    EventRegistration.team_name.in_(team_names),
                )
                .delete(synchronize_session=False)
            )
        if emails:
            user_ids = select(User.id).where(User.email.in_(emails))
            deleted += (
                self.db.query(EventRegistration)
                .filter(
                    EventRegistration.event_name == event_name,
                    EventRegistration.user_id.in_(user_ids),
                )
                .delete(synchronize_session=False)
            )

        self._prune_empty_teams()
        self.db.commit()

        logger.info(f"Deleted {deleted} registration(s) for '{event_name}'")
        return deleted
