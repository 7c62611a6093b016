from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from eventreg.core.database import Base


class EventTeam(Base):
    __tablename__ = "event_teams"

    id = Column(Integer, primary_key=True, index=True)
    event_name = Column(String(255), nullable=False)
    team_name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    registrations = relationship(
        "EventRegistration", back_populates="team", cascade="all"
    )

    # First writer wins: concurrent registrations of the same new team
    # name cannot both commit
    __table_args__ = (
        UniqueConstraint("event_name", "team_name", name="uq_event_team_name"),
    )


class EventRegistration(Base):
    __tablename__ = "event_registrations"

    id = Column(Integer, primary_key=True, index=True)
    event_name = Column(String(255), nullable=False, index=True)
    team_name = Column(String(255), nullable=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    team_id = Column(
        Integer, ForeignKey("event_teams.id", ondelete="CASCADE"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    participant = relationship("User", back_populates="registrations")
    team = relationship("EventTeam", back_populates="registrations")

    __table_args__ = (
        UniqueConstraint("event_name", "user_id", name="uq_event_participant"),
    )
