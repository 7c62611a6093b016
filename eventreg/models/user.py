from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from eventreg.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    passwordhash = Column(String(255), nullable=False)
    mobile = Column(String(10), nullable=False)
    university = Column(String(255), nullable=False)
    rollno = Column(String(15), nullable=False)
    role = Column(String(16), default="student", nullable=False)
    is_email_confirmed = Column(Boolean, default=False, nullable=False)
    email_token = Column(String(64), nullable=True, index=True)
    password_reset_token = Column(String(64), nullable=True, index=True)
    password_reset_token_expiry = Column(DateTime(timezone=True), nullable=True)
    password_changed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    registrations = relationship(
        "EventRegistration",
        back_populates="participant",
        cascade="all, delete-orphan",
        order_by="EventRegistration.id",
    )
