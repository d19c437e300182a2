"""
SQLAlchemy models for campus events and the users registered for them.
"""
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from portal.core.db import Base
from portal.core.models import _utc_now


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_type = Column(String(64), nullable=False)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    location = Column(String(255), nullable=False)
    max_attendees = Column(Integer, nullable=True)  # None means unlimited
    ai_points = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)

    registrations = relationship(
        "EventRegistration",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventRegistration.id",
    )


class EventRegistration(Base):
    __tablename__ = "event_registrations"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_user"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(32), nullable=False, default="registered")  # registered | cancelled | attended
    registered_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)

    event = relationship("Event", back_populates="registrations")
    user = relationship("User")
