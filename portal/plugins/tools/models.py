"""
SQLAlchemy models for campus tools: study room bookings and print jobs.
"""
from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String

from portal.core.db import Base
from portal.core.models import _utc_now


class RoomBooking(Base):
    """start_time / end_time are local HH:MM strings, compared lexically."""
    __tablename__ = "room_bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    room_name = Column(String(128), nullable=False, index=True)
    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    status = Column(String(32), nullable=False, default="confirmed")  # confirmed | cancelled
    created_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)


class PrintJob(Base):
    __tablename__ = "print_jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id = Column(String(32), unique=True, nullable=False)
    file_name = Column(String(255), nullable=False)
    location = Column(String(128), nullable=False)
    copies = Column(Integer, nullable=False, default=1)
    pages = Column(Integer, nullable=False)
    color = Column(Boolean, nullable=False, default=False)
    duplex = Column(Boolean, nullable=False, default=False)
    cost = Column(Float, nullable=False)
    status = Column(String(32), nullable=False, default="queued")
    created_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False, index=True)
