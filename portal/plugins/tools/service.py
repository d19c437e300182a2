"""
Campus tools: study room booking with clash detection, print job submission.
"""
import logging
import math
import random
import re
import time
from datetime import date
from typing import List, Optional

from sqlalchemy import select

from portal.core.db import Database
from portal.core.errors import Conflict, NotFound, ValidationFailed
from portal.plugins.tools.models import PrintJob, RoomBooking
from portal.plugins.tools.schemas import PrintJobView, RoomBookingView

COLOR_PRICE_PER_PAGE = 0.20
MONO_PRICE_PER_PAGE = 0.05

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def print_cost(copies: int, pages: int, color: bool, duplex: bool) -> float:
    """Duplex bills one side per two printed pages, rounded up."""
    total_pages = copies * pages
    effective_pages = math.ceil(total_pages / 2) if duplex else total_pages
    return round(effective_pages * (COLOR_PRICE_PER_PAGE if color else MONO_PRICE_PER_PAGE), 2)


def new_job_id(rng: Optional[random.Random] = None) -> str:
    return f"PJ{int(time.time() * 1000)}{(rng or random).randint(0, 999)}"


class ToolsService:

    def __init__(self, db: Database, rng: Optional[random.Random] = None, logger: Optional[logging.Logger] = None):
        self.db = db
        self.rng = rng
        self.logger = logger or logging.getLogger(__name__)

    async def book_room(
        self,
        user_id: int,
        room_name: str,
        booking_date: date,
        start_time: str,
        end_time: str,
    ) -> RoomBookingView:
        if not room_name:
            raise ValidationFailed("Room name is required")
        if not _HHMM.match(start_time or "") or not _HHMM.match(end_time or ""):
            raise ValidationFailed("Times must be HH:MM")
        if start_time >= end_time:
            raise ValidationFailed("Booking must end after it starts")

        with self.db.session_scope() as session:
            clash = session.execute(
                select(RoomBooking).where(
                    RoomBooking.room_name == room_name,
                    RoomBooking.booking_date == booking_date,
                    RoomBooking.status == "confirmed",
                    RoomBooking.start_time < end_time,
                    RoomBooking.end_time > start_time,
                )
            ).scalars().first()
            if clash is not None:
                raise Conflict("Room is already booked for this time slot")

            booking = RoomBooking(
                user_id=user_id,
                room_name=room_name,
                booking_date=booking_date,
                start_time=start_time,
                end_time=end_time,
                status="confirmed",
            )
            session.add(booking)
            session.flush()
            self.logger.info(f"Room {room_name} booked on {booking_date} {start_time}-{end_time} by user {user_id}")
            return RoomBookingView.model_validate(booking)

    async def get_user_bookings(self, user_id: int) -> List[RoomBookingView]:
        with self.db.session_scope() as session:
            rows = session.execute(
                select(RoomBooking)
                .where(RoomBooking.user_id == user_id)
                .order_by(RoomBooking.booking_date.desc(), RoomBooking.start_time.desc())
            ).scalars().all()
            return [RoomBookingView.model_validate(b) for b in rows]

    async def cancel_booking(self, user_id: int, booking_id: int) -> RoomBookingView:
        with self.db.session_scope() as session:
            booking = session.get(RoomBooking, booking_id)
            if booking is None or booking.user_id != user_id:
                raise NotFound("Booking not found")
            booking.status = "cancelled"
            session.flush()
            return RoomBookingView.model_validate(booking)

    async def submit_print_job(
        self,
        user_id: int,
        file_name: str,
        location: str,
        copies: int = 1,
        pages: int = 1,
        color: bool = False,
        duplex: bool = False,
    ) -> PrintJobView:
        if copies < 1 or pages < 1:
            raise ValidationFailed("Copies and pages must be at least 1")
        cost = print_cost(copies, pages, color, duplex)
        with self.db.session_scope() as session:
            job = PrintJob(
                user_id=user_id,
                job_id=new_job_id(self.rng),
                file_name=file_name,
                location=location,
                copies=copies,
                pages=pages,
                color=color,
                duplex=duplex,
                cost=cost,
            )
            session.add(job)
            session.flush()
            self.logger.info(f"Print job {job.job_id} queued at {location}: {file_name}, cost {cost:.2f}")
            return PrintJobView.model_validate(job)

    async def get_user_print_jobs(self, user_id: int) -> List[PrintJobView]:
        with self.db.session_scope() as session:
            rows = session.execute(
                select(PrintJob)
                .where(PrintJob.user_id == user_id)
                .order_by(PrintJob.created_at.desc(), PrintJob.id.desc())
            ).scalars().all()
            return [PrintJobView.model_validate(j) for j in rows]
