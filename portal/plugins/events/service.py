"""
Campus events. The upcoming list is cached for 15 minutes and dropped
whenever someone registers.
"""
import logging
from datetime import date
from typing import Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from portal.core.cache_helper import CacheHelper
from portal.core.db import Database
from portal.core.errors import Conflict, NotFound
from portal.core.models import get_user
from portal.plugins.events.models import Event, EventRegistration
from portal.plugins.events.schemas import (
    EVENTS,
    EventDetails,
    EventRegistrationView,
    EventView,
    UserEventRegistration,
)

EVENTS_CACHE_KEY = "events:all"
EVENTS_TTL = 900


class EventsService:

    def __init__(
        self,
        db: Database,
        cache: CacheHelper,
        today: Optional[Callable[[], date]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.db = db
        self.cache = cache
        self._today = today or date.today
        self.logger = logger or logging.getLogger(__name__)

    async def get_all_events(self) -> List[EventView]:
        """Events from today onwards, soonest first."""
        cached = self.cache.get(EVENTS_CACHE_KEY)
        if cached is not None:
            try:
                return EVENTS.validate_python(cached)
            except ValueError as e:
                self.logger.warning(f"Discarding malformed cache entry {EVENTS_CACHE_KEY}: {e}")

        with self.db.session_scope() as session:
            rows = session.execute(
                select(Event).where(Event.date >= self._today()).order_by(Event.date, Event.start_time, Event.id)
            ).scalars().all()
            views = [EventView.model_validate(e) for e in rows]

        self.cache.set(EVENTS_CACHE_KEY, EVENTS.dump_python(views, mode="json"), EVENTS_TTL)
        return views

    async def get_event_details(self, event_id: int) -> EventDetails:
        with self.db.session_scope() as session:
            event = session.execute(
                select(Event)
                .where(Event.id == event_id)
                .options(selectinload(Event.registrations).selectinload(EventRegistration.user))
            ).scalars().first()
            if event is None:
                raise NotFound("Event not found")
            return EventDetails.model_validate(event)

    async def register_for_event(self, event_id: int, user_id: int) -> EventRegistrationView:
        try:
            with self.db.session_scope() as session:
                if get_user(session, user_id) is None:
                    raise NotFound("User not found")
                event = session.get(Event, event_id)
                if event is None:
                    raise NotFound("Event not found")
                existing = session.execute(
                    select(EventRegistration).where(
                        EventRegistration.event_id == event_id,
                        EventRegistration.user_id == user_id,
                    )
                ).scalars().first()
                if existing is not None:
                    raise Conflict("Already registered for this event")

                if event.max_attendees:
                    registered = session.execute(
                        select(func.count())
                        .select_from(EventRegistration)
                        .where(EventRegistration.event_id == event_id, EventRegistration.status == "registered")
                    ).scalar()
                    if registered >= event.max_attendees:
                        raise Conflict("Event is full")

                registration = EventRegistration(event_id=event_id, user_id=user_id, status="registered")
                session.add(registration)
                session.flush()
                view = EventRegistrationView.model_validate(registration)
        except IntegrityError as e:
            # a concurrent registration by the same user won the unique constraint
            raise Conflict("Already registered for this event") from e

        self.cache.delete(EVENTS_CACHE_KEY)
        self.logger.info(f"User {user_id} registered for event {event_id}")
        return view

    async def get_user_registrations(self, user_id: int) -> List[UserEventRegistration]:
        """User's registrations newest first, each with its event."""
        with self.db.session_scope() as session:
            rows = session.execute(
                select(EventRegistration)
                .where(EventRegistration.user_id == user_id)
                .options(selectinload(EventRegistration.event))
                .order_by(EventRegistration.registered_at.desc(), EventRegistration.id.desc())
            ).scalars().all()
            return [UserEventRegistration.model_validate(r) for r in rows]
