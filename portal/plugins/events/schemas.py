from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter


class EventView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    event_type: str
    date: date
    start_time: str
    end_time: str
    location: str
    max_attendees: Optional[int] = None
    ai_points: int


class Registrant(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str


class EventRegistrantView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    user: Registrant


class EventDetails(EventView):
    registrations: List[EventRegistrantView]


class EventRegistrationView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    user_id: int
    status: str
    registered_at: datetime


class UserEventRegistration(EventRegistrationView):
    event: EventView


EVENTS = TypeAdapter(List[EventView])
