from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class RoomBookingView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    room_name: str
    booking_date: date
    start_time: str
    end_time: str
    status: str
    created_at: datetime


class PrintJobView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    job_id: str
    file_name: str
    location: str
    copies: int
    pages: int
    color: bool
    duplex: bool
    cost: float
    status: str
    created_at: datetime
