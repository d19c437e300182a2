"""
Normalized intranet entities. Upstream payloads are mapped onto these before caching.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, TypeAdapter


class StudentProfile(BaseModel):
    student_id: str
    first_name: str
    last_name: str
    email: str
    program: Optional[str] = None
    year: Optional[int] = None
    gpa: Optional[float] = None
    credits_completed: Optional[int] = None
    total_credits: Optional[int] = None
    expected_graduation: Optional[date] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ScheduleEntry(BaseModel):
    """One weekly class slot. day_of_week is Monday-based (0=Monday .. 6=Sunday)."""
    course_code: str
    course_name: str
    day_of_week: int
    start_time: str  # local HH:MM
    end_time: str
    room: Optional[str] = None
    building: Optional[str] = None
    professor: Optional[str] = None
    type: str = "lecture"  # lecture | lab | workshop


class AttendanceRecord(BaseModel):
    course_code: str
    course_name: str
    total_classes: int
    attended: int
    percentage: float


class Announcement(BaseModel):
    id: str
    title: str
    content: str
    category: str
    published_date: datetime
    expiry_date: Optional[datetime] = None
    priority: str = "medium"


PROFILE = TypeAdapter(StudentProfile)
SCHEDULE = TypeAdapter(List[ScheduleEntry])
ATTENDANCE = TypeAdapter(List[AttendanceRecord])
ANNOUNCEMENTS = TypeAdapter(List[Announcement])
