"""
Normalized LMS entities: courses, content, assignments, grades, announcements.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, TypeAdapter


class Course(BaseModel):
    id: str
    course_code: str
    name: str
    description: Optional[str] = None
    role: Optional[str] = None
    enrollment_date: Optional[datetime] = None
    available: bool = True


class ContentItem(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    body: Optional[str] = None
    position: int = 0
    has_children: bool = False
    available: bool = True
    created: Optional[datetime] = None
    modified: Optional[datetime] = None


class Assignment(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    content_id: Optional[str] = None
    due: Optional[datetime] = None
    points_possible: float = 0
    created: Optional[datetime] = None
    available: bool = True


class GradeRecord(BaseModel):
    column_id: str
    column_name: str
    score: Optional[float] = None
    possible: float = 0
    text: Optional[str] = None
    feedback: Optional[str] = None
    exempt: bool = False
    modified: Optional[datetime] = None


class GradeSummary(BaseModel):
    """Per-course grade aggregate. Always rebuilt from the records, never cached itself."""
    course_id: str
    user_id: str
    overall_percentage: str
    grades: List[GradeRecord]

    @classmethod
    def from_records(cls, course_id: str, user_id: str, records: List[GradeRecord]) -> "GradeSummary":
        total_score = sum(r.score or 0 for r in records)
        total_possible = sum(r.possible for r in records)
        percentage = (total_score / total_possible) * 100 if total_possible > 0 else 0
        return cls(
            course_id=course_id,
            user_id=user_id,
            overall_percentage=f"{percentage:.2f}",
            grades=list(records),
        )


class CourseAnnouncement(BaseModel):
    id: str
    title: str
    body: Optional[str] = None
    created: Optional[datetime] = None
    modified: Optional[datetime] = None
    creator: Optional[str] = None


COURSES = TypeAdapter(List[Course])
CONTENT = TypeAdapter(List[ContentItem])
ASSIGNMENTS = TypeAdapter(List[Assignment])
GRADE_RECORDS = TypeAdapter(List[GradeRecord])
COURSE_ANNOUNCEMENTS = TypeAdapter(List[CourseAnnouncement])
