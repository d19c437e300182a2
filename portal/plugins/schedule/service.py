"""
Weekly and daily timetable views over the intranet schedule.

Schedule entries use Monday-based weekdays (0=Monday .. 6=Sunday). Calendar
code elsewhere counts from Sunday (0=Sunday .. 6=Saturday); convert only
through the two functions below.
"""
import logging
from datetime import date
from typing import Dict, List, Optional

from portal.core.errors import ValidationFailed
from portal.plugins.intranet.backends.base import IntranetBackend
from portal.plugins.intranet.schemas import ScheduleEntry


def _check_weekday(day: int) -> None:
    if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
        raise ValidationFailed(f"Weekday index must be between 0 and 6, got {day!r}")


def sunday_based_to_monday_based(day: int) -> int:
    """0=Sunday numbering -> 0=Monday numbering (Sunday becomes 6)."""
    _check_weekday(day)
    return 6 if day == 0 else day - 1


def monday_based_to_sunday_based(day: int) -> int:
    """0=Monday numbering -> 0=Sunday numbering (Sunday becomes 0)."""
    _check_weekday(day)
    return 0 if day == 6 else day + 1


def sunday_based_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


class ScheduleService:

    def __init__(self, intranet: IntranetBackend, logger: Optional[logging.Logger] = None):
        self.intranet = intranet
        self.logger = logger or logging.getLogger(__name__)

    async def get_weekly_schedule(self, student_id: str, semester: Optional[str] = None) -> Dict[int, List[ScheduleEntry]]:
        """Classes grouped by Monday-based weekday, each day ordered by start time. Days without classes are absent."""
        entries = await self.intranet.get_student_schedule(student_id, semester)
        week: Dict[int, List[ScheduleEntry]] = {}
        for entry in entries:
            week.setdefault(entry.day_of_week, []).append(entry)
        for day_entries in week.values():
            day_entries.sort(key=lambda e: e.start_time)
        return dict(sorted(week.items()))

    async def get_today_schedule(self, student_id: str, today: Optional[date] = None) -> List[ScheduleEntry]:
        today = today or date.today()
        day = sunday_based_to_monday_based(sunday_based_weekday(today))
        week = await self.get_weekly_schedule(student_id)
        self.logger.debug(f"Today's schedule for {student_id}: weekday {day}, {len(week.get(day, []))} classes")
        return week.get(day, [])
