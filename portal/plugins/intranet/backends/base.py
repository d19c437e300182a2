"""
Base type and interface for intranet backends.
Subclasses implement the _fetch_* methods returning raw upstream payloads;
the base normalizes them and handles caching.
"""
from abc import abstractmethod
from typing import Any, Dict, List, Optional

from portal.core.backend_base import CachedBackend
from portal.plugins.intranet.schemas import (
    ANNOUNCEMENTS,
    ATTENDANCE,
    PROFILE,
    SCHEDULE,
    Announcement,
    AttendanceRecord,
    ScheduleEntry,
    StudentProfile,
)

# Cache TTLs in seconds, by data volatility
PROFILE_TTL = 3600
SCHEDULE_TTL = 86400
ATTENDANCE_TTL = 3600
ANNOUNCEMENTS_TTL = 900


def normalize_profile(raw: Dict[str, Any]) -> StudentProfile:
    return StudentProfile(
        student_id=raw["studentId"],
        first_name=raw.get("firstName") or "",
        last_name=raw.get("lastName") or "",
        email=raw["email"],
        program=raw.get("program"),
        year=raw.get("year"),
        gpa=raw.get("gpa"),
        credits_completed=raw.get("creditsCompleted"),
        total_credits=raw.get("totalCredits"),
        expected_graduation=raw.get("expectedGraduation") or None,
    )


def normalize_schedule(rows: List[Dict[str, Any]]) -> List[ScheduleEntry]:
    return [
        ScheduleEntry(
            course_code=item["courseCode"],
            course_name=item["courseName"],
            day_of_week=item["dayOfWeek"],
            start_time=item["startTime"],
            end_time=item["endTime"],
            room=item.get("room"),
            building=item.get("building"),
            professor=item.get("professor"),
            type=item.get("type") or "lecture",
        )
        for item in rows
    ]


def normalize_attendance(rows: List[Dict[str, Any]]) -> List[AttendanceRecord]:
    return [
        AttendanceRecord(
            course_code=record["courseCode"],
            course_name=record["courseName"],
            total_classes=record["totalClasses"],
            attended=record["attended"],
            percentage=record["percentage"],
        )
        for record in rows
    ]


def normalize_announcements(rows: List[Dict[str, Any]]) -> List[Announcement]:
    return [
        Announcement(
            id=str(a["id"]),
            title=a["title"],
            content=a.get("content") or "",
            category=a.get("category") or "general",
            published_date=a["publishedDate"],
            expiry_date=a.get("expiryDate"),
            priority=a.get("priority") or "medium",
        )
        for a in rows
    ]


class IntranetBackend(CachedBackend):
    """Capability set: profile, schedule, attendance, announcements."""

    source_name = "intranet"

    async def get_student_profile(self, student_id: str) -> StudentProfile:
        return await self._cached(
            f"intranet:profile:{student_id}",
            PROFILE_TTL,
            PROFILE,
            lambda: self._load_profile(student_id),
        )

    async def get_student_schedule(self, student_id: str, semester: Optional[str] = None) -> List[ScheduleEntry]:
        return await self._cached(
            f"intranet:schedule:{student_id}:{semester or 'current'}",
            SCHEDULE_TTL,
            SCHEDULE,
            lambda: self._load_schedule(student_id, semester),
        )

    async def get_student_attendance(self, student_id: str) -> List[AttendanceRecord]:
        return await self._cached(
            f"intranet:attendance:{student_id}",
            ATTENDANCE_TTL,
            ATTENDANCE,
            lambda: self._load_attendance(student_id),
        )

    async def get_campus_announcements(self, category: Optional[str] = None) -> List[Announcement]:
        return await self._cached(
            f"intranet:announcements:{category or 'all'}",
            ANNOUNCEMENTS_TTL,
            ANNOUNCEMENTS,
            lambda: self._load_announcements(category),
        )

    async def refresh_student_profile(self, student_id: str) -> StudentProfile:
        """Drop the cached profile and refetch it (full replacement)."""
        self.cache.delete(f"intranet:profile:{student_id}")
        self.logger.info(f"Refreshing profile for student {student_id}")
        return await self.get_student_profile(student_id)

    async def refresh_student_schedule(self, student_id: str) -> List[ScheduleEntry]:
        """Drop every cached semester of this student's schedule and refetch the current one."""
        self.cache.delete_by_prefix(f"intranet:schedule:{student_id}:")
        schedule = await self.get_student_schedule(student_id)
        self.logger.info(f"Refreshed schedule for student {student_id}: {len(schedule)} classes")
        return schedule

    async def _load_profile(self, student_id: str) -> StudentProfile:
        return self._normalize("profile", normalize_profile, await self._fetch_profile(student_id))

    async def _load_schedule(self, student_id: str, semester: Optional[str]) -> List[ScheduleEntry]:
        return self._normalize("schedule", normalize_schedule, await self._fetch_schedule(student_id, semester))

    async def _load_attendance(self, student_id: str) -> List[AttendanceRecord]:
        return self._normalize("attendance", normalize_attendance, await self._fetch_attendance(student_id))

    async def _load_announcements(self, category: Optional[str]) -> List[Announcement]:
        return self._normalize("announcements", normalize_announcements, await self._fetch_announcements(category))

    @abstractmethod
    async def _fetch_profile(self, student_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def _fetch_schedule(self, student_id: str, semester: Optional[str]) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def _fetch_attendance(self, student_id: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def _fetch_announcements(self, category: Optional[str]) -> List[Dict[str, Any]]:
        pass
