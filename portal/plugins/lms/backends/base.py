"""
Base type and interface for LMS backends.
Subclasses implement the _fetch_* methods returning normalized entities;
the base handles caching and grade aggregation.
"""
from abc import abstractmethod
from typing import List

from portal.core.backend_base import CachedBackend
from portal.plugins.lms.schemas import (
    ASSIGNMENTS,
    CONTENT,
    COURSE_ANNOUNCEMENTS,
    COURSES,
    GRADE_RECORDS,
    Assignment,
    ContentItem,
    Course,
    CourseAnnouncement,
    GradeRecord,
    GradeSummary,
)

# Cache TTLs in seconds; grades and assignments move most during a term
COURSES_TTL = 3600
CONTENT_TTL = 1800
ASSIGNMENTS_TTL = 900
GRADES_TTL = 900
ANNOUNCEMENTS_TTL = 600


class LmsBackend(CachedBackend):
    """Capability set: courses, content, assignments, grades, announcements."""

    source_name = "lms"

    async def get_user_courses(self, user_id: str) -> List[Course]:
        return await self._cached(
            f"lms:courses:{user_id}",
            COURSES_TTL,
            COURSES,
            lambda: self._fetch_courses(user_id),
        )

    async def get_course_content(self, course_id: str) -> List[ContentItem]:
        return await self._cached(
            f"lms:content:{course_id}",
            CONTENT_TTL,
            CONTENT,
            lambda: self._fetch_content(course_id),
        )

    async def get_course_assignments(self, course_id: str) -> List[Assignment]:
        return await self._cached(
            f"lms:assignments:{course_id}",
            ASSIGNMENTS_TTL,
            ASSIGNMENTS,
            lambda: self._fetch_assignments(course_id),
        )

    async def get_user_grades(self, course_id: str, user_id: str) -> GradeSummary:
        records = await self._cached(
            f"lms:grades:{course_id}:{user_id}",
            GRADES_TTL,
            GRADE_RECORDS,
            lambda: self._fetch_grades(course_id, user_id),
        )
        return GradeSummary.from_records(course_id, user_id, records)

    async def get_course_announcements(self, course_id: str) -> List[CourseAnnouncement]:
        return await self._cached(
            f"lms:announcements:{course_id}",
            ANNOUNCEMENTS_TTL,
            COURSE_ANNOUNCEMENTS,
            lambda: self._fetch_announcements(course_id),
        )

    async def refresh_user_courses(self, user_id: str) -> List[Course]:
        """Drop the cached enrollment list and pull it again from upstream."""
        self.cache.delete(f"lms:courses:{user_id}")
        courses = await self.get_user_courses(user_id)
        self.logger.info(f"Synced {len(courses)} courses for user {user_id}")
        return courses

    @abstractmethod
    async def _fetch_courses(self, user_id: str) -> List[Course]:
        pass

    @abstractmethod
    async def _fetch_content(self, course_id: str) -> List[ContentItem]:
        pass

    @abstractmethod
    async def _fetch_assignments(self, course_id: str) -> List[Assignment]:
        pass

    @abstractmethod
    async def _fetch_grades(self, course_id: str, user_id: str) -> List[GradeRecord]:
        pass

    @abstractmethod
    async def _fetch_announcements(self, course_id: str) -> List[CourseAnnouncement]:
        pass
