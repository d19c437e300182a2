"""
Mock LMS backend built on fixture courses, assignments and grades.
"""
import logging
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from portal.core.cache_helper import CacheHelper
from portal.core.errors import UpstreamUnavailable
from portal.core.simulator import simulate_delay, simulate_failure
from portal.plugins.lms import fixtures
from portal.plugins.lms.schemas import Assignment, ContentItem, Course, CourseAnnouncement, GradeRecord

from .base import LmsBackend


class MockLmsBackend(LmsBackend):

    def __init__(
        self,
        cache: CacheHelper,
        delay_ms: int = 500,
        failure_rate: float = 0.0,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(cache, logger=logger)
        self.delay_ms = delay_ms
        self.failure_rate = failure_rate
        self.rng = rng

    async def _simulate_upstream(self) -> None:
        await simulate_delay(self.delay_ms)
        if simulate_failure(self.failure_rate, self.rng):
            raise UpstreamUnavailable("Mock LMS API failure")

    async def _fetch_courses(self, user_id: str) -> List[Course]:
        self.logger.info(f"[MOCK] Fetching courses for user: {user_id}")
        await self._simulate_upstream()
        return [
            Course(
                id=course["id"],
                course_code=course["code"],
                name=course["name"],
                description=course["description"],
                role="Student",
                enrollment_date=fixtures.ENROLLMENT_DATE,
                available=True,
            )
            for course in fixtures.MOCK_COURSES
        ]

    async def _fetch_content(self, course_id: str) -> List[ContentItem]:
        self.logger.info(f"[MOCK] Fetching content for course: {course_id}")
        await self._simulate_upstream()
        return [
            ContentItem(
                id=item["id"],
                title=item["title"],
                description=item["description"],
                position=item["position"],
                has_children=True,
                available=True,
                created=item["created"],
                modified=item["created"],
            )
            for item in fixtures.MOCK_CONTENT
        ]

    async def _fetch_assignments(self, course_id: str) -> List[Assignment]:
        self.logger.info(f"[MOCK] Fetching assignments for course: {course_id}")
        await self._simulate_upstream()
        course = fixtures.find_course(course_id)
        created = datetime.now(timezone.utc) - timedelta(days=30)
        return [
            Assignment(
                id=a["id"],
                content_id=a["id"],
                name=a["name"],
                description=a["description"],
                due=a["due"],
                points_possible=a["points"],
                created=created,
                available=True,
            )
            for a in fixtures.mock_assignments()
            if not course or a["courseCode"] == course["code"]
        ]

    async def _fetch_grades(self, course_id: str, user_id: str) -> List[GradeRecord]:
        self.logger.info(f"[MOCK] Fetching grades for course: {course_id}, user: {user_id}")
        await self._simulate_upstream()
        course = fixtures.find_course(course_id)
        modified = datetime.now(timezone.utc) - timedelta(days=7)
        return [
            GradeRecord(
                column_id=f"col-{g['courseCode']}",
                column_name=g["courseName"],
                score=g["score"],
                possible=g["possible"],
                text=g["grade"],
                feedback="Good work! Keep it up.",
                exempt=False,
                modified=modified,
            )
            for g in fixtures.MOCK_GRADES
            if not course or g["courseCode"] == course["code"]
        ]

    async def _fetch_announcements(self, course_id: str) -> List[CourseAnnouncement]:
        self.logger.info(f"[MOCK] Fetching announcements for course: {course_id}")
        await self._simulate_upstream()
        return [
            CourseAnnouncement(
                id=a["id"],
                title=a["title"],
                body=a["body"],
                created=a["created"],
                modified=a["created"],
                creator=a["creator"],
            )
            for a in fixtures.mock_course_announcements()
        ]
