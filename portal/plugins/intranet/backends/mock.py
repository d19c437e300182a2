"""
Mock intranet backend: fixture data with simulated latency and failures.
No network. Results still go through the cache like the real backend.
"""
import logging
import random
from typing import Any, Dict, List, Optional

from portal.core.cache_helper import CacheHelper
from portal.core.errors import UpstreamUnavailable
from portal.core.simulator import simulate_delay, simulate_failure
from portal.plugins.intranet import fixtures

from .base import IntranetBackend


class MockIntranetBackend(IntranetBackend):

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
            raise UpstreamUnavailable("Mock Intranet API failure")

    async def _fetch_profile(self, student_id: str) -> Dict[str, Any]:
        self.logger.info(f"[MOCK] Fetching profile for student: {student_id}")
        await self._simulate_upstream()
        # Unknown ids get the first fixture student so demos always have a profile
        for student in fixtures.MOCK_STUDENTS:
            if student["studentId"] == student_id:
                return dict(student)
        return dict(fixtures.MOCK_STUDENTS[0])

    async def _fetch_schedule(self, student_id: str, semester: Optional[str]) -> List[Dict[str, Any]]:
        self.logger.info(f"[MOCK] Fetching schedule for student: {student_id}, semester: {semester or 'current'}")
        await self._simulate_upstream()
        return [dict(item) for item in fixtures.MOCK_SCHEDULE]

    async def _fetch_attendance(self, student_id: str) -> List[Dict[str, Any]]:
        self.logger.info(f"[MOCK] Fetching attendance for student: {student_id}")
        await self._simulate_upstream()
        return [dict(record) for record in fixtures.MOCK_ATTENDANCE]

    async def _fetch_announcements(self, category: Optional[str]) -> List[Dict[str, Any]]:
        self.logger.info(f"[MOCK] Fetching announcements, category: {category or 'all'}")
        await self._simulate_upstream()
        announcements = fixtures.mock_announcements()
        if category:
            announcements = [a for a in announcements if a["category"] == category]
        return announcements
