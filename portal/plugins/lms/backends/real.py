"""
Blackboard Learn REST backend.

Auth is OAuth2 client credentials: the bearer token lives in memory with its
expiry, is renewed when it gets within TOKEN_REFRESH_BUFFER of expiring, and a
401 triggers exactly one re-authentication and retry of the request.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from portal.core.backend_base import HttpBackendMixin
from portal.core.cache_helper import CacheHelper
from portal.core.errors import UpstreamUnavailable
from portal.plugins.lms.schemas import Assignment, ContentItem, Course, CourseAnnouncement, GradeRecord

from .base import LmsBackend

TOKEN_PATH = "/learn/api/public/v1/oauth2/token"
TOKEN_REFRESH_BUFFER = 300


def _available(raw: Dict[str, Any]) -> bool:
    return (raw.get("availability") or {}).get("available") == "Yes"


def normalize_course(course: Dict[str, Any], membership: Dict[str, Any]) -> Course:
    return Course(
        id=course["id"],
        course_code=course.get("courseId") or course["id"],
        name=course["name"],
        description=course.get("description"),
        role=membership.get("courseRoleId"),
        enrollment_date=membership.get("created"),
        available=_available(course),
    )


def normalize_content(rows: List[Dict[str, Any]]) -> List[ContentItem]:
    return [
        ContentItem(
            id=c["id"],
            title=c["title"],
            description=c.get("description"),
            body=c.get("body"),
            position=c.get("position") or 0,
            has_children=bool(c.get("hasChildren")),
            available=_available(c),
            created=c.get("created"),
            modified=c.get("modified"),
        )
        for c in rows
    ]


def normalize_assignments(columns: List[Dict[str, Any]]) -> List[Assignment]:
    # Assignments are the gradebook columns backed by a content item
    return [
        Assignment(
            id=col["id"],
            content_id=col["contentId"],
            name=col["name"],
            description=col.get("description"),
            due=(col.get("grading") or {}).get("due"),
            points_possible=(col.get("score") or {}).get("possible") or 0,
            created=col.get("created"),
            available=_available(col),
        )
        for col in columns
        if col.get("contentId")
    ]


def normalize_grade(column: Dict[str, Any], grade: Dict[str, Any]) -> GradeRecord:
    return GradeRecord(
        column_id=column["id"],
        column_name=column.get("name") or column["id"],
        score=grade.get("score"),
        possible=(column.get("score") or {}).get("possible") or 0,
        text=grade.get("text"),
        feedback=grade.get("feedback"),
        exempt=bool(grade.get("exempt")),
        modified=grade.get("modified"),
    )


def normalize_announcements(rows: List[Dict[str, Any]]) -> List[CourseAnnouncement]:
    return [
        CourseAnnouncement(
            id=a["id"],
            title=a["title"],
            body=a.get("body"),
            created=a.get("created"),
            modified=a.get("modified"),
            creator=a.get("creator"),
        )
        for a in rows
    ]


class RealLmsBackend(HttpBackendMixin, LmsBackend):

    def __init__(
        self,
        cache: CacheHelper,
        api_url: str,
        api_key: str,
        api_secret: str,
        session: Optional[requests.Session] = None,
        clock: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(cache, logger=logger)
        self.api_url = (api_url or "").rstrip("/")
        self.api_key = api_key or ""
        self.api_secret = api_secret or ""
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        self._clock = clock or time.time
        self._access_token: Optional[str] = None
        self._token_expiry = 0.0

    # --- auth -------------------------------------------------------------

    def _invalidate_token(self) -> None:
        self._access_token = None
        self._token_expiry = 0.0

    async def _ensure_token(self) -> str:
        now = self._clock()
        if self._access_token and self._token_expiry > now + TOKEN_REFRESH_BUFFER:
            return self._access_token

        response = await self._send(
            "POST",
            f"{self.api_url}{TOKEN_PATH}",
            data={"grant_type": "client_credentials"},
            auth=(self.api_key, self.api_secret),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        if response.status_code != 200:
            self.logger.error(f"LMS authentication failed ({response.status_code})")
            raise UpstreamUnavailable("Failed to authenticate with LMS")

        payload = self._json(response, TOKEN_PATH)
        try:
            self._access_token = payload["access_token"]
            self._token_expiry = now + float(payload.get("expires_in") or 0)
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamUnavailable("LMS token response was malformed") from e
        self.logger.info("LMS authentication successful")
        return self._access_token

    async def _authorized_get(self, url: str, params: Optional[Dict[str, Any]]) -> requests.Response:
        token = await self._ensure_token()
        return await self._send("GET", url, params=params, headers={"Authorization": f"Bearer {token}"})

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None, allow_missing: bool = False) -> Any:
        """
        GET a JSON resource. One 401 re-authenticates and retries; a second
        401 is a failure. With allow_missing a 404 returns None.
        """
        url = f"{self.api_url}{path}"
        response = await self._authorized_get(url, params)
        if response.status_code == 401:
            self.logger.warning(f"LMS returned 401 for {path}, re-authenticating")
            self._invalidate_token()
            response = await self._authorized_get(url, params)
            if response.status_code == 401:
                raise UpstreamUnavailable(f"LMS rejected credentials for {path}")

        if allow_missing and response.status_code == 404:
            return None
        if not 200 <= response.status_code < 300:
            self.logger.error(f"LMS API error ({response.status_code}) for {url}: {response.text[:200]}")
            raise UpstreamUnavailable(f"LMS request failed ({response.status_code}) for {path}")
        return self._json(response, url)

    async def _get_results(self, path: str) -> List[Dict[str, Any]]:
        payload = await self._get(path)
        if not isinstance(payload, dict):
            raise UpstreamUnavailable(f"LMS returned an unexpected payload for {path}")
        return payload.get("results") or []

    # --- resources --------------------------------------------------------

    async def _fetch_courses(self, user_id: str) -> List[Course]:
        memberships = await self._get_results(f"/learn/api/public/v1/users/{user_id}/courses")
        return await self._gather_tolerant("course", [self._fetch_course(m) for m in memberships])

    async def _fetch_course(self, membership: Dict[str, Any]) -> Course:
        course = await self._get(f"/learn/api/public/v1/courses/{membership['courseId']}")
        return self._normalize("course", lambda raw: normalize_course(raw, membership), course)

    async def _fetch_content(self, course_id: str) -> List[ContentItem]:
        rows = await self._get_results(f"/learn/api/public/v1/courses/{course_id}/contents")
        return self._normalize("content", normalize_content, rows)

    async def _fetch_assignments(self, course_id: str) -> List[Assignment]:
        columns = await self._get_results(f"/learn/api/public/v2/courses/{course_id}/gradebook/columns")
        return self._normalize("assignments", normalize_assignments, columns)

    async def _fetch_grades(self, course_id: str, user_id: str) -> List[GradeRecord]:
        columns = await self._get_results(f"/learn/api/public/v2/courses/{course_id}/gradebook/columns")
        return await self._gather_tolerant(
            "grade", [self._fetch_column_grade(course_id, column, user_id) for column in columns]
        )

    async def _fetch_column_grade(self, course_id: str, column: Dict[str, Any], user_id: str) -> Optional[GradeRecord]:
        grade = await self._get(
            f"/learn/api/public/v2/courses/{course_id}/gradebook/columns/{column['id']}/users/{user_id}",
            allow_missing=True,
        )
        if grade is None:
            # not graded yet
            return None
        return self._normalize("grade", lambda raw: normalize_grade(column, raw), grade)

    async def _fetch_announcements(self, course_id: str) -> List[CourseAnnouncement]:
        rows = await self._get_results(f"/learn/api/public/v1/courses/{course_id}/announcements")
        return self._normalize("announcements", normalize_announcements, rows)
