"""
School intranet REST backend. API-key header auth, JSON resources for
student profile, schedule, attendance and announcements.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from portal.core.backend_base import HttpBackendMixin
from portal.core.cache_helper import CacheHelper
from portal.core.errors import UpstreamUnavailable

from .base import IntranetBackend


class RealIntranetBackend(HttpBackendMixin, IntranetBackend):

    def __init__(
        self,
        cache: CacheHelper,
        api_url: str,
        api_key: str,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(cache, logger=logger)
        self.api_url = (api_url or "").rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "X-API-Key": api_key or "",
        })

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.api_url}{path}"
        response = await self._send("GET", url, params=params or None)
        if not 200 <= response.status_code < 300:
            self.logger.error(f"Intranet API error ({response.status_code}) for {url}: {response.text[:200]}")
            raise UpstreamUnavailable(f"Intranet request failed ({response.status_code}) for {path}")
        return self._json(response, url)

    def _unwrap(self, payload: Any, key: str, path: str) -> List[Dict[str, Any]]:
        """Accept a bare list or an envelope {key: [...]}; anything else is an upstream failure."""
        if isinstance(payload, dict):
            payload = payload.get(key)
        if not isinstance(payload, list):
            self.logger.error(f"Intranet returned an unexpected payload for {path}: missing {key!r} list")
            raise UpstreamUnavailable(f"Intranet returned an unexpected payload for {path}")
        return payload

    async def _fetch_profile(self, student_id: str) -> Dict[str, Any]:
        return await self._get(f"/api/students/{student_id}")

    async def _fetch_schedule(self, student_id: str, semester: Optional[str]) -> List[Dict[str, Any]]:
        path = f"/api/students/{student_id}/schedule"
        payload = await self._get(path, {"semester": semester} if semester else None)
        return self._unwrap(payload, "schedule", path)

    async def _fetch_attendance(self, student_id: str) -> List[Dict[str, Any]]:
        path = f"/api/students/{student_id}/attendance"
        return self._unwrap(await self._get(path), "attendance", path)

    async def _fetch_announcements(self, category: Optional[str]) -> List[Dict[str, Any]]:
        path = "/api/announcements"
        payload = await self._get(path, {"category": category} if category else None)
        return self._unwrap(payload, "announcements", path)
