import json
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest

from portal.core.cache_helper import CacheHelper
from portal.core.db import Database
from portal.core.models import User


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None):
        self.status_code = status_code
        self._payload = payload
        self.text = json.dumps(payload) if payload is not None else ""

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


Route = Union[FakeResponse, Exception, List[Union[FakeResponse, Exception]]]


class FakeSession:
    """
    Stands in for requests.Session. Routes map (method, path) to a response,
    an exception to raise, or a list consumed in order (the last one repeats).
    """

    def __init__(self, base_url: str, routes: Optional[Dict[Tuple[str, str], Route]] = None):
        self.base_url = base_url
        self.routes = dict(routes or {})
        self.headers: Dict[str, str] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.closed = False
        self._lock = threading.Lock()

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        path = url[len(self.base_url):]
        with self._lock:
            self.calls.append((method, path, kwargs))
            route = self.routes.get((method, path))
            if route is None:
                return FakeResponse(404, {"message": f"no route for {method} {path}"})
            if isinstance(route, list):
                route = route.pop(0) if len(route) > 1 else route[0]
        if isinstance(route, Exception):
            raise route
        return route

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.calls if m == method and p == path)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(tmp_path, clock) -> CacheHelper:
    return CacheHelper(str(tmp_path / "cache"), clock=clock)


@pytest.fixture
def db(tmp_path):
    database = Database(db_url=f"sqlite:///{tmp_path / 'portal.db'}")
    yield database
    database.close()


@pytest.fixture
def make_user(db) -> Callable[..., int]:
    counter = {"n": 0}

    def _make(ai_points: int = 0, student_id: Optional[str] = None) -> int:
        counter["n"] += 1
        with db.session_scope() as session:
            user = User(
                student_id=student_id or f"STU{counter['n']:04d}",
                email=f"student{counter['n']}@aivancity.edu",
                first_name="Test",
                last_name=f"Student{counter['n']}",
                ai_points=ai_points,
            )
            session.add(user)
            session.flush()
            return user.id

    return _make
