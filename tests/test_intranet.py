import pytest
import requests

from portal.core.errors import UpstreamUnavailable
from portal.plugins.intranet import fixtures
from portal.plugins.intranet.backends import MockIntranetBackend, RealIntranetBackend, get_backend
from portal.plugins.intranet.schemas import StudentProfile

from conftest import FakeResponse, FakeSession

API_URL = "https://intranet.example.edu"

PROFILE_PAYLOAD = dict(fixtures.MOCK_STUDENTS[1])


def counting(backend, name):
    """Wrap backend._fetch_* so upstream calls can be counted."""
    original = getattr(backend, name)
    calls = []

    async def wrapper(*args):
        calls.append(args)
        return await original(*args)

    setattr(backend, name, wrapper)
    return calls


@pytest.fixture
def mock_backend(cache):
    return MockIntranetBackend(cache, delay_ms=0)


def real_backend(cache, routes):
    session = FakeSession(API_URL, routes)
    return RealIntranetBackend(cache, API_URL + "/", "key-123", session=session), session


@pytest.mark.asyncio
async def test_mock_profile_is_cached(mock_backend):
    calls = counting(mock_backend, "_fetch_profile")

    first = await mock_backend.get_student_profile("STU2024002")
    second = await mock_backend.get_student_profile("STU2024002")

    assert first == second
    assert first.model_dump_json() == second.model_dump_json()
    assert first.full_name == "Jane Smith"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_mock_unknown_student_gets_first_fixture(mock_backend):
    profile = await mock_backend.get_student_profile("UNKNOWN")
    assert profile.student_id == "STU2024001"


@pytest.mark.asyncio
async def test_mock_schedule_cached_per_semester(mock_backend):
    calls = counting(mock_backend, "_fetch_schedule")

    current = await mock_backend.get_student_schedule("STU2024001")
    await mock_backend.get_student_schedule("STU2024001")
    await mock_backend.get_student_schedule("STU2024001", "Spring 2025")

    assert len(current) == len(fixtures.MOCK_SCHEDULE)
    assert {entry.type for entry in current} == {"lecture", "lab", "workshop"}
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_mock_announcements_filtered_by_category(mock_backend):
    everything = await mock_backend.get_campus_announcements()
    academic = await mock_backend.get_campus_announcements("academic")

    assert len(everything) == 3
    assert [a.id for a in academic] == ["ann-002"]


@pytest.mark.asyncio
async def test_mock_failure_is_upstream_unavailable_and_not_cached(cache):
    backend = MockIntranetBackend(cache, delay_ms=0, failure_rate=1.0)
    with pytest.raises(UpstreamUnavailable):
        await backend.get_student_attendance("STU2024001")
    assert not cache.exists("intranet:attendance:STU2024001")


@pytest.mark.asyncio
async def test_refresh_schedule_refetches(mock_backend, cache):
    calls = counting(mock_backend, "_fetch_schedule")
    await mock_backend.get_student_schedule("STU2024001")
    await mock_backend.get_student_schedule("STU2024001", "Fall 2024")

    refreshed = await mock_backend.refresh_student_schedule("STU2024001")

    assert len(refreshed) == len(fixtures.MOCK_SCHEDULE)
    assert len(calls) == 3
    assert not cache.exists("intranet:schedule:STU2024001:Fall 2024")


@pytest.mark.asyncio
async def test_cache_outage_only_costs_upstream_calls(tmp_path):
    from portal.core.cache_helper import CacheHelper

    blocker = tmp_path / "blocked"
    blocker.write_text("")
    backend = MockIntranetBackend(CacheHelper(str(blocker)), delay_ms=0)
    calls = counting(backend, "_fetch_profile")

    first = await backend.get_student_profile("STU2024001")
    second = await backend.get_student_profile("STU2024001")

    assert first == second
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_real_profile_fetch_and_cache(cache):
    backend, session = real_backend(cache, {
        ("GET", "/api/students/STU2024002"): FakeResponse(200, PROFILE_PAYLOAD),
    })

    profile = await backend.get_student_profile("STU2024002")
    again = await backend.get_student_profile("STU2024002")

    assert isinstance(profile, StudentProfile)
    assert profile == again
    assert profile.program == "Data Science"
    assert str(profile.expected_graduation) == "2026-06-15"
    assert session.headers["X-API-Key"] == "key-123"
    assert session.count("GET", "/api/students/STU2024002") == 1
    assert session.calls[0][2]["timeout"] == 10


@pytest.mark.asyncio
async def test_real_schedule_unwraps_and_passes_semester(cache):
    backend, session = real_backend(cache, {
        ("GET", "/api/students/STU1/schedule"): FakeResponse(200, {"schedule": fixtures.MOCK_SCHEDULE[:2]}),
    })

    schedule = await backend.get_student_schedule("STU1", "Fall 2024")

    assert [e.course_code for e in schedule] == ["CS301", "CS301"]
    assert session.calls[0][2]["params"] == {"semester": "Fall 2024"}


@pytest.mark.asyncio
async def test_real_non_2xx_is_upstream_unavailable(cache):
    backend, _ = real_backend(cache, {
        ("GET", "/api/students/STU1/attendance"): FakeResponse(503, {"error": "maintenance"}),
    })
    with pytest.raises(UpstreamUnavailable):
        await backend.get_student_attendance("STU1")


@pytest.mark.asyncio
async def test_real_network_error_is_upstream_unavailable(cache):
    backend, _ = real_backend(cache, {
        ("GET", "/api/announcements"): requests.exceptions.ConnectTimeout("timed out"),
    })
    with pytest.raises(UpstreamUnavailable):
        await backend.get_campus_announcements()


@pytest.mark.asyncio
async def test_real_malformed_payload_is_upstream_unavailable(cache):
    backend, _ = real_backend(cache, {
        ("GET", "/api/students/STU1"): FakeResponse(200, {"firstName": "No id"}),
    })
    with pytest.raises(UpstreamUnavailable):
        await backend.get_student_profile("STU1")


@pytest.mark.asyncio
@pytest.mark.parametrize("path, call", [
    ("/api/students/STU1/schedule", lambda b: b.get_student_schedule("STU1")),
    ("/api/students/STU1/attendance", lambda b: b.get_student_attendance("STU1")),
    ("/api/announcements", lambda b: b.get_campus_announcements()),
])
async def test_real_envelope_missing_list_is_upstream_unavailable(cache, path, call):
    backend, _ = real_backend(cache, {("GET", path): FakeResponse(200, {"data": []})})
    with pytest.raises(UpstreamUnavailable):
        await call(backend)


def test_factory_selects_variant(cache):
    assert isinstance(get_backend(True, cache, {}), MockIntranetBackend)
    real = get_backend(False, cache, {"api_url": API_URL, "api_key": "k"})
    assert isinstance(real, RealIntranetBackend)
    real.close()
