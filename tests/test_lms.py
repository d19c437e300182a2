import pytest

from portal.core.errors import UpstreamUnavailable
from portal.plugins.lms.backends import MockLmsBackend, RealLmsBackend, get_backend
from portal.plugins.lms.schemas import GradeRecord, GradeSummary

from conftest import FakeResponse, FakeSession

API_URL = "https://lms.example.edu"
TOKEN = ("POST", "/learn/api/public/v1/oauth2/token")
V1 = "/learn/api/public/v1"
V2 = "/learn/api/public/v2"


def token_response(token="tok-1", expires_in=3600):
    return FakeResponse(200, {"access_token": token, "token_type": "bearer", "expires_in": expires_in})


def course_payload(n):
    return {
        "id": f"_{n}_1",
        "courseId": f"COURSE{n}",
        "name": f"Course {n}",
        "description": "desc",
        "availability": {"available": "Yes"},
    }


def real_backend(cache, clock, routes):
    session = FakeSession(API_URL, routes)
    backend = RealLmsBackend(cache, API_URL, "app-key", "app-secret", session=session, clock=clock)
    return backend, session


def test_grade_summary_aggregation():
    records = [
        GradeRecord(column_id="a", column_name="A", score=88, possible=100),
        GradeRecord(column_id="b", column_name="B", score=92, possible=100),
    ]
    assert GradeSummary.from_records("c1", "u1", records).overall_percentage == "90.00"
    assert GradeSummary.from_records("c1", "u1", []).overall_percentage == "0.00"


def test_grade_summary_missing_score_counts_as_zero():
    records = [
        GradeRecord(column_id="a", column_name="A", score=50, possible=100),
        GradeRecord(column_id="b", column_name="B", score=None, possible=100),
    ]
    assert GradeSummary.from_records("c1", "u1", records).overall_percentage == "25.00"


@pytest.mark.asyncio
async def test_mock_courses_cached(cache):
    backend = MockLmsBackend(cache, delay_ms=0)
    first = await backend.get_user_courses("STU2024001")
    second = await backend.get_user_courses("STU2024001")

    assert [c.course_code for c in first] == ["CS301", "DS201", "AI401", "CS202", "DS301"]
    assert first == second
    assert all(c.role == "Student" for c in first)


@pytest.mark.asyncio
async def test_mock_grades_for_course(cache):
    backend = MockLmsBackend(cache, delay_ms=0)
    summary = await backend.get_user_grades("course-001", "STU2024001")
    assert summary.overall_percentage == "88.00"
    assert [g.column_id for g in summary.grades] == ["col-CS301"]

    everything = await backend.get_user_grades("unknown", "STU2024001")
    assert everything.overall_percentage == "90.00"


@pytest.mark.asyncio
async def test_mock_assignments_filtered_by_course(cache):
    backend = MockLmsBackend(cache, delay_ms=0)
    assignments = await backend.get_course_assignments("DS201")
    assert [a.name for a in assignments] == ["ML Model Training"]
    assert assignments[0].points_possible == 150


@pytest.mark.asyncio
async def test_partial_course_failures_are_dropped(cache, clock):
    routes = {
        TOKEN: token_response(),
        ("GET", f"{V1}/users/u1/courses"): FakeResponse(200, {"results": [
            {"courseId": f"_{n}_1", "courseRoleId": "Student", "created": "2024-09-01T00:00:00Z"}
            for n in range(1, 6)
        ]}),
    }
    for n in (1, 3, 5):
        routes[("GET", f"{V1}/courses/_{n}_1")] = FakeResponse(200, course_payload(n))
    routes[("GET", f"{V1}/courses/_2_1")] = FakeResponse(500, {"message": "boom"})
    routes[("GET", f"{V1}/courses/_4_1")] = FakeResponse(403, {"message": "forbidden"})
    backend, _ = real_backend(cache, clock, routes)

    courses = await backend.get_user_courses("u1")

    assert sorted(c.course_code for c in courses) == ["COURSE1", "COURSE3", "COURSE5"]
    assert all(c.role == "Student" and c.available for c in courses)


@pytest.mark.asyncio
async def test_all_course_details_failing_raises(cache, clock):
    backend, _ = real_backend(cache, clock, {
        TOKEN: token_response(),
        ("GET", f"{V1}/users/u1/courses"): FakeResponse(200, {"results": [{"courseId": "_1_1"}, {"courseId": "_2_1"}]}),
        ("GET", f"{V1}/courses/_1_1"): FakeResponse(500, {}),
        ("GET", f"{V1}/courses/_2_1"): FakeResponse(500, {}),
    })
    with pytest.raises(UpstreamUnavailable):
        await backend.get_user_courses("u1")


@pytest.mark.asyncio
async def test_no_memberships_is_empty_list(cache, clock):
    backend, _ = real_backend(cache, clock, {
        TOKEN: token_response(),
        ("GET", f"{V1}/users/u1/courses"): FakeResponse(200, {"results": []}),
    })
    assert await backend.get_user_courses("u1") == []


@pytest.mark.asyncio
async def test_single_401_is_retried_transparently(cache, clock):
    announcements = {"results": [{"id": "a1", "title": "Hello", "body": "Welcome", "creator": "Dr. W"}]}
    backend, session = real_backend(cache, clock, {
        TOKEN: [token_response("tok-1"), token_response("tok-2")],
        ("GET", f"{V1}/courses/c1/announcements"): [FakeResponse(401, {}), FakeResponse(200, announcements)],
    })

    result = await backend.get_course_announcements("c1")

    assert [a.title for a in result] == ["Hello"]
    assert session.count(*TOKEN) == 2
    auth_headers = [kw["headers"]["Authorization"] for m, _, kw in session.calls if m == "GET"]
    assert auth_headers == ["Bearer tok-1", "Bearer tok-2"]


@pytest.mark.asyncio
async def test_second_401_propagates(cache, clock):
    backend, session = real_backend(cache, clock, {
        TOKEN: token_response(),
        ("GET", f"{V1}/courses/c1/contents"): FakeResponse(401, {}),
    })
    with pytest.raises(UpstreamUnavailable):
        await backend.get_course_content("c1")
    assert session.count("GET", f"{V1}/courses/c1/contents") == 2


@pytest.mark.asyncio
async def test_token_reused_until_refresh_buffer(cache, clock):
    backend, session = real_backend(cache, clock, {
        TOKEN: token_response(expires_in=3600),
        ("GET", f"{V1}/courses/c1/contents"): FakeResponse(200, {"results": []}),
        ("GET", f"{V1}/courses/c2/contents"): FakeResponse(200, {"results": []}),
        ("GET", f"{V1}/courses/c3/contents"): FakeResponse(200, {"results": []}),
    })

    await backend.get_course_content("c1")
    clock.advance(3000)
    await backend.get_course_content("c2")
    assert session.count(*TOKEN) == 1

    # within five minutes of expiry the token is renewed before the request
    clock.advance(400)
    await backend.get_course_content("c3")
    assert session.count(*TOKEN) == 2


@pytest.mark.asyncio
async def test_token_endpoint_failure(cache, clock):
    backend, _ = real_backend(cache, clock, {TOKEN: FakeResponse(400, {"error": "invalid_client"})})
    with pytest.raises(UpstreamUnavailable):
        await backend.get_course_content("c1")


@pytest.mark.asyncio
async def test_real_grades_skip_ungraded_columns(cache, clock):
    columns = {"results": [
        {"id": "col1", "name": "Midterm", "score": {"possible": 100}},
        {"id": "col2", "name": "Final", "score": {"possible": 100}},
        {"id": "col3", "name": "Project", "score": {"possible": 50}},
    ]}
    backend, _ = real_backend(cache, clock, {
        TOKEN: token_response(),
        ("GET", f"{V2}/courses/c1/gradebook/columns"): FakeResponse(200, columns),
        ("GET", f"{V2}/courses/c1/gradebook/columns/col1/users/u1"): FakeResponse(200, {"score": 88, "text": "B+"}),
        ("GET", f"{V2}/courses/c1/gradebook/columns/col2/users/u1"): FakeResponse(200, {"score": 92, "exempt": False}),
        ("GET", f"{V2}/courses/c1/gradebook/columns/col3/users/u1"): FakeResponse(404, {"status": 404}),
    })

    summary = await backend.get_user_grades("c1", "u1")

    assert summary.overall_percentage == "90.00"
    assert sorted(g.column_name for g in summary.grades) == ["Final", "Midterm"]


@pytest.mark.asyncio
async def test_real_assignments_are_content_backed_columns(cache, clock):
    columns = {"results": [
        {"id": "col1", "name": "Essay", "contentId": "_c1", "score": {"possible": 20},
         "grading": {"due": "2024-12-01T23:59:00Z"}, "availability": {"available": "Yes"}},
        {"id": "total", "name": "Weighted Total", "score": {"possible": 100}},
    ]}
    backend, _ = real_backend(cache, clock, {
        TOKEN: token_response(),
        ("GET", f"{V2}/courses/c1/gradebook/columns"): FakeResponse(200, columns),
    })

    assignments = await backend.get_course_assignments("c1")

    assert [a.name for a in assignments] == ["Essay"]
    assert assignments[0].points_possible == 20
    assert assignments[0].due.year == 2024


@pytest.mark.asyncio
async def test_refresh_user_courses_bypasses_cache(cache):
    backend = MockLmsBackend(cache, delay_ms=0)
    calls = []
    original = backend._fetch_courses

    async def spy(user_id):
        calls.append(user_id)
        return await original(user_id)

    backend._fetch_courses = spy
    await backend.get_user_courses("u1")
    await backend.refresh_user_courses("u1")
    assert calls == ["u1", "u1"]


def test_factory_selects_variant(cache):
    assert isinstance(get_backend(True, cache, {}), MockLmsBackend)
    real = get_backend(False, cache, {"api_url": API_URL, "api_key": "k", "api_secret": "s"})
    assert isinstance(real, RealLmsBackend)
    real.close()
