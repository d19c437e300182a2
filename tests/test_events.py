from datetime import date, timedelta

import pytest

from portal.core.errors import Conflict, NotFound
from portal.plugins.events.fixtures import seed_events
from portal.plugins.events.models import Event
from portal.plugins.events.service import EVENTS_CACHE_KEY, EventsService

TODAY = date(2024, 9, 1)


@pytest.fixture
def events(db, cache):
    with db.session_scope() as session:
        seed_events(session, today=TODAY)
    return EventsService(db, cache, today=lambda: TODAY)


def add_event(db, days=1, max_attendees=None, name="Pop-up Talk"):
    with db.session_scope() as session:
        event = Event(
            name=name,
            event_type="academic",
            date=TODAY + timedelta(days=days),
            start_time="10:00",
            end_time="11:00",
            location="Room 101",
            max_attendees=max_attendees,
        )
        session.add(event)
        session.flush()
        return event.id


def test_seed_is_idempotent(db, events):
    with db.session_scope() as session:
        assert seed_events(session) is False


@pytest.mark.asyncio
async def test_upcoming_events_soonest_first(db, events):
    add_event(db, days=-1, name="Yesterday's Talk")
    listed = await events.get_all_events()
    assert [e.name for e in listed] == [
        "Wellness Workshop: Stress Management",
        "AI Research Symposium",
        "International Food Festival",
        "Hackathon 2024",
        "Career Fair",
    ]


@pytest.mark.asyncio
async def test_event_list_is_cached(db, events, cache):
    first = await events.get_all_events()
    add_event(db, days=1)
    assert await events.get_all_events() == first
    assert cache.exists(EVENTS_CACHE_KEY)


@pytest.mark.asyncio
async def test_registration_invalidates_cached_list(db, events, cache, make_user):
    await events.get_all_events()
    event_id = add_event(db, days=1)

    await events.register_for_event(event_id, make_user())

    assert not cache.exists(EVENTS_CACHE_KEY)
    assert event_id in [e.id for e in await events.get_all_events()]


@pytest.mark.asyncio
async def test_duplicate_registration_conflicts(events, make_user):
    user_id = make_user()
    event_id = (await events.get_all_events())[0].id
    registration = await events.register_for_event(event_id, user_id)
    assert registration.status == "registered"

    with pytest.raises(Conflict, match="Already registered"):
        await events.register_for_event(event_id, user_id)


@pytest.mark.asyncio
async def test_full_event_conflicts(db, events, make_user):
    event_id = add_event(db, max_attendees=2)
    await events.register_for_event(event_id, make_user())
    await events.register_for_event(event_id, make_user())

    with pytest.raises(Conflict, match="Event is full"):
        await events.register_for_event(event_id, make_user())


@pytest.mark.asyncio
async def test_unlimited_event_accepts_everyone(db, events, make_user):
    event_id = add_event(db, max_attendees=None)
    for _ in range(3):
        await events.register_for_event(event_id, make_user())
    details = await events.get_event_details(event_id)
    assert len(details.registrations) == 3


@pytest.mark.asyncio
async def test_register_unknown_event_or_user(events, make_user):
    with pytest.raises(NotFound):
        await events.register_for_event(4242, make_user())
    event_id = (await events.get_all_events())[0].id
    with pytest.raises(NotFound):
        await events.register_for_event(event_id, 4242)


@pytest.mark.asyncio
async def test_event_details_include_registrants(db, events, make_user):
    event_id = add_event(db)
    user_id = make_user()
    await events.register_for_event(event_id, user_id)

    details = await events.get_event_details(event_id)

    assert details.name == "Pop-up Talk"
    assert [(r.user.id, r.status) for r in details.registrations] == [(user_id, "registered")]
    assert details.registrations[0].user.first_name == "Test"
    with pytest.raises(NotFound):
        await events.get_event_details(4242)


@pytest.mark.asyncio
async def test_user_registrations_newest_first(db, events, make_user):
    user_id = make_user()
    first = add_event(db, days=2, name="First")
    second = add_event(db, days=5, name="Second")
    await events.register_for_event(first, user_id)
    await events.register_for_event(second, user_id)
    await events.register_for_event(first, make_user())

    registrations = await events.get_user_registrations(user_id)

    assert [r.event.name for r in registrations] == ["Second", "First"]
    assert all(r.user_id == user_id for r in registrations)
