"""
Tests for EventService
======================

Test Coverage
-------------
- Event creation and slot bounds
- Registration through the capacity gate, including character ownership
- Duplicate registration and full events
- Upcoming board: status filter, ordering, registration counts
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from guildhall.core.database.service import DatabaseService
from guildhall.database.models import Event, EventStatus
from guildhall.modules.shared.exceptions import ConflictError, NotFoundError, ValidationError


async def set_status(event_id: int, status: EventStatus) -> None:
    async with DatabaseService.get_transaction() as session:
        await session.execute(update(Event).where(Event.id == event_id).values(status=status.value))


@pytest.mark.unit
@pytest.mark.database
class TestCreateEvent:
    async def test_new_event_is_upcoming(self, event_service, make_user):
        creator = await make_user()
        when = datetime.now(timezone.utc) + timedelta(days=3)

        event = await event_service.create_event(
            "Guild Wars", "Bring your best build", when, 10, creator.id
        )

        assert event.status == "upcoming"
        assert event.max_slots == 10
        assert event.registered_count == 0
        assert event.available_slots == 10

    async def test_accepts_iso_date_string(self, event_service, make_user):
        creator = await make_user()

        event = await event_service.create_event(
            "Nest", "Sea Dragon", "2030-01-15T20:00:00+00:00", 4, creator.id
        )

        assert event.event_date.year == 2030

    @pytest.mark.parametrize("max_slots", [0, 101, -5])
    async def test_slot_bounds(self, event_service, make_user, max_slots):
        creator = await make_user()

        with pytest.raises(ValidationError):
            await event_service.create_event(
                "Nest", "Sea Dragon", datetime.now(timezone.utc), max_slots, creator.id
            )

    async def test_bad_date(self, event_service, make_user):
        creator = await make_user()

        with pytest.raises(ValidationError):
            await event_service.create_event("Nest", "Sea Dragon", "next tuesday", 4, creator.id)

    async def test_missing_creator(self, event_service, database):
        with pytest.raises(NotFoundError, match="User not found"):
            await event_service.create_event(
                "Nest", "Sea Dragon", datetime.now(timezone.utc), 4, 31337
            )


@pytest.mark.unit
@pytest.mark.database
class TestRegisterForEvent:
    """Capacity-gated admission for events."""

    async def test_owned_character_then_foreign_character(
        self, event_service, make_user, make_character, make_event
    ):
        # Arrange
        e_user = await make_user()
        f_user = await make_user()
        e_character = await make_character(e_user.id)
        event = await make_event(e_user.id, max_slots=1)

        # Act
        registration = await event_service.register_for_event(
            event.id, e_user.id, e_character.id
        )

        # Assert
        assert registration.event_id == event.id
        assert registration.user_id == e_user.id
        assert registration.character_id == e_character.id

        with pytest.raises(NotFoundError) as exc_info:
            await event_service.register_for_event(event.id, f_user.id, e_character.id)

        assert exc_info.value.message == (
            f"Character with ID {e_character.id} not found "
            f"or does not belong to user {f_user.id}"
        )

    async def test_foreign_character_rejected_even_with_free_slots(
        self, event_service, make_user, make_character, make_event
    ):
        owner = await make_user()
        other = await make_user()
        character = await make_character(owner.id)
        event = await make_event(owner.id, max_slots=10)

        with pytest.raises(NotFoundError, match="does not belong to user"):
            await event_service.register_for_event(event.id, other.id, character.id)

        assert await event_service.get_event_registrations(event.id) == []

    async def test_second_registration_with_other_character(
        self, event_service, make_user, make_character, make_event
    ):
        g_user = await make_user()
        main = await make_character(g_user.id, ign="Main")
        alt = await make_character(g_user.id, ign="Alt", job="saint")
        event = await make_event(g_user.id, max_slots=5)
        await event_service.register_for_event(event.id, g_user.id, main.id)

        with pytest.raises(ConflictError) as exc_info:
            await event_service.register_for_event(event.id, g_user.id, alt.id)

        assert exc_info.value.message == (
            f"User {g_user.id} is already registered for event {event.id}"
        )
        registrations = await event_service.get_event_registrations(event.id)
        assert [r.character_id for r in registrations] == [main.id]

    async def test_full_event(self, event_service, make_user, make_character, make_event):
        first = await make_user()
        second = await make_user()
        first_char = await make_character(first.id)
        second_char = await make_character(second.id)
        event = await make_event(first.id, max_slots=1)
        await event_service.register_for_event(event.id, first.id, first_char.id)

        with pytest.raises(ConflictError) as exc_info:
            await event_service.register_for_event(event.id, second.id, second_char.id)

        assert exc_info.value.message == f"Event {event.id} is full (1/1 slots)"

    async def test_missing_event(self, event_service, make_user, make_character):
        user = await make_user()
        character = await make_character(user.id)

        with pytest.raises(NotFoundError) as exc_info:
            await event_service.register_for_event(4040, user.id, character.id)

        assert exc_info.value.message == "Event with ID 4040 not found"

    async def test_missing_user(self, event_service, make_user, make_character, make_event):
        owner = await make_user()
        character = await make_character(owner.id)
        event = await make_event(owner.id)

        with pytest.raises(NotFoundError) as exc_info:
            await event_service.register_for_event(event.id, 5050, character.id)

        assert exc_info.value.message == "User with ID 5050 not found"

    async def test_missing_character(self, event_service, make_user, make_event):
        user = await make_user()
        event = await make_event(user.id)

        with pytest.raises(NotFoundError, match="Character with ID 6060 not found"):
            await event_service.register_for_event(event.id, user.id, 6060)

    async def test_cancelled_event_still_accepts_registration(
        self, event_service, make_user, make_character, make_event
    ):
        user = await make_user()
        character = await make_character(user.id)
        event = await make_event(user.id)
        await set_status(event.id, EventStatus.CANCELLED)

        registration = await event_service.register_for_event(event.id, user.id, character.id)

        assert registration.event_id == event.id

    async def test_registration_publishes_event(
        self, event_service, make_user, make_character, make_event, published_events
    ):
        user = await make_user()
        character = await make_character(user.id)
        event = await make_event(user.id, max_slots=3)
        published_events.clear()

        await event_service.register_for_event(event.id, user.id, character.id)

        assert [e["name"] for e in published_events] == ["event.registered"]
        payload = published_events[0]["data"]
        assert payload["registered_count"] == 1
        assert payload["max_slots"] == 3
        assert payload["character_id"] == character.id


@pytest.mark.unit
@pytest.mark.database
class TestUpcomingEvents:
    async def test_filters_orders_and_counts(
        self, event_service, make_user, make_character, make_event
    ):
        user = await make_user()
        character = await make_character(user.id)
        now = datetime.now(timezone.utc)

        later = await make_event(user.id, title="Later", event_date=now + timedelta(days=5))
        sooner = await make_event(user.id, title="Sooner", event_date=now + timedelta(days=1))
        running = await make_event(user.id, title="Running", event_date=now - timedelta(hours=1))
        done = await make_event(user.id, title="Done", event_date=now - timedelta(days=3))
        dropped = await make_event(user.id, title="Dropped", event_date=now + timedelta(days=2))

        await set_status(running.id, EventStatus.ONGOING)
        await set_status(done.id, EventStatus.COMPLETED)
        await set_status(dropped.id, EventStatus.CANCELLED)
        await event_service.register_for_event(sooner.id, user.id, character.id)

        events = await event_service.get_upcoming_events()

        assert [e.title for e in events] == ["Running", "Sooner", "Later"]
        counts = {e.id: e.registered_count for e in events}
        assert counts == {running.id: 0, sooner.id: 1, later.id: 0}

    async def test_naive_and_offset_dates_order_in_utc(self, event_service, make_user):
        creator = await make_user()
        # 12:00 UTC, given without a zone
        naive = await event_service.create_event(
            "Naive", "Plain clock time", datetime(2031, 3, 1, 12, 0), 4, creator.id
        )
        # 13:00+02:00 is 11:00 UTC
        offset = await event_service.create_event(
            "Offset",
            "Berlin summer time",
            datetime(2031, 3, 1, 13, 0, tzinfo=timezone(timedelta(hours=2))),
            4,
            creator.id,
        )

        assert naive.event_date == datetime(2031, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert offset.event_date == datetime(2031, 3, 1, 11, 0, tzinfo=timezone.utc)

        events = await event_service.get_upcoming_events()
        assert [e.title for e in events] == ["Offset", "Naive"]

    async def test_empty_board(self, event_service, database):
        assert await event_service.get_upcoming_events() == []
