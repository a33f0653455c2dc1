"""
EventService - scheduled guild events and slot registration
===========================================================

Handles:
- Event creation (slot count bounded by Config)
- Registration through the shared CapacityGate, with a character ownership
  check on top of the common admission rules
- Upcoming event board with registration counts
- Registration listing per event

Events:
- event.created
- event.registered
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Type

from sqlalchemy import func, select

from guildhall.core.database.service import DatabaseService
from guildhall.core.validation.input_validator import InputValidator
from guildhall.database.models import Character, Event, EventRegistration, User
from guildhall.modules.admission import AdmissionPolicy, CapacityGate
from guildhall.modules.events.records import EventRecord, RegistrationRecord
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.base_service import BaseService
from guildhall.modules.shared.constants import (
    ACTIVE_EVENT_STATUSES,
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)
from guildhall.modules.shared.exceptions import NotFoundError

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from guildhall.core.config.config import Config
    from guildhall.core.event.bus import EventBus


async def _check_character_owner(session: AsyncSession, user_id: int, character_id: Any) -> None:
    """The registering character must exist and belong to the user."""
    stmt = select(func.count(Character.id)).where(
        Character.id == character_id,
        Character.user_id == user_id,
    )
    if (await session.execute(stmt)).scalar_one() == 0:
        raise NotFoundError(
            "Character",
            character_id,
            message=(
                f"Character with ID {character_id} not found "
                f"or does not belong to user {user_id}"
            ),
        )


def _build_registration(event_id: int, user_id: int, character_id: Any) -> EventRegistration:
    return EventRegistration(event_id=event_id, user_id=user_id, character_id=character_id)


EVENT_ADMISSION = AdmissionPolicy[Event, EventRegistration](
    action="register_for_event",
    parent_label="Event",
    parent_model=Event,
    capacity_attr="max_slots",
    membership_model=EventRegistration,
    parent_fk="event_id",
    build_row=_build_registration,
    parent_not_found="Event with ID {parent_id} not found",
    user_not_found="User with ID {user_id} not found",
    already_admitted="User {user_id} is already registered for event {parent_id}",
    full="Event {parent_id} is full ({current}/{capacity} slots)",
    extra_check=_check_character_owner,
)


class EventService(BaseService):
    """
    Guild event scheduling and registration.

    Business Logic:
    - max_slots within [EVENT_MIN_SLOTS, EVENT_MAX_SLOTS]
    - One registration per (event, user), with a character the user owns
    - Registration does not look at event status
    """

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config, event_bus, logger)
        self._event_repo = BaseRepository[Event](Event, self.log)
        self._registration_repo = BaseRepository[EventRegistration](EventRegistration, self.log)
        self._user_repo = BaseRepository[User](User, self.log)
        self._gate = CapacityGate[Event, EventRegistration](EVENT_ADMISSION, self.log)

    async def create_event(
        self,
        title: str,
        description: str,
        event_date: Any,
        max_slots: int,
        created_by: int,
    ) -> EventRecord:
        """
        Schedule an event with status upcoming.

        Raises:
            ValidationError: Bad title, description, date or slot count
            NotFoundError: Creator does not exist
        """
        title = InputValidator.validate_string(
            title, "title", min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH
        )
        description = InputValidator.validate_string(
            description,
            "description",
            min_length=DESCRIPTION_MIN_LENGTH,
            max_length=DESCRIPTION_MAX_LENGTH,
        )
        event_date = InputValidator.validate_datetime(event_date, "event_date")
        max_slots = InputValidator.validate_integer(
            max_slots,
            "max_slots",
            min_value=self.get_config("EVENT_MIN_SLOTS", 1),
            max_value=self.get_config("EVENT_MAX_SLOTS", 100),
        )
        created_by = InputValidator.validate_id(created_by, "created_by")

        async with DatabaseService.get_transaction() as session:
            if not await self._user_repo.exists(session, User.id == created_by):
                raise NotFoundError("User", created_by, message="User not found")

            event = self._event_repo.add(
                session,
                Event(
                    title=title,
                    description=description,
                    event_date=event_date,
                    max_slots=max_slots,
                    created_by=created_by,
                ),
            )
            await self._event_repo.flush(session)
            record = EventRecord.from_model(event)

        self.log_operation("create_event", event_id=record.id, max_slots=max_slots)
        await self.emit_event(
            "event.created",
            {"event_id": record.id, "created_by": created_by, "max_slots": max_slots},
        )
        return record

    async def register_for_event(
        self,
        event_id: int,
        user_id: int,
        character_id: int,
    ) -> RegistrationRecord:
        """
        Register a user (playing ``character_id``) for an event with free slots.

        Raises:
            ValidationError: Malformed ids
            NotFoundError: Event, user or owned character missing
            ConflictError: Already registered, or the event is full
        """
        event_id = InputValidator.validate_id(event_id, "event_id")
        user_id = InputValidator.validate_id(user_id, "user_id")
        character_id = InputValidator.validate_id(character_id, "character_id")

        async with DatabaseService.get_transaction() as session:
            admission = await self._gate.admit(session, event_id, user_id, extra=character_id)
            record = RegistrationRecord.from_model(admission.row)

        self.log_operation(
            "register_for_event",
            event_id=event_id,
            user_id=user_id,
            character_id=character_id,
            occupied=admission.occupied,
            capacity=admission.capacity,
        )
        await self.emit_event(
            "event.registered",
            {
                "event_id": event_id,
                "user_id": user_id,
                "character_id": character_id,
                "registered_count": admission.occupied,
                "max_slots": admission.capacity,
            },
        )
        return record

    async def _registration_counts(self, session: AsyncSession) -> Dict[int, int]:
        stmt = select(EventRegistration.event_id, func.count(EventRegistration.id)).group_by(
            EventRegistration.event_id
        )
        return {event_id: count for event_id, count in (await session.execute(stmt)).all()}

    async def get_upcoming_events(self) -> List[EventRecord]:
        """Upcoming and ongoing events, soonest first, with registration counts."""
        async with DatabaseService.get_session() as session:
            events = await self._event_repo.find_many_where(
                session,
                Event.status.in_(ACTIVE_EVENT_STATUSES),
                order_by=(Event.event_date, Event.id),
            )
            counts = await self._registration_counts(session)
            return [EventRecord.from_model(e, registered_count=counts.get(e.id, 0)) for e in events]

    async def get_event_registrations(self, event_id: int) -> List[RegistrationRecord]:
        event_id = InputValidator.validate_id(event_id, "event_id")

        async with DatabaseService.get_session() as session:
            registrations = await self._registration_repo.find_many_where(
                session,
                EventRegistration.event_id == event_id,
                order_by=(EventRegistration.registered_at, EventRegistration.id),
            )
            return [RegistrationRecord.from_model(r) for r in registrations]
