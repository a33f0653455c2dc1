"""
Read-only records returned by EventService.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from guildhall.database.models import Event, EventRegistration


@dataclass(frozen=True, slots=True)
class EventRecord:
    id: int
    title: str
    description: str
    event_date: datetime
    max_slots: int
    status: str
    created_by: int
    created_at: datetime
    registered_count: int = 0

    @property
    def available_slots(self) -> int:
        return max(self.max_slots - self.registered_count, 0)

    @classmethod
    def from_model(cls, event: Event, registered_count: int = 0) -> "EventRecord":
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            event_date=event.event_date,
            max_slots=event.max_slots,
            status=event.status,
            created_by=event.created_by,
            created_at=event.created_at,
            registered_count=registered_count,
        )


@dataclass(frozen=True, slots=True)
class RegistrationRecord:
    id: int
    event_id: int
    user_id: int
    character_id: int
    registered_at: datetime

    @classmethod
    def from_model(cls, registration: EventRegistration) -> "RegistrationRecord":
        return cls(
            id=registration.id,
            event_id=registration.event_id,
            user_id=registration.user_id,
            character_id=registration.character_id,
            registered_at=registration.registered_at,
        )
