"""
Events Module
=============

Exports:
- EventService: Event scheduling, capacity-gated registration and the
  upcoming event board
"""

from .records import EventRecord, RegistrationRecord
from .service import EVENT_ADMISSION, EventService

__all__ = ["EventService", "EventRecord", "RegistrationRecord", "EVENT_ADMISSION"]
