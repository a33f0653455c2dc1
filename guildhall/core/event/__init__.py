"""
In-process event bus for Guildhall domain events.
"""

from .bus import CallbackType, EventBus, EventListener, EventPayload

__all__ = ["EventBus", "EventListener", "EventPayload", "CallbackType"]
