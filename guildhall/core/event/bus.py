"""
Guildhall EventBus: in-process async publish/subscribe.

Purpose
-------
Decouple domain services from whatever reacts to their writes (notifications,
audit trails, cache invalidation). Services publish after their transaction
commits; listeners never run inside a database transaction.

Responsibilities
----------------
- Register/unregister listeners for exact names ("team.member_joined") or
  wildcard patterns ("team.*", "*.registered", "*")
- Deliver each published event to every matching listener, in subscription
  order, awaiting coroutine listeners
- Isolate listener failures: one failing listener is logged and the rest
  still run; ``publish`` itself never raises for a listener error

Non-Responsibilities
--------------------
- Persistence or cross-process delivery
- Retrying failed listeners
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Any, Awaitable, Callable, Optional, Union

from guildhall.core.exceptions import EventBusError
from guildhall.core.logging.logger import LogContext, get_logger

logger = get_logger(__name__)

EventPayload = dict[str, Any]

CallbackType = Union[
    Callable[[EventPayload], Any],
    Callable[[EventPayload], Awaitable[Any]],
]


@dataclass(slots=True, frozen=True)
class EventListener:
    """A registered callback plus the pattern it was subscribed with."""

    pattern: str
    callback: CallbackType
    identifier: str
    once: bool = False

    def matches(self, event_name: str) -> bool:
        if "*" not in self.pattern:
            return event_name == self.pattern
        return fnmatchcase(event_name, self.pattern)


class EventBus:
    """
    Async pub/sub bus. Instance-based so tests can use a private bus.

    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("suggestion.*", audit_vote)
    >>> await bus.publish("suggestion.vote_cast", {"suggestion_id": 1, "user_id": 2})
    """

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []
        self._published: dict[str, int] = {}
        self._listener_errors: dict[str, int] = {}

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        """Reject callbacks that cannot take exactly one payload argument."""
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            return

        if len(sig.parameters) != 1:
            name = getattr(callback, "__qualname__", repr(callback))
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(sig.parameters)} parameters for '{name}'"
            )

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> str:
        """
        Subscribe ``callback`` to an event name or wildcard pattern.

        Returns
        -------
        str:
            The listener identifier (for unsubscribing later).

        Raises
        ------
        ValueError:
            If the callback signature is invalid or the identifier is taken.
        """
        if not event_name:
            raise ValueError("event_name must be a non-empty string")
        self._validate_callback_signature(callback)

        if identifier is None:
            qualname = getattr(callback, "__qualname__", type(callback).__name__)
            identifier = f"{qualname}@{event_name}#{len(self._listeners)}"

        if any(
            l.identifier == identifier and l.pattern == event_name for l in self._listeners
        ):
            raise ValueError(f"Listener '{identifier}' already subscribed to '{event_name}'")

        self._listeners.append(
            EventListener(pattern=event_name, callback=callback, identifier=identifier, once=once)
        )
        logger.debug(
            "EventBus: subscribed listener",
            extra={"event_name": event_name, "listener_id": identifier, "once": once},
        )
        return identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        before = len(self._listeners)
        self._listeners = [
            l
            for l in self._listeners
            if not (l.pattern == event_name and l.identifier == identifier)
        ]
        removed = len(self._listeners) < before
        if removed:
            logger.debug(
                "EventBus: unsubscribed listener",
                extra={"event_name": event_name, "listener_id": identifier},
            )
        return removed

    def clear(self) -> None:
        """Remove all listeners. Primarily for tests."""
        count = len(self._listeners)
        self._listeners.clear()
        logger.info("EventBus: cleared all listeners", extra={"previous_listener_count": count})

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    async def publish(self, event_name: str, data: EventPayload) -> list[Any]:
        """
        Deliver ``data`` to every listener whose pattern matches ``event_name``.

        Returns
        -------
        list[Any]:
            Return values of listeners that completed without raising.

        Raises
        ------
        EventBusError:
            If ``event_name`` is empty.
        """
        if not event_name:
            raise EventBusError(repr(event_name), "event name must be a non-empty string")

        self._published[event_name] = self._published.get(event_name, 0) + 1

        matching = [l for l in self._listeners if l.matches(event_name)]
        if not matching:
            logger.debug("EventBus: no listeners for event", extra={"event_name": event_name})
            return []

        one_shot = {id(l) for l in matching if l.once}
        if one_shot:
            self._listeners = [l for l in self._listeners if id(l) not in one_shot]

        results: list[Any] = []
        async with LogContext(component="event_bus", operation=event_name):
            for listener in matching:
                try:
                    result = listener.callback(data)
                    if inspect.isawaitable(result):
                        result = await result
                    results.append(result)
                except Exception as exc:
                    self._listener_errors[event_name] = self._listener_errors.get(event_name, 0) + 1
                    logger.error(
                        "EventBus: listener failed",
                        extra={
                            "event_name": event_name,
                            "listener_id": listener.identifier,
                            "error": str(exc),
                            "error_type": type(exc).__name__,
                        },
                        exc_info=True,
                    )
        return results

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        """Total listeners, or those that would receive ``event_name``."""
        if event_name is None:
            return len(self._listeners)
        return sum(1 for l in self._listeners if l.matches(event_name))

    def get_metrics_summary(self) -> dict[str, Any]:
        return {
            "total_events_published": sum(self._published.values()),
            "events_by_type": dict(self._published),
            "total_listener_errors": sum(self._listener_errors.values()),
            "errors_by_event": dict(self._listener_errors),
            "total_listeners": len(self._listeners),
        }
