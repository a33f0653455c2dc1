"""
Unit tests for EventBus.

Covers exact and wildcard delivery, once-listeners, listener error
isolation and the subscription guards.
"""

import pytest

from guildhall.core.event.bus import EventBus
from guildhall.core.exceptions import EventBusError


@pytest.mark.unit
class TestSubscription:
    def test_rejects_wrong_arity(self):
        bus = EventBus()

        with pytest.raises(ValueError, match="exactly 1 parameter"):
            bus.subscribe("team.member_joined", lambda a, b: None)

    def test_rejects_duplicate_identifier(self):
        bus = EventBus()
        bus.subscribe("team.*", lambda payload: None, identifier="audit")

        with pytest.raises(ValueError, match="already subscribed"):
            bus.subscribe("team.*", lambda payload: None, identifier="audit")

    def test_unsubscribe(self):
        bus = EventBus()
        listener_id = bus.subscribe("event.registered", lambda payload: None)

        assert bus.unsubscribe("event.registered", listener_id) is True
        assert bus.unsubscribe("event.registered", listener_id) is False
        assert bus.get_listener_count() == 0


@pytest.mark.unit
class TestPublish:
    async def test_exact_and_wildcard_delivery(self):
        bus = EventBus()
        seen = []
        bus.subscribe("suggestion.vote_cast", lambda p: seen.append(("exact", p["n"])))
        bus.subscribe("suggestion.*", lambda p: seen.append(("prefix", p["n"])))
        bus.subscribe("team.*", lambda p: seen.append(("other", p["n"])))

        await bus.publish("suggestion.vote_cast", {"n": 1})

        assert seen == [("exact", 1), ("prefix", 1)]
        assert bus.get_listener_count("suggestion.vote_switched") == 1

    async def test_async_listener_awaited(self):
        bus = EventBus()
        seen = []

        async def listener(payload):
            seen.append(payload["team_id"])
            return "ok"

        bus.subscribe("team.member_joined", listener)

        results = await bus.publish("team.member_joined", {"team_id": 3})

        assert seen == [3]
        assert results == ["ok"]

    async def test_failing_listener_is_isolated(self):
        bus = EventBus()
        seen = []

        def broken(payload):
            raise RuntimeError("boom")

        bus.subscribe("event.registered", broken)
        bus.subscribe("event.registered", lambda p: seen.append(p["event_id"]))

        await bus.publish("event.registered", {"event_id": 9})

        assert seen == [9]
        metrics = bus.get_metrics_summary()
        assert metrics["total_listener_errors"] == 1
        assert metrics["events_by_type"] == {"event.registered": 1}

    async def test_once_listener_fires_once(self):
        bus = EventBus()
        seen = []
        bus.subscribe("user.created", lambda p: seen.append(p), once=True)

        await bus.publish("user.created", {"user_id": 1})
        await bus.publish("user.created", {"user_id": 2})

        assert seen == [{"user_id": 1}]

    async def test_no_listeners(self):
        assert await EventBus().publish("nobody.listens", {}) == []

    async def test_empty_event_name(self):
        with pytest.raises(EventBusError):
            await EventBus().publish("", {})
