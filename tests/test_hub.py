# tests/test_hub.py

from __future__ import annotations

import asyncio
import logging

import pytest

from taskseq.events.hub import NotificationHub, create_hub


def test_publish_calls_subscribers_in_order() -> None:
    hub = create_hub()
    calls: list[tuple[str, object]] = []

    hub.subscribe("ch", lambda p: calls.append(("first", p)))
    hub.subscribe("ch", lambda p: calls.append(("second", p)))
    hub.subscribe("other", lambda p: calls.append(("other", p)))

    hub.publish("ch", 1)

    assert calls == [("first", 1), ("second", 1)]


def test_publish_without_subscribers_is_noop() -> None:
    hub = NotificationHub()
    hub.publish("nobody", {"x": 1})
    assert hub.channels() == []


def test_failing_subscriber_is_isolated(caplog: pytest.LogCaptureFixture) -> None:
    hub = NotificationHub()
    calls: list[str] = []

    def bad(payload):
        raise RuntimeError("handler bug")

    hub.subscribe("ch", lambda p: calls.append("before"))
    hub.subscribe("ch", bad)
    hub.subscribe("ch", lambda p: calls.append("after"))

    with caplog.at_level(logging.ERROR, logger="taskseq.events.hub"):
        hub.publish("ch", None)

    assert calls == ["before", "after"]
    assert "handler bug" in caplog.text


def test_unsubscribe_callable_and_explicit_forms() -> None:
    hub = NotificationHub()
    calls: list[str] = []

    def a(p):
        calls.append("a")

    def b(p):
        calls.append("b")

    unsubscribe_a = hub.subscribe("ch", a)
    hub.subscribe("ch", b)
    assert hub.subscriber_count("ch") == 2

    unsubscribe_a()
    hub.publish("ch")
    assert calls == ["b"]

    hub.unsubscribe("ch", b)
    assert hub.subscriber_count("ch") == 0
    assert "ch" not in hub.channels()

    # unknown channel / handler: no-op
    hub.unsubscribe("ch", b)
    hub.unsubscribe("missing")


def test_unsubscribe_all_handlers_of_channel() -> None:
    hub = NotificationHub()
    hub.subscribe("ch", lambda p: None)
    hub.subscribe("ch", lambda p: None)
    hub.subscribe("keep", lambda p: None)

    hub.unsubscribe("ch")

    assert hub.channels() == ["keep"]
    hub.clear_channel("keep")
    assert hub.channels() == []


def test_same_handler_subscribed_once() -> None:
    hub = NotificationHub()
    calls: list[int] = []
    handler = calls.append

    hub.subscribe("ch", handler)
    hub.subscribe("ch", handler)
    hub.publish("ch", 7)

    assert calls == [7]
    assert hub.subscribers("ch") == [handler]


def test_once_delivers_a_single_time() -> None:
    hub = NotificationHub()
    calls: list[int] = []

    hub.once("ch", calls.append)
    hub.publish("ch", 1)
    hub.publish("ch", 2)

    assert calls == [1]
    assert hub.subscriber_count("ch") == 0


def test_once_can_be_removed_by_original_handler() -> None:
    hub = NotificationHub()
    calls: list[int] = []

    def handler(p):
        calls.append(p)

    hub.once("ch", handler)
    hub.unsubscribe("ch", handler)
    hub.publish("ch", 1)

    assert calls == []


def test_once_is_removed_even_when_it_raises() -> None:
    hub = NotificationHub()

    def bad(p):
        raise ValueError("boom")

    hub.once("ch", bad)
    hub.publish("ch", 1)

    assert hub.subscriber_count("ch") == 0


def test_unsubscribing_during_delivery_does_not_skip_others() -> None:
    hub = NotificationHub()
    calls: list[str] = []
    unsubscribers = {}

    def first(p):
        calls.append("first")
        unsubscribers["second"]()

    def second(p):
        calls.append("second")

    hub.subscribe("ch", first)
    unsubscribers["second"] = hub.subscribe("ch", second)

    hub.publish("ch")
    assert calls == ["first", "second"]

    hub.publish("ch")
    assert calls == ["first", "second", "first"]


def test_subscriber_limit_is_advisory(caplog: pytest.LogCaptureFixture) -> None:
    hub = NotificationHub(max_subscribers=2)

    with caplog.at_level(logging.WARNING, logger="taskseq.events.hub"):
        for _ in range(4):
            hub.subscribe("ch", lambda p: None)

    assert hub.subscriber_count("ch") == 4
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "ch has 3 subscribers" in warnings[0].getMessage()


def test_max_subscribers_must_not_be_negative() -> None:
    hub = NotificationHub()
    assert hub.max_subscribers == 10
    hub.max_subscribers = 0
    assert hub.max_subscribers == 0
    with pytest.raises(ValueError):
        hub.max_subscribers = -1


def test_clear_drops_everything() -> None:
    hub = NotificationHub()
    hub.subscribe("a", lambda p: None)
    hub.subscribe("b", lambda p: None)
    hub.clear()
    assert hub.channels() == []


@pytest.mark.asyncio
async def test_async_handlers_are_scheduled() -> None:
    hub = NotificationHub()
    seen: list[int] = []

    async def handler(p):
        await asyncio.sleep(0)
        seen.append(p)

    hub.subscribe("ch", handler)
    hub.publish("ch", 5)
    assert seen == []

    await hub.drain()
    assert seen == [5]


@pytest.mark.asyncio
async def test_async_handler_failure_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    hub = NotificationHub()

    async def handler(p):
        raise RuntimeError("async handler bug")

    hub.subscribe("ch", handler)
    with caplog.at_level(logging.ERROR, logger="taskseq.events.hub"):
        hub.publish("ch", None)
        await hub.drain()

    assert "async handler bug" in caplog.text


def test_async_handler_without_loop_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    hub = NotificationHub()

    async def handler(p):
        return None

    hub.subscribe("ch", handler)
    with caplog.at_level(logging.WARNING, logger="taskseq.events.hub"):
        hub.publish("ch", None)

    assert "no running event loop" in caplog.text
