# src/taskseq/events/hub.py

from __future__ import annotations

"""
Notification hub.

A small synchronous publish/subscribe broadcaster:
- channels are arbitrary hashable keys (the sequencer uses QueueEvent),
- subscribers of a channel are called in subscription order,
- a failing subscriber is logged and skipped, it never reaches the publisher,
- a subscriber returning an awaitable gets it scheduled on the running loop.

The subscriber limit is advisory: going over it logs a warning, nothing more.
"""

import asyncio
import inspect
import logging
from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)

Handler = Callable[[Any], Any]

DEFAULT_MAX_SUBSCRIBERS = 10


class NotificationHub(Generic[K]):
    def __init__(self, *, max_subscribers: int = DEFAULT_MAX_SUBSCRIBERS) -> None:
        self._channels: dict[K, list[Handler]] = {}
        self._pending: set[asyncio.Future[Any]] = set()
        self.max_subscribers = max_subscribers

    @property
    def max_subscribers(self) -> int:
        return self._max_subscribers

    @max_subscribers.setter
    def max_subscribers(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"max_subscribers must be >= 0, got {n}")
        self._max_subscribers = int(n)

    # ---- subscription ----

    def subscribe(self, channel: K, handler: Handler) -> Callable[[], None]:
        """
        Add handler to channel. Returns a callable that removes it again.

        Subscribing the same handler twice to one channel is a no-op.
        """
        handlers = self._channels.setdefault(channel, [])
        if handler not in handlers:
            handlers.append(handler)
            self._check_limit(channel, len(handlers))

        def _unsubscribe() -> None:
            self.unsubscribe(channel, handler)

        return _unsubscribe

    def once(self, channel: K, handler: Handler) -> Callable[[], None]:
        """Like subscribe(), but the handler is dropped before its first call."""

        def _once(payload: Any) -> Any:
            self.unsubscribe(channel, _once)
            return handler(payload)

        _once.__wrapped__ = handler  # type: ignore[attr-defined]
        return self.subscribe(channel, _once)

    def unsubscribe(self, channel: K, handler: Handler | None = None) -> None:
        """Remove one handler, or every handler of channel when handler is None."""
        handlers = self._channels.get(channel)
        if handlers is None:
            return

        if handler is None:
            del self._channels[channel]
            return

        handlers[:] = [
            h for h in handlers if h is not handler and getattr(h, "__wrapped__", None) is not handler
        ]
        if not handlers:
            del self._channels[channel]

    def clear(self) -> None:
        self._channels.clear()

    def clear_channel(self, channel: K) -> None:
        self.unsubscribe(channel)

    # ---- delivery ----

    def publish(self, channel: K, payload: Any = None) -> None:
        handlers = self._channels.get(channel)
        if not handlers:
            return

        # Snapshot: handlers may (un)subscribe while we deliver.
        for handler in list(handlers):
            try:
                result = handler(payload)
            except Exception:
                logger.exception("Event handler %r failed on %s", handler, _channel_name(channel))
                continue

            if inspect.isawaitable(result):
                self._schedule(channel, result)

    def _schedule(self, channel: K, awaitable: Any) -> None:
        try:
            fut = asyncio.ensure_future(awaitable, loop=asyncio.get_running_loop())
        except RuntimeError:
            logger.warning(
                "Async handler on %s dropped: no running event loop", _channel_name(channel)
            )
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        self._pending.add(fut)

        def _done(f: asyncio.Future[Any]) -> None:
            self._pending.discard(f)
            if f.cancelled():
                return
            exc = f.exception()
            if exc is not None:
                logger.error(
                    "Async event handler failed on %s",
                    _channel_name(channel),
                    exc_info=(type(exc), exc, exc.__traceback__),
                )

        fut.add_done_callback(_done)

    async def drain(self) -> None:
        """Wait for async handlers scheduled by publish() to complete."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ---- introspection ----

    def subscriber_count(self, channel: K) -> int:
        return len(self._channels.get(channel, ()))

    def channels(self) -> list[K]:
        return list(self._channels)

    def subscribers(self, channel: K) -> list[Handler]:
        return list(self._channels.get(channel, ()))

    def _check_limit(self, channel: K, count: int) -> None:
        # Warn once, when the channel first goes over the limit.
        if count == self._max_subscribers + 1:
            logger.warning(
                "%s has %d subscribers, more than the advised %d (possible leak)",
                _channel_name(channel),
                count,
                self._max_subscribers,
            )


def _channel_name(channel: Hashable) -> str:
    return str(getattr(channel, "value", channel))


def create_hub(*, max_subscribers: int = DEFAULT_MAX_SUBSCRIBERS) -> NotificationHub[Any]:
    return NotificationHub(max_subscribers=max_subscribers)
