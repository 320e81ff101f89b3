"""
services/state_channel.py – Replay-latest publish/subscribe state container.

A StateChannel holds one current value.  Subscribers receive that value as
soon as they subscribe and then every published replacement, synchronously
and in subscription order.  Channels are single-writer: only the component
that owns a channel publishes on it.
"""

import dataclasses
import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[T], None]


class Subscription:
    """Cancellation handle returned by StateChannel.subscribe()."""

    def __init__(self, channel: "StateChannel", callback: Callable) -> None:
        self._channel = channel
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Stop delivery; safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self._channel._remove(self)


class StateChannel(Generic[T]):
    def __init__(self, initial: T, *, name: str = "") -> None:
        self._value = initial
        self._name = name or type(initial).__name__
        self._subscriptions: List[Subscription] = []

    def __repr__(self) -> str:
        return f"StateChannel({self._name}={self._value!r})"

    @property
    def value(self) -> T:
        return self._value

    def publish(self, value: T) -> None:
        """Replace the current value and notify every subscriber."""
        self._value = value
        # Copy so callbacks may cancel or subscribe while we iterate.
        for sub in list(self._subscriptions):
            if sub.active:
                self._deliver(sub, value)

    def update(self, **changes) -> None:
        """Publish a copy of the current dataclass value with *changes* applied."""
        self.publish(dataclasses.replace(self._value, **changes))

    def subscribe(self, callback: Subscriber) -> Subscription:
        """
        Register *callback* and immediately deliver the current value.

        Returns
        -------
        Subscription
            Call ``cancel()`` to stop receiving values.
        """
        sub = Subscription(self, callback)
        self._subscriptions.append(sub)
        self._deliver(sub, self._value)
        return sub

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _remove(self, sub: Subscription) -> None:
        try:
            self._subscriptions.remove(sub)
        except ValueError:
            pass

    def _deliver(self, sub: Subscription, value: T) -> None:
        try:
            sub._callback(value)
        except Exception:  # noqa: BLE001
            # One broken observer must not starve the others.
            logger.exception("Subscriber of %s raised", self._name)
