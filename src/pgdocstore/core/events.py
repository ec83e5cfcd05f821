"""Connection lifecycle notifications.

The EventRegistry replaces an event-emitter base class with an explicit
subscription list. Observers may be plain functions or coroutine functions;
they receive the event name and a payload (the connector, or the exception
for DB_ERROR).
"""

import asyncio
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pgdocstore.core.logging import get_logger

logger = get_logger(__name__)


class ConnectionEvent(str, Enum):
    """Events emitted by the connector."""

    CONNECTED = "DB_CONNECTED"
    ERROR = "DB_ERROR"
    DISCONNECTED = "DB_DISCONNECTED"


@dataclass
class Subscription:
    """A registered observer.

    Attributes:
        id: Unique identifier returned from subscribe().
        event: The event this observer listens to.
        callback: Function called with (event, payload).
        registration_order: Order in which this observer was registered.
    """

    id: str
    event: ConnectionEvent
    callback: Callable
    registration_order: int = 0


class EventRegistry:
    """Subscription list for connection events.

    Example:
        events = EventRegistry()
        sub_id = events.subscribe(ConnectionEvent.CONNECTED, on_connected)
        await events.emit(ConnectionEvent.CONNECTED, connector)
        events.unsubscribe(sub_id)
    """

    def __init__(self) -> None:
        self._subscriptions: dict[ConnectionEvent, list[Subscription]] = {}
        self._by_id: dict[str, Subscription] = {}
        self._counter: int = 0

    def subscribe(self, event: ConnectionEvent | str, callback: Callable) -> str:
        """Register an observer for an event.

        Args:
            event: Event (or its string value, e.g. "DB_CONNECTED").
            callback: Sync or async callable accepting (event, payload).

        Returns:
            Subscription id for later removal.
        """
        event = ConnectionEvent(event)
        self._counter += 1
        subscription = Subscription(
            id=f"sub_{uuid.uuid4().hex[:12]}",
            event=event,
            callback=callback,
            registration_order=self._counter,
        )
        self._subscriptions.setdefault(event, []).append(subscription)
        self._by_id[subscription.id] = subscription

        logger.debug("Observer subscribed", subscription_id=subscription.id, db_event=event.value)
        return subscription.id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove an observer.

        Returns:
            True if removed, False if the id is unknown.
        """
        subscription = self._by_id.pop(subscription_id, None)
        if subscription is None:
            logger.warning("Subscription not found", subscription_id=subscription_id)
            return False

        remaining = [
            s for s in self._subscriptions.get(subscription.event, []) if s.id != subscription_id
        ]
        if remaining:
            self._subscriptions[subscription.event] = remaining
        else:
            self._subscriptions.pop(subscription.event, None)
        return True

    def subscribers(self, event: ConnectionEvent | str) -> list[Subscription]:
        return list(self._subscriptions.get(ConnectionEvent(event), []))

    async def emit(self, event: ConnectionEvent | str, payload: Any = None) -> list[str]:
        """Notify every observer of an event in registration order.

        A failing observer is logged and does not prevent the others from
        running, nor does it change the outcome of the operation that
        emitted the event.

        Returns:
            Error messages from observers that raised.
        """
        event = ConnectionEvent(event)
        errors: list[str] = []

        for subscription in self.subscribers(event):
            try:
                outcome = subscription.callback(event.value, payload)
                if asyncio.iscoroutine(outcome):
                    await outcome
            except Exception as e:
                logger.error(
                    "Observer failed",
                    subscription_id=subscription.id,
                    db_event=event.value,
                    error=str(e),
                )
                errors.append(f"{subscription.id}: {e}")

        return errors
