"""Per-chamber event bus for state change observers."""

import logging

logger = logging.getLogger(__name__)

STATE_CHANGED = "state_changed"
MELTED_DOWN = "melted_down"
PIPES_RUPTURED = "pipes_ruptured"
EXPLODED = "exploded"
TORN_DOWN = "torn_down"


class EventBus:
    def __init__(self):
        self.listeners = {}

    def subscribe(self, event_name, callback):
        self.listeners.setdefault(event_name, []).append(callback)

    def unsubscribe(self, event_name, callback):
        callbacks = self.listeners.get(event_name, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def publish(self, event_name, payload=None):
        """Publish an event to all subscribers.

        ``state_changed`` carries no payload, so its subscribers are called
        without arguments. Other events pass the payload through. A failing
        subscriber is logged and the remaining subscribers still run.

        Returns:
            Number of subscribers that handled the event
        """
        count = 0
        for callback in list(self.listeners.get(event_name, [])):
            try:
                if event_name == STATE_CHANGED:
                    callback()
                else:
                    callback(payload)
                count += 1
            except Exception:
                logger.exception("Error in %s subscriber %r", event_name, callback)
        return count
