# bus.py
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

Handler = Callable[[], None]


class NotificationBus:
    """Payload-free "data changed" channel shared by every store in a process.

    Delivery is synchronous and in registration order: when ``publish``
    returns, every subscriber has already reloaded.
    """

    def __init__(self):
        self._subs: List[Handler] = []

    def subscribe(self, handler: Handler) -> Handler:
        self._subs.append(handler)
        return handler

    def unsubscribe(self, handler: Handler) -> None:
        try:
            self._subs.remove(handler)
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)

    def publish(self) -> None:
        for h in list(self._subs):
            try:
                h()
            except Exception as ex:
                logger.exception(f"bus handler error: {ex}")
