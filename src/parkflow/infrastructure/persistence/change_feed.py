from collections import defaultdict
from typing import Callable, Dict, List

from loguru import logger

from parkflow.application.repositories import AbstractChangeFeed


class InMemoryChangeFeed(AbstractChangeFeed):
    """In-process row-change notifications, keyed by table name.

    Events are published after a successful commit. A subscriber that raises is
    logged and skipped; the write it is reacting to has already happened.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[str, dict], None]]] = defaultdict(list)

    def subscribe(self, table: str, callback: Callable[[str, dict], None]) -> Callable[[], None]:
        self._subscribers[table].append(callback)

        def unsubscribe():
            if callback in self._subscribers[table]:
                self._subscribers[table].remove(callback)

        return unsubscribe

    def publish(self, table: str, event: str, row: dict):
        for callback in list(self._subscribers.get(table, [])):
            try:
                callback(event, row)
            except Exception:
                logger.exception(f"Change feed subscriber failed for {event} on {table}")


change_feed = InMemoryChangeFeed()
