# app/core/events.py
"""
In-process change feed backing the live (WebSocket) subscriptions.

Services call `feed.publish(<collection>)` after a write is committed.
Each live subscription owns an asyncio.Queue bound to the event loop it
was created on; publishing may happen from threadpool workers (sync
endpoints), so delivery goes through `call_soon_threadsafe`.

Notifications carry only the collection name. Subscribers re-query to
build their next snapshot.
"""
import asyncio
import logging
import threading

logger = logging.getLogger(__name__)

REQUESTS = "requests"
PITCHES = "pitches"


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: list[tuple[frozenset[str], asyncio.AbstractEventLoop, asyncio.Queue]] = []

    def subscribe(self, *collections: str) -> asyncio.Queue:
        """
        Register interest in one or more collections.

        Must be called from a coroutine running on the loop that will
        consume the returned queue.
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        with self._lock:
            self._subscribers.append((frozenset(collections), loop, queue))
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        with self._lock:
            self._subscribers = [s for s in self._subscribers if s[2] is not queue]

    def publish(self, collection: str) -> None:
        with self._lock:
            targets = [
                (loop, queue)
                for collections, loop, queue in self._subscribers
                if collection in collections
            ]

        for loop, queue in targets:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, collection)
            except RuntimeError:
                # Loop already closed; the subscriber unregisters on teardown.
                logger.debug("Dropping %s notification for a closed loop", collection)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)


feed = ChangeFeed()
