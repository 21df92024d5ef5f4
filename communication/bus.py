"""In-process pub/sub that fans world snapshots and engine events out to consumers."""

import asyncio
import time
from core.errors import BusError
from internal.logging import get_logger


class Subscriber:
    """One consumer with a bounded queue. Slow consumers lose the newest items."""

    __slots__ = ("name", "queue", "topics", "created_at", "received", "dropped")

    def __init__(self, name, queue, topics=None):
        self.name = name
        self.queue = queue
        self.topics = topics or set()
        self.created_at = time.time()
        self.received = 0
        self.dropped = 0

    def wants(self, topic):
        return not self.topics or topic in self.topics

    def offer(self, item):
        """Enqueue without waiting. Returns False when the queue is full."""
        try:
            self.queue.put_nowait(item)
        except asyncio.QueueFull:
            self.dropped += 1
            return False
        self.received += 1
        return True

    def info(self):
        return {"name": self.name, "topics": sorted(self.topics), "queued": self.queue.qsize(),
                "received": self.received, "dropped": self.dropped}


class EventBus:
    """Copy-on-write subscriber list: publish reads a snapshot and never takes the lock."""

    def __init__(self, queue_size=50):
        self._lock = asyncio.Lock()
        self._subscribers = {}
        self._readers = ()
        self._queue_size = queue_size
        self._log = get_logger(component="bus")
        self.total_published = 0
        self.total_delivered = 0
        self.total_dropped = 0

    async def subscribe(self, name, max_queue_size=None, topics=None):
        if not name:
            raise BusError("subscriber name must not be empty", subscriber_name=name)
        async with self._lock:
            existing = self._subscribers.get(name)
            if existing is not None:
                return existing
            queue = asyncio.Queue(maxsize=max_queue_size or self._queue_size)
            subscriber = Subscriber(name, queue, set(topics or ()))
            self._subscribers[name] = subscriber
            self._readers = tuple(self._subscribers.values())
        self._log.info("subscribed", subscriber=name, queue_size=queue.maxsize)
        return subscriber

    async def unsubscribe(self, name):
        async with self._lock:
            if self._subscribers.pop(name, None) is None:
                return False
            self._readers = tuple(self._subscribers.values())
        self._log.info("unsubscribed", subscriber=name)
        return True

    async def publish(self, item, topic=""):
        """Offer item to every interested subscriber; returns how many accepted it."""
        targets = [subscriber for subscriber in self._readers if subscriber.wants(topic)]
        delivered = sum(1 for subscriber in targets if subscriber.offer(item))
        self.total_published += 1
        self.total_delivered += delivered
        self.total_dropped += len(targets) - delivered
        return delivered

    def get_stats(self):
        return {
            "subscriber_count": len(self._readers),
            "total_published": self.total_published,
            "total_delivered": self.total_delivered,
            "total_dropped": self.total_dropped,
        }

    async def get_subscriber_info(self):
        return [subscriber.info() for subscriber in self._readers]
