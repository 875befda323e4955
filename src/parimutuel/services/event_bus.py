"""
Event Bus Service - Thread-safe ledger event fan-out

Key behaviors:
- Publishing never blocks a ledger operation: events are queued and
  dispatched from a background thread once started
- Weak references for automatic subscriber cleanup
- No locks held during callback execution
- Callback ID tracking for unsubscribe and duplicate prevention
- Graceful shutdown that drains queued events
"""

import logging
import queue
import threading
import weakref
from collections.abc import Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class Events(Enum):
    """Ledger event names"""

    PREDICTION_CREATED = "prediction.created"
    PREDICTION_RESOLVED = "prediction.resolved"
    BET_PLACED = "bet.placed"
    PAYOUT_ISSUED = "payout.issued"
    PAYOUT_FAILED = "payout.failed"
    ADMIN_ADDED = "admin.added"
    ADMIN_REMOVED = "admin.removed"
    OPERATION_FAILED = "operation.failed"


class EventBus:
    """
    Queue-backed event bus

    Events published before `start()` stay queued until the worker runs or
    `drain()` is called.
    """

    def __init__(self, max_queue_size: int = 5000):
        # event -> [(callback_id, weakref or callback)]
        self._subscribers: dict[Events, list[tuple[int, Any]]] = {}
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue_size)
        self._processing = False
        self._thread: threading.Thread | None = None
        self._sub_lock = threading.RLock()

        self._stats = {
            "events_published": 0,
            "events_processed": 0,
            "events_dropped": 0,
            "errors": 0,
        }

        logger.info(f"EventBus initialized with queue size {max_queue_size}")

    # ========== Lifecycle ==========

    def start(self):
        """Start the dispatch thread"""
        if not self._processing:
            self._processing = True
            self._thread = threading.Thread(target=self._process_events, daemon=True)
            self._thread.start()
            logger.info("EventBus started")

    def stop(self, timeout: float = 3.0):
        """Stop the dispatch thread after it has handled everything queued"""
        if not self._processing:
            return

        self._processing = False
        self._queue.put(None)  # Sentinel, queued behind pending events

        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.error("EventBus thread did not stop cleanly within timeout")
            self._thread = None

        logger.info("EventBus stopped")

    @property
    def is_running(self) -> bool:
        return self._processing

    # ========== Subscriptions ==========

    def subscribe(self, event: Events, callback: Callable, weak: bool = True):
        """
        Subscribe to an event

        Args:
            event: Event to subscribe to
            callback: Called with {"name": event value, "data": payload}
            weak: Hold a weak reference so dead subscribers drop out
        """
        with self._sub_lock:
            entries = self._subscribers.setdefault(event, [])
            cb_id = id(callback)

            for existing_id, ref in entries:
                if existing_id == cb_id and self._resolve_callback(ref) is not None:
                    logger.debug(f"Already subscribed to {event.value}, skipping duplicate")
                    return

            entries[:] = [(cid, ref) for cid, ref in entries if cid != cb_id]

            ref: Any = callback
            if weak:
                try:
                    if hasattr(callback, "__self__"):
                        ref = weakref.WeakMethod(callback)
                    else:
                        ref = weakref.ref(callback)
                except TypeError:
                    ref = callback

            entries.append((cb_id, ref))
            logger.debug(f"Subscribed to {event.value}")

    def unsubscribe(self, event: Events, callback: Callable):
        with self._sub_lock:
            entries = self._subscribers.get(event)
            if not entries:
                return
            cb_id = id(callback)
            entries[:] = [(cid, ref) for cid, ref in entries if cid != cb_id]
            if not entries:
                self._subscribers.pop(event, None)
            logger.debug(f"Unsubscribed from {event.value}")

    def has_subscribers(self, event: Events) -> bool:
        with self._sub_lock:
            return bool(self._live_callbacks(event))

    def clear_all(self):
        """Drop every subscriber (tests/cleanup)"""
        with self._sub_lock:
            self._subscribers.clear()
            logger.debug("All subscribers cleared")

    # ========== Publishing ==========

    def publish(self, event: Events, data: Any = None):
        """Queue an event for dispatch; drops (and counts) it when the queue is full"""
        try:
            self._queue.put_nowait((event, data))
            self._stats["events_published"] += 1

            qsize = self._queue.qsize()
            max_size = self._queue.maxsize
            if max_size > 0 and qsize > max_size * 0.8:
                logger.warning(
                    f"EventBus queue at {qsize}/{max_size} ({qsize / max_size * 100:.0f}% capacity)"
                )
        except queue.Full:
            self._stats["events_dropped"] += 1
            logger.warning(f"Event queue full, dropping event: {event.value}")

    def drain(self) -> int:
        """
        Dispatch everything queued on the calling thread

        Only valid while the worker is stopped.

        Returns:
            Number of events dispatched
        """
        if self._processing:
            raise RuntimeError("drain() while the dispatch thread is running")
        count = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return count
            if item is None:
                continue
            self._dispatch(*item)
            count += 1

    def _process_events(self):
        while True:
            item = self._queue.get()
            if item is None:
                break
            try:
                self._dispatch(*item)
            except Exception as e:
                logger.error(f"Error processing event: {e}", exc_info=True)

    def _dispatch(self, event: Events, data: Any):
        """Call subscribers without holding the subscription lock"""
        with self._sub_lock:
            callbacks = self._live_callbacks(event)

        for callback in callbacks:
            try:
                callback({"name": event.value, "data": data})
                self._stats["events_processed"] += 1
            except Exception as e:
                self._stats["errors"] += 1
                logger.error(f"Error in callback for {event.value}: {e}", exc_info=True)

    def _live_callbacks(self, event: Events) -> list[Callable]:
        """Resolve references and prune dead ones (caller holds _sub_lock)"""
        entries = self._subscribers.get(event, [])
        alive, callbacks = [], []
        for cb_id, ref in entries:
            callback = self._resolve_callback(ref)
            if callback is not None:
                alive.append((cb_id, ref))
                callbacks.append(callback)
        if alive:
            self._subscribers[event] = alive
        else:
            self._subscribers.pop(event, None)
        return callbacks

    @staticmethod
    def _resolve_callback(ref):
        if isinstance(ref, weakref.ReferenceType):
            return ref()
        if callable(ref):
            return ref
        return None

    def get_stats(self) -> dict[str, Any]:
        with self._sub_lock:
            stats = {
                "subscriber_count": sum(len(entries) for entries in self._subscribers.values()),
                "event_types": len(self._subscribers),
                "queue_size": self._queue.qsize(),
                "processing": self._processing,
            }
            stats.update(self._stats)
            return stats


# Global instance
event_bus = EventBus()
