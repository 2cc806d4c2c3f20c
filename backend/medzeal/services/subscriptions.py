"""
MedZeal Backend: Live Snapshots (push subscriptions)
=====================================================

What:  Keeps an in-memory copy of a store subtree current via the realtime
       database's push stream.
Why:   The admin pages were built around live subscriptions ("onValue"): the
       vendor, appointment and blog views always reflect the latest tree
       without polling.
How:   `LiveSnapshot.start()` opens a listener. The first event is a `put` at
       "/" with the whole subtree; later events are `put` (replace node) or
       `patch` (merge children) deltas at a relative path. `apply_event` folds
       each delta into a new tree (copy-on-write along the changed path), so a
       reader holding the previous tree is never affected.

States:
    idle     never started (subscriptions disabled): every read is a one-shot GET
    loading  listener opened, first event not yet received: reads use a one-shot GET
    ready    tree is current: reads are served from memory
    error    subscribe failed or an event could not be applied: reads raise FetchError
    closed   unsubscribed at shutdown

    There is no automatic resubscribe from `error`; /health reports it.

Threading:
    Listener callbacks run on the Admin SDK's thread; route handlers read on the
    event loop. The tree reference is swapped under a lock.
"""

import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional

from medzeal.exceptions import FetchError
from medzeal.models import paths
from medzeal.services.tree import as_dict

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
READY = "ready"
ERROR = "error"
CLOSED = "closed"


def _split(path: str) -> List[str]:
    return [segment for segment in (path or "").split("/") if segment]


def _set_at(tree: Any, segments: List[str], value: Any) -> Any:
    if not segments:
        return value
    node = as_dict(tree)
    head, rest = segments[0], segments[1:]
    child = _set_at(node.get(head), rest, value)
    # Null and empty objects do not exist in the realtime database
    if child is None or child == {}:
        node.pop(head, None)
    else:
        node[head] = child
    return node or None


async def fetch(store, path: str) -> Any:
    """
    One-shot read of `path`.

    Raises:
        FetchError: the store could not be read
    """
    try:
        return await store.get(path)
    except Exception as e:
        logger.error("Fetching '%s' failed: %s", path, e)
        raise FetchError(context={"path": path, "error": type(e).__name__})


def apply_event(tree: Any, event_type: str, path: str, data: Any) -> Any:
    """
    Return the tree after applying one server event.

    put   at `path`: replace that node with `data` (None deletes it)
    patch at `path`: for each key in `data`, replace `path/key`
    """
    segments = _split(path)
    if event_type == "put":
        return _set_at(tree, segments, data)
    if event_type == "patch":
        for key, value in (data or {}).items():
            tree = _set_at(tree, segments + _split(key), value)
        return tree
    logger.debug("Ignoring %s event at %s", event_type, path)
    return tree


class LiveSnapshot:
    """Cached tree for one store path, fed by a push listener."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._tree: Any = None
        self._status = IDLE
        self._error: Optional[str] = None
        self._registration = None
        self._version = 0

    @property
    def status(self) -> str:
        return self._status

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def version(self) -> int:
        """Incremented on every applied change (remote or local)."""
        return self._version

    async def start(self, store) -> None:
        """Open the listener. A failure leaves the snapshot in `error`."""
        self._status = LOADING
        try:
            self._registration = await store.listen(self.path, self._on_event)
            logger.info("Subscribed to '%s'", self.path)
        except Exception as e:
            self._fail(e)

    async def close(self) -> None:
        registration, self._registration = self._registration, None
        if registration is not None:
            await asyncio.to_thread(registration.close)
            logger.info("Unsubscribed from '%s'", self.path)
        self._status = CLOSED

    def _on_event(self, event) -> None:
        try:
            with self._lock:
                self._tree = apply_event(self._tree, event.event_type, event.path, event.data)
                self._status = READY
                self._error = None
                self._version += 1
        except Exception as e:
            self._fail(e)

    def _fail(self, exc: Exception) -> None:
        logger.error("Live snapshot '%s' failed: %s", self.path, exc, exc_info=True)
        with self._lock:
            self._status = ERROR
            self._error = type(exc).__name__

    def apply_local(self, relative_path: str, values: Dict[str, Any]) -> None:
        """
        Optimistically merge a write we just made into the cached tree.

        Only meaningful while `ready`; the listener will deliver the same change.
        """
        with self._lock:
            if self._status != READY:
                return
            self._tree = apply_event(self._tree, "patch", relative_path, values)
            self._version += 1

    async def current(self, store) -> Any:
        """
        Latest tree for this path.

        Raises:
            FetchError: the subscription failed, or the one-shot GET failed.
        """
        if self._status == READY:
            return self._tree
        if self._status == ERROR:
            raise FetchError(context={"path": self.path, "error": self._error})
        return await fetch(store, self.path)


class SubscriptionRegistry:
    """
    The live snapshots the admin pages depend on.

    Started in the application lifespan (when enabled) and closed on shutdown.
    """

    def __init__(self):
        self.vendors = LiveSnapshot(paths.VENDORS)
        self.appointments = LiveSnapshot(paths.APPOINTMENTS)
        self.blogs = LiveSnapshot(paths.BLOGS)

    def all(self) -> List[LiveSnapshot]:
        return [self.vendors, self.appointments, self.blogs]

    async def start_all(self, store) -> None:
        # Independent subscriptions: one failing does not stop the others
        for snapshot in self.all():
            await snapshot.start(store)

    async def close_all(self) -> None:
        for snapshot in self.all():
            await snapshot.close()

    def statuses(self) -> Dict[str, str]:
        return {snapshot.path: snapshot.status for snapshot in self.all()}


live_snapshots = SubscriptionRegistry()
