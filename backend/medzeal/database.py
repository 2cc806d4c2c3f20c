"""
MedZeal Backend: Realtime Database Access
==========================================

What:  Firebase app lifecycle and an async wrapper over firebase_admin.db.
Why:   The Admin SDK is synchronous (blocking HTTP). Route handlers are async,
       so every store call is pushed to a worker thread.
How:   `init_firebase()` at startup, `get_store()` as a FastAPI dependency,
       `dispose_app()` at shutdown.

Store semantics (Firebase Realtime Database):
    - A path reads back as plain JSON (dict / list / scalar) or None if absent.
    - `push` creates a chronologically ordered child key.
    - `update` is a multi-field merge at one path; `set` replaces the node.
    - `listen` opens a server-sent-events stream; the callback runs on the SDK's
      own thread with `put`/`patch` events relative to the listened path.

Nothing here catches errors: services decide whether a failure is a fetch
error (banner) or a write error (alert).
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

import firebase_admin
from firebase_admin import credentials
from firebase_admin import db as firebase_db

from medzeal.config import settings

logger = logging.getLogger(__name__)

APP_NAME = "medzeal"

_app: Optional[firebase_admin.App] = None


def init_firebase() -> firebase_admin.App:
    """
    Initialize (once) the named Firebase app used by this service.

    Credentials: service-account file when FIREBASE_CREDENTIALS_PATH is set,
    otherwise Application Default Credentials.
    """
    global _app
    if _app is not None:
        return _app

    if settings.firebase_credentials_path:
        cred = credentials.Certificate(settings.firebase_credentials_path)
    else:
        cred = credentials.ApplicationDefault()

    _app = firebase_admin.initialize_app(
        cred,
        options={"databaseURL": settings.firebase_database_url},
        name=APP_NAME,
    )
    logger.info("Firebase app initialized for %s", settings.firebase_database_url)
    return _app


def dispose_app() -> None:
    """Delete the Firebase app; open listeners must be closed before this."""
    global _app
    if _app is None:
        return
    firebase_admin.delete_app(_app)
    _app = None
    logger.info("Firebase app disposed")


class RealtimeStore:
    """
    Async facade over `firebase_admin.db.reference(...)`.

    Paths are slash-separated, without a leading slash ("vendors/abc/products").
    Every method resolves the app at call time so the store object can be
    created before `init_firebase()` runs.
    """

    def __init__(self, app: Optional[firebase_admin.App] = None):
        self._app = app

    def _reference(self, path: str) -> firebase_db.Reference:
        app = self._app or _app
        if app is None:
            raise RuntimeError("Firebase app is not initialized")
        return firebase_db.reference(path or "/", app=app)

    async def get(self, path: str, shallow: bool = False) -> Any:
        """Read the node at `path`; None when it does not exist."""
        return await asyncio.to_thread(self._reference(path).get, shallow=shallow)

    async def set(self, path: str, value: Any) -> None:
        await asyncio.to_thread(self._reference(path).set, value)

    async def update(self, path: str, values: Dict[str, Any]) -> None:
        """Merge `values` into the node at `path` (other children untouched)."""
        await asyncio.to_thread(self._reference(path).update, values)

    async def push(self, path: str, value: Any) -> str:
        """Create a new child under `path` and return its generated key."""
        child = await asyncio.to_thread(self._reference(path).push, value)
        return child.key

    async def delete(self, path: str) -> None:
        await asyncio.to_thread(self._reference(path).delete)

    async def listen(self, path: str, callback: Callable[[Any], None]):
        """
        Subscribe to changes under `path`.

        Returns the SDK's ListenerRegistration; call `.close()` to unsubscribe.
        The first event is a `put` at "/" carrying the whole subtree.
        """
        return await asyncio.to_thread(self._reference(path).listen, callback)


store = RealtimeStore()


def get_store() -> RealtimeStore:
    """
    FastAPI dependency returning the shared store.

    Overridden in tests with a mock (app.dependency_overrides[get_store]).
    """
    return store
