"""Per-user namespace over a blob store.

A ``UserContext`` is created on login and closed on logout. Components hold
the context they were built with; once it is closed, their late writes are
dropped instead of leaking into another user's namespace.
"""

import json
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from pydantic import TypeAdapter, ValidationError

from fluent_tutor.models.user_profile import UserIdentity
from fluent_tutor.storage.blob_store import BlobStore

logger = structlog.get_logger()

KEY_PREFIX = "fluentai"
CURRENT_USER_KEY = f"{KEY_PREFIX}-current-user"

VOCAB = "vocab"
SESSIONS = "sessions"
PROFILE = "profile"
ACTIVITY = "activity"

T = TypeVar("T")


def storage_key(user_id: str, collection: str) -> str:
    return f"{KEY_PREFIX}-{user_id}-{collection}"


class UserContext:
    """Explicit handle on the active user's namespace.

    Args:
        identity: The logged-in user.
        store: Backing key-value store.
    """

    def __init__(self, identity: UserIdentity, store: BlobStore):
        self.identity = identity
        self.store = store
        self._active = True

    @property
    def user_id(self) -> str:
        return self.identity.user_id

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        self._active = False

    def load(self, collection: str, adapter: TypeAdapter[T], default: Callable[[], T]) -> T:
        """Load a collection, treating missing or malformed blobs as absent."""
        try:
            raw = self.store.get(storage_key(self.user_id, collection))
            if raw is None:
                return default()
            return adapter.validate_json(raw)
        except (ValidationError, UnicodeDecodeError):
            logger.warning(
                "malformed_collection_ignored",
                user_id=self.user_id,
                collection=collection,
            )
            return default()

    def persist(self, collection: str, value: Any) -> None:
        """Write a collection snapshot. No-op once the context is closed."""
        if not self._active:
            logger.info("stale_persist_dropped", user_id=self.user_id, collection=collection)
            return
        data = json.dumps(value, ensure_ascii=False)
        self.store.set(storage_key(self.user_id, collection), data)
