"""Login, logout and reset of the per-user working set."""

import structlog

from fluent_tutor.models.user_profile import UserIdentity, user_id_from_name
from fluent_tutor.storage.blob_store import BlobStore
from fluent_tutor.storage.context import CURRENT_USER_KEY, UserContext
from fluent_tutor.tutor.client import TutorService
from fluent_tutor.workspace import Workspace

logger = structlog.get_logger()


class UserContextStore:
    """Resolves identities and swaps the active workspace.

    Logging out is non-destructive: per-user blobs stay in the store, so
    logging in again with the same name rehydrates everything.

    Args:
        store: Backing key-value store.
        tutor: Tutor collaborator handed to each workspace.
        history_window: Prior messages sent with each tutor turn.
    """

    def __init__(self, store: BlobStore, tutor: TutorService, history_window: int = 6):
        self.store = store
        self.tutor = tutor
        self.history_window = history_window
        self._workspace: Workspace | None = None

    @property
    def current(self) -> Workspace | None:
        return self._workspace

    def resolve_or_create(self, display_name: str) -> UserIdentity:
        return UserIdentity(
            user_id=user_id_from_name(display_name),
            display_name=display_name.strip(),
        )

    def activate(self, identity: UserIdentity) -> Workspace:
        if self._workspace is not None:
            self.deactivate()
        workspace = Workspace(
            UserContext(identity, self.store), self.tutor, self.history_window
        )
        self._workspace = workspace
        self.store.set(CURRENT_USER_KEY, identity.user_id)
        logger.info("user_activated", user_id=identity.user_id)
        return workspace

    def login(self, display_name: str) -> Workspace:
        return self.activate(self.resolve_or_create(display_name))

    def deactivate(self) -> None:
        self.store.remove(CURRENT_USER_KEY)
        if self._workspace is None:
            return
        user_id = self._workspace.user_id
        self._workspace.close()
        self._workspace = None
        logger.info("user_deactivated", user_id=user_id)

    def purge(self, identity: UserIdentity) -> None:
        """Reset the active user's progress without logging out."""
        workspace = self._workspace
        if workspace is None or workspace.user_id != identity.user_id:
            raise ValueError(f"{identity.user_id} is not the active user")
        workspace.reset()
        logger.info("user_progress_reset", user_id=identity.user_id)

    def restore(self) -> Workspace | None:
        """Re-activate the user named by the current-user pointer, if any."""
        user_id = self.store.get(CURRENT_USER_KEY)
        if not user_id:
            return None
        # Only the id is stored; a saved profile keeps its own name.
        workspace = self.activate(UserIdentity(user_id=user_id, display_name=user_id))
        logger.info("user_restored", user_id=user_id)
        return workspace
