"""User profile persistence within the active user's namespace."""

from pydantic import TypeAdapter

from ..models.user_profile import UserProfile
from .context import PROFILE, UserContext

_ADAPTER = TypeAdapter(UserProfile)


class ProfileStore:
    """Display name, self-reported level and avatar of the active user."""

    def __init__(self, context: UserContext):
        self._context = context
        self.profile = context.load(PROFILE, _ADAPTER, self._default)
        self._save()

    def _default(self) -> UserProfile:
        return UserProfile(name=self._context.identity.display_name)

    def _save(self) -> None:
        self._context.persist(PROFILE, self.profile.model_dump(mode="json"))

    def update(
        self,
        name: str | None = None,
        level: str | None = None,
        avatar: str | None = None,
    ) -> UserProfile:
        if name is not None and not name.strip():
            raise ValueError("profile name must not be blank")
        changes = {
            key: value
            for key, value in {"name": name, "level": level, "avatar": avatar}.items()
            if value is not None
        }
        self.profile = self.profile.model_copy(update=changes)
        self._save()
        return self.profile

    def reset(self) -> None:
        """Restore defaults, keeping the current display name."""
        self.profile = UserProfile(name=self.profile.name)
        self._save()
