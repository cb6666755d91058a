"""User identity and profile models."""

import re

from pydantic import BaseModel

DEFAULT_LEVEL = "Intermediate"
DEFAULT_AVATAR = "😎"

_WHITESPACE = re.compile(r"\s+")


def user_id_from_name(display_name: str) -> str:
    """Derive the namespace key for a display name.

    Trimmed, lowercased, whitespace runs collapsed to one hyphen.
    """
    name = display_name.strip()
    if not name:
        raise ValueError("display name must not be blank")
    return _WHITESPACE.sub("-", name.lower())


class UserIdentity(BaseModel):
    user_id: str
    display_name: str


class UserProfile(BaseModel):
    name: str = ""
    level: str = DEFAULT_LEVEL
    avatar: str = DEFAULT_AVATAR
