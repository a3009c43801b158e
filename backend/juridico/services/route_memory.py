"""
Last visited route, kept in the user's preferences so a fresh page load can
take them back where they were.
"""
from typing import Optional

from sqlalchemy.orm import Session

from juridico.db.models import User

LAST_PATH_KEY = "last_path"
ENTRY_PATHS = ("/", "/auth")
AUTH_PATH = "/auth"


def resolve_landing_path(saved: Optional[str], current: str) -> str:
    """
    Redirect to ``saved`` only from an entry path, only to somewhere else,
    and never to the sign-in page.
    """
    if not saved:
        return current
    if current in ENTRY_PATHS and saved != current and saved != AUTH_PATH:
        return saved
    return current


def get_last_path(user: User) -> Optional[str]:
    return (user.preferences or {}).get(LAST_PATH_KEY)


def save_last_path(db: Session, user: User, path: str) -> None:
    # reassign so the JSON column is seen as changed
    preferences = dict(user.preferences or {})
    preferences[LAST_PATH_KEY] = path
    user.preferences = preferences
    db.commit()
