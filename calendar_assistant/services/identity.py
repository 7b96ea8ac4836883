"""Anonymous-by-default user identity.

The first run inserts an anonymous user document and remembers its id in a
small local state file; later runs reuse it, so the same events come back.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..config import CALENDAR_USER_ID, IDENTITY_FILE
from ..errors import PersistenceError
from ..utils.datetime_utils import local_now

logger = logging.getLogger(__name__)


def load_saved_user_id(state_path: Path) -> Optional[str]:
    """Return the user id stored in *state_path*, or ``None``."""
    try:
        data = json.loads(state_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable identity file %s: %s", state_path, exc)
        return None
    user_id = data.get("user_id") if isinstance(data, dict) else None
    return str(user_id) if user_id else None


def save_user_id(state_path: Path, user_id: str) -> None:
    state_path.parent.mkdir(parents=True, exist_ok=True)
    state_path.write_text(json.dumps({"user_id": user_id}), encoding="utf-8")


def sign_in_anonymously(users: Collection) -> str:
    """Provision a new anonymous user document and return its id."""
    try:
        result = users.insert_one({"anonymous": True, "created_at": local_now()})
    except PyMongoError as exc:
        raise PersistenceError(f"Failed to provision anonymous user: {exc}") from exc
    logger.info("Signed in anonymously.")
    return str(result.inserted_id)


def ensure_user_id(
    users: Collection,
    *,
    state_path: Path = IDENTITY_FILE,
    configured_id: Optional[str] = CALENDAR_USER_ID,
) -> str:
    """Return the current user's id, provisioning an anonymous one if needed."""
    if configured_id:
        logger.info("Using configured user ID: %s", configured_id)
        return configured_id

    saved = load_saved_user_id(state_path)
    if saved:
        logger.info("Calendar user ID: %s", saved)
        return saved

    user_id = sign_in_anonymously(users)
    try:
        save_user_id(state_path, user_id)
    except OSError as exc:
        logger.warning("Could not persist identity to %s: %s", state_path, exc)
    return user_id

__all__ = ["ensure_user_id", "load_saved_user_id", "save_user_id", "sign_in_anonymously"]
