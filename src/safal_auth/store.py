"""
Credential store: session token, display name, user id and the
"remember me" email, kept in a plain key-value store.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Optional, Protocol

from safal_auth.models.user import UserModel

logger = logging.getLogger(__name__)

TOKEN_KEY = "access_token"
DISPLAY_NAME_KEY = "user_name"
USER_ID_KEY = "user_id"
CURRENT_USER_KEY = "current_user"
SAVED_EMAIL_KEY = "saved_email"
REMEMBER_ME_KEY = "remember_me"
PUSH_TOKEN_KEY = "push_token"
THEME_KEYS = ("selected_background_color", "selected_primary_color")


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self.data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """Whole-file JSON store, rewritten on every change."""

    def __init__(self, path: Path):
        self._path = path

    def _load(self) -> dict[str, Any]:
        try:
            return json.loads(self._path.read_text())
        except (FileNotFoundError, json.JSONDecodeError):
            return {}

    def _save(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2))

    def get(self, key: str) -> Any:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class CredentialStore:
    def __init__(self, store: KeyValueStore):
        self._store = store
        self._lock = threading.Lock()

    # -- session token --

    def save(self, token: str) -> None:
        with self._lock:
            self._store.set(TOKEN_KEY, token)

    def get(self) -> Optional[str]:
        return self._store.get(TOKEN_KEY)

    def clear(self) -> None:
        with self._lock:
            self._store.delete(TOKEN_KEY)

    # -- identity --

    def save_display_name(self, name: str) -> None:
        with self._lock:
            self._store.set(DISPLAY_NAME_KEY, name)

    def display_name(self) -> Optional[str]:
        return self._store.get(DISPLAY_NAME_KEY)

    def save_user_id(self, user_id: str) -> None:
        with self._lock:
            self._store.set(USER_ID_KEY, user_id)

    def user_id(self) -> Optional[str]:
        return self._store.get(USER_ID_KEY)

    def current_user(self) -> Optional[UserModel]:
        raw = self._store.get(CURRENT_USER_KEY)
        return UserModel.model_validate(raw) if raw else None

    def save_session(self, token: Optional[str], user: UserModel) -> None:
        """Write token, display name, user id and user record as one unit.

        A missing value erases the stored one so nothing from an earlier
        account survives under the new identity.
        """
        with self._lock:
            for key, value in ((TOKEN_KEY, token), (DISPLAY_NAME_KEY, user.display_name), (USER_ID_KEY, user.id)):
                if value:
                    self._store.set(key, value)
                else:
                    self._store.delete(key)
            self._store.set(CURRENT_USER_KEY, user.model_dump(by_alias=True, exclude_none=True, mode="json"))
        logger.debug("Session stored for user %s", user.id)

    def clear_all(self) -> None:
        """Erase the session, identity and cached personalization."""
        with self._lock:
            for key in (TOKEN_KEY, DISPLAY_NAME_KEY, USER_ID_KEY, CURRENT_USER_KEY, *THEME_KEYS):
                self._store.delete(key)

    # -- remember me --

    def remember_email(self, email: str) -> None:
        with self._lock:
            self._store.set(SAVED_EMAIL_KEY, email)
            self._store.set(REMEMBER_ME_KEY, True)

    def forget_email(self) -> None:
        with self._lock:
            self._store.delete(SAVED_EMAIL_KEY)
            self._store.set(REMEMBER_ME_KEY, False)

    def remembered_email(self) -> Optional[str]:
        if not self._store.get(REMEMBER_ME_KEY):
            return None
        return self._store.get(SAVED_EMAIL_KEY)

    # -- push notifications --

    def save_push_token(self, token: str) -> None:
        with self._lock:
            self._store.set(PUSH_TOKEN_KEY, token)

    def push_token(self) -> Optional[str]:
        return self._store.get(PUSH_TOKEN_KEY)

    def forget_push_token(self) -> None:
        with self._lock:
            self._store.delete(PUSH_TOKEN_KEY)
