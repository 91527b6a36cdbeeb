"""Bearer token state and its optional persistence."""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = Path.home() / ".openapi2sdk" / "storage.json"


class KeyValueStore(Protocol):
    """String key/value storage used to persist tokens between runs."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Dict-backed store; useful for tests and short-lived processes."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class FileStore:
    """Store backed by a single JSON file of ``key -> string``."""

    def __init__(self, path: Union[Path, str] = DEFAULT_STORAGE_PATH):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}

        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class TokenStore:
    """The current bearer token of one client.

    With a ``storage_key`` every change is mirrored to ``store`` as
    ``{"token": ...}``, and a token found there at construction time
    takes precedence over the ``token`` argument.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        storage_key: Optional[str] = None,
        store: Optional[KeyValueStore] = None,
    ):
        self.storage_key = storage_key
        self.store = store
        if storage_key and store is None:
            self.store = FileStore()

        self._token = token

        stored = self._load()
        if stored is not None:
            self._token = stored

    def _load(self) -> Optional[str]:
        """Read the persisted token; unreadable data counts as no token."""
        if not self.storage_key or self.store is None:
            return None

        raw = self.store.get(self.storage_key)
        if not raw:
            return None

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Unable to parse stored token under %r: %s", self.storage_key, e)
            return None

        if not isinstance(parsed, dict):
            logger.warning("Unable to parse stored token under %r: not an object", self.storage_key)
            return None

        return parsed.get("token")

    def _persist(self) -> None:
        if not self.storage_key or self.store is None:
            return
        self.store.set(self.storage_key, json.dumps({"token": self._token}))

    def get(self) -> Optional[str]:
        """Return the current token, or None."""
        return self._token

    def set(self, value: Optional[str]) -> None:
        """Replace the token (None clears it) and persist the change."""
        self._token = value
        self._persist()

    def authorization_header(self) -> Dict[str, str]:
        """``Authorization`` header for the current token, if any."""
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}
