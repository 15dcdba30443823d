"""
Token Store - persistent bearer-token storage

LocalStorage is the terminal's stand-in for the browser's localStorage:
a flat map of string keys to string values kept in one JSON file.
The web app kept two keys there:

    token         user session
    adminToken    admin session

TokenStore wraps one key. Reads always go back to the file so a token
written or removed by another process (another "tab") is seen on the
very next request.
"""

import os
import json
import tempfile
from pathlib import Path
from typing import Optional, Dict, List

from market_navigator.logging_config import logger


USER_TOKEN_KEY = "token"
ADMIN_TOKEN_KEY = "adminToken"


class LocalStorage:
    """String key/value store persisted as a JSON file"""

    def __init__(self, path: str):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> Dict[str, str]:
        """Read the whole map; a missing or corrupted file is an empty map"""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, data: Dict[str, str]) -> None:
        """Replace the file atomically"""
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            # Owner-only, like a credentials file (no-op on Windows)
            try:
                os.chmod(tmp_path, 0o600)
            except OSError:
                pass
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = str(value)
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self) -> List[str]:
        return list(self._read().keys())

    def clear(self) -> None:
        """Remove every key"""
        if self.path.exists():
            self.path.unlink()


class TokenStore:
    """One bearer token under one storage key"""

    def __init__(self, storage: LocalStorage, key: str = USER_TOKEN_KEY):
        self.storage = storage
        self.key = key
        self._cached: Optional[str] = storage.get_item(key)

    @property
    def cached(self) -> Optional[str]:
        """In-memory copy; may be stale if another process changed storage"""
        return self._cached

    def get(self) -> Optional[str]:
        """Freshest token: persisted value first, memory never overrides it"""
        token = self.storage.get_item(self.key)
        self._cached = token or None
        return self._cached

    def set(self, token: str) -> None:
        """Persist and cache a token, replacing any previous one"""
        if not token:
            raise ValueError("token must be a non-empty string")
        self.storage.set_item(self.key, token)
        self._cached = token

    def clear(self) -> None:
        """Remove the token from storage and memory (idempotent)"""
        self.storage.remove_item(self.key)
        self._cached = None

    def has_token(self) -> bool:
        return self.get() is not None
