import os
import json
import time
import logging
from abc import ABC, abstractmethod
from threading import Lock
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CacheUnavailableError(RuntimeError):
    """The backing key-value store cannot be read or written."""


class KeyValueStore(ABC):
    """String key -> string value with a per-entry expiry. Expired entries read as absent."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        pass


class MemoryStore(KeyValueStore):
    def __init__(self, clock: Clock = time.time):
        self._clock = clock
        self._data: Dict[str, Tuple[float, str]] = {}  # key -> (expires, value)
        self._lock = Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            expires, value = entry
            if expires <= self._clock():
                del self._data[key]
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._data[key] = (self._clock() + ttl_seconds, value)


class JsonFileStore(KeyValueStore):
    """
    Keeps every entry in a single JSON document on disk:
    ``{key: {"expires": <epoch seconds>, "value": <str>}}``.

    A corrupted or empty file reads as an empty store; an unreadable or
    unwritable file raises CacheUnavailableError.
    """

    def __init__(self, path: str, clock: Clock = time.time):
        self.path = path
        self._clock = clock
        self._lock = Lock()

    def _load(self) -> Dict[str, Dict]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, ValueError):
            logger.warning("%s is empty or corrupted, starting from scratch", self.path)
            return {}
        except OSError as e:
            raise CacheUnavailableError(f"cannot read {self.path}: {e}") from e
        return raw if isinstance(raw, dict) else {}

    def _save(self, data: Dict[str, Dict]) -> None:
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
        except OSError as e:
            raise CacheUnavailableError(f"cannot write {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            data = self._load()
            entry = data.get(key)
            if not isinstance(entry, dict):
                return None
            if entry.get("expires", 0) <= self._clock():
                del data[key]
                self._save(data)
                return None
            return entry.get("value")

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            now = self._clock()
            # drop expired entries so the document only holds live keys
            data = {
                k: entry for k, entry in self._load().items()
                if isinstance(entry, dict) and entry.get("expires", 0) > now
            }
            data[key] = {"expires": now + ttl_seconds, "value": value}
            self._save(data)


def build_store(backend: str, path: Optional[str] = None) -> KeyValueStore:
    backend = (backend or "memory").lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "json":
        if not path:
            raise ValueError("json cache backend requires a path")
        return JsonFileStore(path)
    raise ValueError(f"unknown cache backend: {backend!r}")
