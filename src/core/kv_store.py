#!/usr/bin/env python3
"""
Durable key-value slots.

The run store and the workflow order each own one string slot. Backends:
JSON files on disk for interactive use, a dict for tests and headless
ingestion, and a null store for contexts without durable storage.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from core.exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String slots addressed by key."""

    available = True

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the slot value or None when the slot is empty."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the slot value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the slot; missing slots are ignored."""
        pass


class JsonFileKeyValueStore(KeyValueStore):
    """One ``<key>.json`` file per slot inside ``directory``."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding='utf-8')

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.directory), prefix=f".{key}.", suffix='.tmp')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError as e:
            raise StorageError('write', key, e) from e
        logger.debug(f"Wrote {len(value)} bytes to {path}")

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
            logger.debug(f"Deleted {path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError('delete', key, e) from e


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed slots, lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._slots: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        self._slots[key] = value
        self.writes += 1

    def delete(self, key: str) -> None:
        self._slots.pop(key, None)
        self.writes += 1


class NullKeyValueStore(KeyValueStore):
    """No durable storage: reads are empty and writes are dropped."""

    available = False

    def get(self, key: str) -> Optional[str]:
        return None

    def set(self, key: str, value: str) -> None:
        logger.debug(f"Storage unavailable, dropping write to {key}")

    def delete(self, key: str) -> None:
        logger.debug(f"Storage unavailable, ignoring delete of {key}")


def create_kv_store(backend: str, directory: Optional[Union[str, Path]] = None) -> KeyValueStore:
    """
    Build a key-value store for the configured backend.

    Args:
        backend: 'file', 'memory' or 'none'
        directory: Data directory for the file backend

    Returns:
        KeyValueStore instance
    """
    if backend == 'file':
        if directory is None:
            raise ValueError("File storage backend requires a data directory")
        return JsonFileKeyValueStore(directory)
    if backend == 'memory':
        return InMemoryKeyValueStore()
    if backend == 'none':
        return NullKeyValueStore()
    raise ValueError(f"Unknown storage backend '{backend}'. Use 'file', 'memory' or 'none'")
