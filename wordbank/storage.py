from __future__ import annotations
import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from .errors import StorageError

logger = logging.getLogger(__name__)


class Storage:
    """Key/value persistence: one key per collection, value is the full word list."""

    async def get(self, key: str) -> Optional[List[str]]:
        raise NotImplementedError

    async def put(self, key: str, words: List[str]) -> None:
        raise NotImplementedError


class MemoryStorage(Storage):
    def __init__(self, initial: Optional[Dict[str, List[str]]] = None):
        self._data: Dict[str, List[str]] = {k: list(v) for k, v in (initial or {}).items()}
        self.reads = 0
        self.writes = 0

    async def get(self, key: str) -> Optional[List[str]]:
        self.reads += 1
        words = self._data.get(key)
        return list(words) if words is not None else None

    async def put(self, key: str, words: List[str]) -> None:
        self.writes += 1
        self._data[key] = list(words)


class JsonFileStorage(Storage):
    """All collections in one JSON object on disk, rewritten atomically on every put."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        # Collections share the file, so concurrent puts must not interleave their read-modify-write.
        self._write_lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[List[str]]:
        data = await asyncio.to_thread(self._read)
        words = data.get(key)
        if words is None:
            return None
        if not isinstance(words, list) or not all(isinstance(w, str) for w in words):
            raise StorageError('read', f'{self.path}: value for {key!r} is not a list of strings')
        return words

    async def put(self, key: str, words: List[str]) -> None:
        async with self._write_lock:
            await asyncio.to_thread(self._write_key, key, list(words))

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError('read', f'{self.path}: {e}') from e
        if not isinstance(data, dict):
            raise StorageError('read', f'{self.path}: top-level value is not an object')
        return data

    def _write_key(self, key: str, words: List[str]) -> None:
        data = self._read()
        data[key] = words
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix='.words-', suffix='.json', dir=self.path.parent)
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise StorageError('write', f'{self.path}: {e}') from e
        logger.debug('Persisted %d words', len(words), extra={'collection': key})


def build_storage(backend: str, path: str) -> Storage:
    if backend == 'memory':
        return MemoryStorage()
    if backend == 'file':
        return JsonFileStorage(path)
    raise ValueError(f'Unknown storage backend: {backend}')
