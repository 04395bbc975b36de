from __future__ import annotations
import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..errors import BadInputError, PolicyRejectedError, StorageError, WordNotFoundError
from ..schemas import ValidationOutcome
from ..storage import Storage
from ..validation import BAD_INPUT_REASONS, INVALID_INPUT, ValidationPipeline, check_usable

logger = logging.getLogger(__name__)


def _trim(candidate: Any) -> Any:
    return candidate.strip() if isinstance(candidate, str) else candidate


class WordCollection:
    """One named, persisted, deduplicated word list.

    Every operation, including the one-time load and any classifier call made
    while validating an add, runs under `_gate`. asyncio.Lock wakes waiters in
    FIFO order, so operations apply one at a time in arrival order.
    """

    def __init__(self, name: str, storage: Storage, pipeline: Optional[ValidationPipeline] = None, sio=None):
        self.name = name
        self.storage = storage
        self.pipeline = pipeline
        self.sio = sio
        self.words: List[str] = []
        self.initialized = False
        self._gate = asyncio.Lock()

    async def initialize(self) -> None:
        async with self._gate:
            await self._load()

    async def list(self) -> List[str]:
        async with self._gate:
            await self._load()
            return list(self.words)

    async def add(self, candidate: Any) -> List[str]:
        async with self._gate:
            await self._load()
            word = _trim(candidate)
            outcome = await self._validate(word)
            if not outcome.allowed:
                if outcome.reason in BAD_INPUT_REASONS:
                    raise BadInputError(outcome.reason)
                raise PolicyRejectedError(outcome.reason or 'Rejected')
            if word in self.words:
                return list(self.words)
            await self._commit(self.words + [word], 'add', word)
            return list(self.words)

    async def remove(self, candidate: Any) -> List[str]:
        async with self._gate:
            await self._load()
            word = _trim(candidate)
            if check_usable(word):
                raise BadInputError(INVALID_INPUT)
            if word not in self.words:
                raise WordNotFoundError(word)
            await self._commit([w for w in self.words if w != word], 'remove', word)
            return list(self.words)

    async def _validate(self, word: Any) -> ValidationOutcome:
        if self.pipeline is not None:
            return await self.pipeline.validate(word)
        reason = check_usable(word)
        return ValidationOutcome.reject(reason) if reason else ValidationOutcome.allow()

    async def _load(self):
        if self.initialized:
            return
        try:
            stored = await self.storage.get(self.name)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError('read', f'{type(e).__name__}: {e}') from e
        self.words = list(stored or [])
        self.initialized = True
        logger.info('Loaded %d words', len(self.words), extra={'collection': self.name})

    async def _commit(self, words: List[str], operation: str, word: str):
        # Persist first: if the write fails, memory still matches what is on disk.
        try:
            await self.storage.put(self.name, words)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(operation, f'{type(e).__name__}: {e}') from e
        self.words = words
        logger.info('%s %r', operation, word, extra={'collection': self.name, 'operation': operation, 'word': word})
        await self._notify()

    async def _notify(self):
        if self.sio is None:
            return
        try:
            await self.sio.emit('words:update', {'collection': self.name, 'words': list(self.words)})
        except Exception:
            # The mutation is already durable; a failed broadcast must not turn it into an error.
            logger.exception('Failed to broadcast update', extra={'collection': self.name})


class CollectionManager:
    def __init__(self, storage: Storage, pipeline: Optional[ValidationPipeline] = None, sio=None):
        self.storage = storage
        self.pipeline = pipeline
        self.sio = sio
        self.collections: Dict[str, WordCollection] = {}

    def get_or_create(self, name: str) -> WordCollection:
        if name not in self.collections:
            self.collections[name] = WordCollection(name, self.storage, self.pipeline, self.sio)
        return self.collections[name]

    async def open(self, name: str) -> WordCollection:
        collection = self.get_or_create(name)
        await collection.initialize()
        return collection
