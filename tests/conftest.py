"""Shared fixtures: in-memory storage, a scriptable content classifier and an HTTP client."""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from wordbank.config import Settings
from wordbank.errors import ClassifierUnavailableError
from wordbank.main import app, configure
from wordbank.managers.collection import CollectionManager, WordCollection
from wordbank.storage import MemoryStorage
from wordbank.validation import ContentClassifier, ValidationPipeline

COLLECTION = 'global-word-dictionary'


class FakeClassifier(ContentClassifier):
    """Flags words listed in `flagged`; can be told to fail or to stall."""

    def __init__(self, flagged=(), fail=False, delay=0.0):
        self.flagged = {w.lower() for w in flagged}
        self.fail = fail
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def contains_profanity(self, word):
        self.calls.append(word)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise ClassifierUnavailableError('connection refused')
            return word.lower() in self.flagged
        finally:
            self.in_flight -= 1


class FailingStorage(MemoryStorage):
    """MemoryStorage whose writes can be switched to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_writes = False
        self.fail_reads = False

    async def get(self, key):
        if self.fail_reads:
            raise OSError('disk unavailable')
        return await super().get(key)

    async def put(self, key, words):
        if self.fail_writes:
            raise OSError('disk full')
        await super().put(key, words)


@pytest.fixture
def fake_classifier_cls():
    return FakeClassifier


@pytest.fixture
def classifier():
    return FakeClassifier(flagged={'darn'})


@pytest.fixture
def storage():
    return FailingStorage()


@pytest.fixture
def pipeline(classifier):
    return ValidationPipeline(classifier, timeout=1.0)


@pytest.fixture
def collection(storage, pipeline) -> WordCollection:
    return CollectionManager(storage, pipeline).get_or_create(COLLECTION)


@pytest.fixture
def settings():
    return Settings(
        collection_name=COLLECTION,
        storage_backend='memory',
        classifier_enabled=True,
        classifier_timeout_seconds=1.0,
        cors_origins=['*'],
        log_format='text',
    )


@pytest.fixture
async def client(settings, storage, classifier):
    """HTTP client against the FastAPI app wired to in-memory storage and the fake classifier."""
    configure(app, settings, storage=storage, classifier=classifier)
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as c:
        yield c
