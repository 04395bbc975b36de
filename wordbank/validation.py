from __future__ import annotations
import asyncio
import logging
import re
from typing import Any, Callable, List, Optional

import httpx

from .errors import ClassifierUnavailableError
from .schemas import ValidationOutcome

logger = logging.getLogger(__name__)

MAX_WORD_LENGTH = 50

INVALID_INPUT = 'Invalid input'
EMPTY_STRING = 'Empty string not allowed'
TOO_LONG = f'Word exceeds maximum length ({MAX_WORD_LENGTH} characters)'
HAS_SPACES = 'Spaces not allowed (single words only)'
NOT_LETTERS = 'Only letters are allowed'
INAPPROPRIATE = 'Word contains inappropriate content'

# Reasons a caller could fix by sending a different word; anything else is a policy decision.
BAD_INPUT_REASONS = frozenset({INVALID_INPUT, EMPTY_STRING, TOO_LONG, HAS_SPACES, NOT_LETTERS})

_WHITESPACE = re.compile(r'\s')
_NON_LETTER = re.compile(r'[^a-zA-Z]')

Rule = Callable[[Any], Optional[str]]


def check_usable(word: Any) -> Optional[str]:
    if not isinstance(word, str):
        return INVALID_INPUT
    if word.strip() == '':
        return EMPTY_STRING
    return None

def check_length(word: str) -> Optional[str]:
    return TOO_LONG if len(word) > MAX_WORD_LENGTH else None

def check_single_token(word: str) -> Optional[str]:
    return HAS_SPACES if _WHITESPACE.search(word) else None

def check_letters(word: str) -> Optional[str]:
    return NOT_LETTERS if _NON_LETTER.search(word) else None

LOCAL_RULES: List[Rule] = [check_usable, check_length, check_single_token, check_letters]


class ContentClassifier:
    async def contains_profanity(self, word: str) -> bool:
        """Return True when the word is flagged; raise ClassifierUnavailableError when no answer is available."""
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


class PurgoMalumClassifier(ContentClassifier):
    def __init__(self, url: str, timeout: float = 5.0, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._owns_client = client is None

    async def contains_profanity(self, word: str) -> bool:
        try:
            response = await self._client.get(self.url, params={'text': word})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ClassifierUnavailableError(f'{type(e).__name__}: {e}') from e
        if response.status_code != 200:
            raise ClassifierUnavailableError(f'{response.status_code} {response.reason_phrase}')
        answer = response.text.strip()
        if answer not in ('true', 'false'):
            raise ClassifierUnavailableError(f'unexpected response body {answer[:40]!r}')
        return answer == 'true'

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class ValidationPipeline:
    """Local rules in order, then the external classifier; first rejection wins.

    The classifier is best-effort: if it cannot answer within `timeout` seconds,
    or answers with an error, the word is allowed and `unavailable_count` goes up.
    """

    def __init__(self, classifier: Optional[ContentClassifier] = None, timeout: float = 5.0):
        self.classifier = classifier
        self.timeout = timeout
        self.unavailable_count = 0

    @property
    def classifier_enabled(self) -> bool:
        return self.classifier is not None

    def check_local(self, word: Any) -> ValidationOutcome:
        for rule in LOCAL_RULES:
            reason = rule(word)
            if reason:
                return ValidationOutcome.reject(reason)
        return ValidationOutcome.allow()

    async def validate(self, word: Any) -> ValidationOutcome:
        outcome = self.check_local(word)
        if not outcome.allowed or self.classifier is None:
            return outcome
        if await self._flagged(word):
            return ValidationOutcome.reject(INAPPROPRIATE)
        return outcome

    async def _flagged(self, word: str) -> bool:
        try:
            return await asyncio.wait_for(self.classifier.contains_profanity(word), self.timeout)
        except asyncio.TimeoutError:
            detail = f'no answer within {self.timeout}s'
        except ClassifierUnavailableError as e:
            detail = e.detail
        except Exception as e:
            # Any other classifier fault is treated as unavailability, never as a failed add.
            detail = f'{type(e).__name__}: {e}'
        self.unavailable_count += 1
        logger.warning('Content classifier unavailable, allowing word: %s', detail,
                       extra={'word': word, 'error_code': 'CLASSIFIER_UNAVAILABLE'})
        return False
