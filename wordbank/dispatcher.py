from __future__ import annotations
import logging
from typing import Any

from pydantic import ValidationError

from .errors import INTERNAL_ERROR_RESPONSE, BadInputError, StorageError, WordbankError
from .managers.collection import CollectionManager
from .schemas import DispatchResult, WordRequest
from .validation import INVALID_INPUT

logger = logging.getLogger(__name__)

LIST = 'list'
ADD = 'add'
REMOVE = 'remove'
PREFLIGHT = 'preflight'

UNSUPPORTED_ACK = {'status': 'ignored', 'message': 'Method not supported'}


def parse_word(body: bytes) -> Any:
    try:
        return WordRequest.model_validate_json(body or b'').word
    except ValidationError as e:
        if any(err['type'] == 'json_invalid' for err in e.errors()):
            raise BadInputError('Invalid JSON body.') from e
        raise BadInputError(INVALID_INPUT) from e


class Dispatcher:
    """Routes one operation to a collection and shapes the result. Never raises."""

    def __init__(self, collections: CollectionManager, collection_name: str):
        self.collections = collections
        self.collection_name = collection_name

    async def dispatch(self, operation: str, body: bytes = b'') -> DispatchResult:
        if operation == PREFLIGHT:
            return DispatchResult(status_code=204)
        if operation not in (LIST, ADD, REMOVE):
            logger.debug('Ignoring unsupported operation %r', operation)
            return DispatchResult(status_code=200, content=UNSUPPORTED_ACK)
        try:
            return await self._run(operation, body)
        except StorageError as e:
            logger.error('Storage failure during %s: %s', operation, e.detail,
                         extra={'collection': self.collection_name, 'operation': operation, 'error_code': e.code})
            return DispatchResult(status_code=e.http_status, content=e.to_response())
        except WordbankError as e:
            logger.info('%s rejected: %s', operation, e.message,
                        extra={'collection': self.collection_name, 'operation': operation, 'error_code': e.code})
            return DispatchResult(status_code=e.http_status, content=e.to_response())
        except Exception:
            logger.exception('Unexpected error during %s', operation,
                             extra={'collection': self.collection_name, 'operation': operation})
            return DispatchResult(status_code=500, content=INTERNAL_ERROR_RESPONSE)

    async def _run(self, operation: str, body: bytes) -> DispatchResult:
        word = parse_word(body) if operation in (ADD, REMOVE) else None
        collection = await self.collections.open(self.collection_name)
        if operation == LIST:
            words = await collection.list()
        elif operation == ADD:
            words = await collection.add(word)
        else:
            words = await collection.remove(word)
        return DispatchResult(status_code=200, content=words)
