from __future__ import annotations
from enum import Enum


class ErrorCategory(str, Enum):
    VALIDATION = 'validation'
    BUSINESS_RULE = 'business_rule'
    RESOURCE_NOT_FOUND = 'resource_not_found'
    STORAGE = 'storage'
    EXTERNAL_API = 'external_api'
    INTERNAL = 'internal'


class WordbankError(Exception):
    """Base for every error the dispatcher knows how to shape into a response."""

    def __init__(self, message: str, code: str, category: ErrorCategory, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status

    def to_response(self) -> dict:
        return {
            'error': {
                'code': self.code,
                'message': self.message,
                'category': self.category.value,
            }
        }


class BadInputError(WordbankError):
    def __init__(self, message: str):
        super().__init__(message, 'BAD_INPUT', ErrorCategory.VALIDATION, 400)


class PolicyRejectedError(WordbankError):
    def __init__(self, message: str):
        super().__init__(message, 'POLICY_REJECTED', ErrorCategory.BUSINESS_RULE, 400)


class WordNotFoundError(WordbankError):
    def __init__(self, word: str):
        super().__init__(f"Word '{word}' not found", 'NOT_FOUND', ErrorCategory.RESOURCE_NOT_FOUND, 404)
        self.word = word


class StorageError(WordbankError):
    # The caller only ever sees the generic message; `detail` is for the logs.
    def __init__(self, operation: str, detail: str = ''):
        super().__init__('Internal Server Error', 'INTERNAL_ERROR', ErrorCategory.STORAGE, 500)
        self.operation = operation
        self.detail = detail


class ClassifierUnavailableError(WordbankError):
    """Raised by content classifiers; the validation pipeline always recovers from it."""

    def __init__(self, detail: str):
        super().__init__(f'Content classifier unavailable: {detail}', 'CLASSIFIER_UNAVAILABLE',
                         ErrorCategory.EXTERNAL_API, 503)
        self.detail = detail


INTERNAL_ERROR_RESPONSE = {
    'error': {
        'code': 'INTERNAL_ERROR',
        'message': 'Internal Server Error',
        'category': ErrorCategory.INTERNAL.value,
    }
}
