from __future__ import annotations
from pydantic import BaseModel, StrictStr
from typing import Any, List, Optional

WordList = List[str]

class WordRequest(BaseModel):
    word: Optional[StrictStr] = None

class ValidationOutcome(BaseModel):
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> 'ValidationOutcome':
        return cls(allowed=True)

    @classmethod
    def reject(cls, reason: str) -> 'ValidationOutcome':
        return cls(allowed=False, reason=reason)

class DispatchResult(BaseModel):
    status_code: int = 200
    content: Any = None

class ClassifierHealth(BaseModel):
    enabled: bool
    unavailable_count: int = 0

class HealthStatus(BaseModel):
    status: str = 'healthy'
    service: str
    version: str
    classifier: ClassifierHealth
