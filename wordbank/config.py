from __future__ import annotations
from functools import lru_cache
from typing import List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings, read from the environment or a local .env file."""

    model_config = SettingsConfigDict(env_file='.env', case_sensitive=False)

    # Collection
    collection_name: str = 'global-word-dictionary'

    # Storage
    storage_backend: Literal['file', 'memory'] = 'file'
    storage_path: str = 'data/words.json'

    # Content classifier (PurgoMalum)
    classifier_enabled: bool = True
    classifier_url: str = 'https://www.purgomalum.com/service/containsprofanity'
    classifier_timeout_seconds: float = 5.0

    # API
    cors_origins: List[str] = ['*']

    # Logging
    log_level: str = 'INFO'
    log_format: Literal['json', 'text'] = 'json'

    @field_validator('classifier_timeout_seconds')
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError('classifier_timeout_seconds must be positive')
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
