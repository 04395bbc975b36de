import json
import logging

import pytest
from pydantic import ValidationError

from wordbank.config import Settings
from wordbank.observability import JSONFormatter


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv('STORAGE_BACKEND', raising=False)
    settings = Settings(_env_file=None)
    assert settings.collection_name == 'global-word-dictionary'
    assert settings.storage_backend == 'file'
    assert settings.classifier_enabled is True


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv('STORAGE_BACKEND', 'memory')
    monkeypatch.setenv('CLASSIFIER_ENABLED', 'false')
    monkeypatch.setenv('CLASSIFIER_TIMEOUT_SECONDS', '0.5')
    settings = Settings(_env_file=None)
    assert settings.storage_backend == 'memory'
    assert settings.classifier_enabled is False
    assert settings.classifier_timeout_seconds == 0.5


def test_settings_reject_bad_timeout():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, classifier_timeout_seconds=0)


def test_json_formatter_includes_extras():
    record = logging.LogRecord('wordbank.test', logging.WARNING, __file__, 1, 'classifier down', None, None)
    record.collection = 'global-word-dictionary'
    record.word = 'zebra'
    log = json.loads(JSONFormatter().format(record))
    assert log['level'] == 'WARNING'
    assert log['message'] == 'classifier down'
    assert log['collection'] == 'global-word-dictionary'
    assert log['word'] == 'zebra'
    assert 'exception' not in log
