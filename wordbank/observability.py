"""Structured logging for the word dictionary server.

Records carry collection, word, operation and error_code as top-level JSON
fields when a log call passes them in `extra`. Classifier outages are logged
at WARNING with error_code CLASSIFIER_UNAVAILABLE so operators can alert on them.
"""

from __future__ import annotations
import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = ('collection', 'word', 'error_code', 'operation', 'reason')


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = 'INFO', fmt: str = 'json') -> None:
    """Install a single root handler; called once from the app lifespan."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, '_wordbank', False):
            root.removeHandler(existing)
    handler = logging.StreamHandler()
    handler._wordbank = True  # type: ignore[attr-defined]
    if fmt == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s - %(message)s'))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
