"""
Logging utilities for the Payout Elasticity Simulator.

The engine itself only emits records through module loggers; callers
decide where they go with ``setup_logging``.
"""

import os
import json
import uuid
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

# Record attributes copied into JSON output when a run has set them
RUN_CONTEXT_FIELDS = ("correlation_id", "structure", "profile")


def setup_logging(log_level: str = 'INFO', log_file: Optional[str] = None,
                  json_format: bool = False):
    """
    Setup application logging with the specified configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, logs to console only.
        json_format: Emit one JSON object per record instead of plain text
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handler = logging.FileHandler(log_file, mode='a')
    else:
        handler = logging.StreamHandler()

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))

    logger = logging.getLogger('payout_simulator')
    logger.setLevel(numeric_level)
    logger.addHandler(handler)

    return logger


class CorrelationFilter(logging.Filter):
    """
    Stamp every record passing through with the id of one simulation run
    """
    def __init__(self, correlation_id: Optional[str] = None):
        super().__init__()
        self.correlation_id = correlation_id or uuid.uuid4().hex

    def filter(self, record):
        record.correlation_id = self.correlation_id
        return True


@contextmanager
def correlation_scope(logger: logging.Logger,
                      correlation_id: Optional[str] = None) -> Iterator[str]:
    """Attach a CorrelationFilter to ``logger`` for the duration of a run; yields the id."""
    correlation = CorrelationFilter(correlation_id)
    logger.addFilter(correlation)
    try:
        yield correlation.correlation_id
    finally:
        logger.removeFilter(correlation)


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record, including any run context the record carries
    """
    def format(self, record):
        payload = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for field in RUN_CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        return json.dumps(payload)


class LoggerAdapter(logging.LoggerAdapter):
    """
    Tag records with scenario context (structure, profile): appended to the
    message text and set as record attributes for JsonFormatter
    """
    def __init__(self, logger, extra=None):
        super().__init__(logger, extra or {})

    def process(self, msg, kwargs):
        if not self.extra:
            return msg, kwargs
        kwargs['extra'] = {**self.extra, **kwargs.get('extra', {})}
        context_str = ' '.join(f'{k}={v}' for k, v in self.extra.items())
        return f"{msg} [{context_str}]", kwargs
