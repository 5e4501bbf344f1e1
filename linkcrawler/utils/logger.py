"""
Logging utilities for the link crawler.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # Context added by CrawlerLogAdapter
        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry, ensure_ascii=False)


class CrawlerLogAdapter(logging.LoggerAdapter):
    """Logger adapter that adds crawler-specific context to every record."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Attach the adapter context as `extra_fields` on the record."""
        extra = kwargs.setdefault('extra', {})
        fields = dict(self.extra)
        fields.update(extra.pop('extra_fields', {}))
        extra['extra_fields'] = fields
        return msg, kwargs

    def log_url_event(self, level: int, url: str, message: str, **kwargs):
        """Log URL-specific events."""
        extra = kwargs.setdefault('extra', {})
        extra['extra_fields'] = {'url': url, 'event_type': 'url_event'}
        self.log(level, message, **kwargs)


class PerformanceFilter(logging.Filter):
    """Filter to suppress noisy third-party logs."""

    def __init__(self, suppress_modules: Optional[list] = None):
        super().__init__()
        self.suppress_modules = suppress_modules or [
            'aiohttp.access',
            'aiohttp.client',
            'asyncio',
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out noisy log records."""
        if any(record.name.startswith(module) for module in self.suppress_modules):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(config: Dict[str, Any],
                  enable_json: bool = False,
                  enable_performance_filtering: bool = True) -> logging.Logger:
    """
    Setup logging for the crawler.

    Args:
        config: Logging configuration dictionary (level, file, format)
        enable_json: Enable JSON formatted logging
        enable_performance_filtering: Enable filtering of noisy logs

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.get('level', 'INFO').upper()))
    root_logger.handlers.clear()

    if enable_json:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )

    # Console output is shared with link listings, so keep it on stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, config.get('console_level', 'WARNING').upper()))
    console_handler.setFormatter(formatter)
    if enable_performance_filtering:
        console_handler.addFilter(PerformanceFilter())
    root_logger.addHandler(console_handler)

    log_file_name = config.get('file')
    if log_file_name:
        log_file = Path(log_file_name)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=50 * 1024 * 1024,  # 50MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        if enable_performance_filtering:
            file_handler.addFilter(PerformanceFilter())
        root_logger.addHandler(file_handler)

        error_log_file = log_file.parent / 'errors.log'
        error_handler = logging.handlers.RotatingFileHandler(
            error_log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root_logger.addHandler(error_handler)

        root_logger.info(f"Log file: {log_file}")
        root_logger.info(f"Error log file: {error_log_file}")

    for logger_name in ('aiohttp', 'asyncio', 'urllib3'):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info("Logging system initialized")
    root_logger.info(f"Log level: {config.get('level', 'INFO')}")
    root_logger.info(f"JSON formatting: {enable_json}")

    return root_logger


def get_crawler_logger(name: str, **extra_context) -> CrawlerLogAdapter:
    """
    Get a crawler-specific logger with additional context.

    Args:
        name: Logger name
        **extra_context: Context fields included in all log messages

    Returns:
        CrawlerLogAdapter instance
    """
    return CrawlerLogAdapter(logging.getLogger(name), extra_context)
