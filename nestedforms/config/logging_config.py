"""
Logging configuration for projects using nestedforms, built on structlog.

nestedforms modules log through ``structlog.get_logger(__name__)``. This
module configures structlog's stdlib integration and produces a Django
``LOGGING`` dict with:
- Pretty console output (human-readable, colored)
- JSON file output (machine-readable, structured) with daily rotation (UTC)
- A ``nestedforms`` logger, so form routing and validation can be turned up
  independently of the rest of the project
"""

import structlog
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler
from typing import Optional, Union


class SuffixTimedRotatingFileHandler(TimedRotatingFileHandler):
    """
    TimedRotatingFileHandler that accepts suffix in constructor.

    This allows Django's LOGGING configuration to set the suffix directly.
    """
    def __init__(self, filename, when='h', interval=1, backupCount=0, encoding=None,
                 delay=False, utc=False, atTime=None, suffix=None):
        super().__init__(filename, when, interval, backupCount, encoding, delay, utc, atTime)
        if suffix is not None:
            self.suffix = suffix


def shared_processors():
    """Processors shared by structlog itself and the stdlib formatters."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO
            ]
        ),
    ]


def setup_logging() -> None:
    """
    Configure structlog to route through stdlib logging.

    Idempotent: does nothing when structlog is already configured.
    Call once at startup (settings.py, wsgi.py); handlers come from the
    LOGGING dict returned by ``build_logging_dict``.
    """
    if structlog.is_configured():
        return
    structlog.configure(
        processors=shared_processors() + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def build_logging_dict(base_dir: Optional[Union[str, Path]] = None, level: str = "INFO") -> dict:
    """
    Return a Django LOGGING dict with console and rotating JSON file handlers.

    Args:
        base_dir: Directory that receives ``logs/`` (defaults to the working directory)
        level: Level for the ``nestedforms`` logger

    Returns:
        dict: Django LOGGING configuration dictionary
    """
    if base_dir is None:
        base_dir = Path.cwd()
    elif isinstance(base_dir, str):
        base_dir = Path(base_dir)

    logs_dir = base_dir / "logs"
    logs_dir.mkdir(exist_ok=True)

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'console': {
                '()': structlog.stdlib.ProcessorFormatter,
                'processor': structlog.dev.ConsoleRenderer(colors=True),
                'foreign_pre_chain': shared_processors(),
            },
            'json': {
                '()': structlog.stdlib.ProcessorFormatter,
                'processor': structlog.processors.JSONRenderer(),
                'foreign_pre_chain': shared_processors(),
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'console',
                'level': 'INFO',
            },
            'file': {
                '()': 'nestedforms.config.logging_config.SuffixTimedRotatingFileHandler',
                'filename': str(logs_dir / 'nestedforms.jsonl'),
                'when': 'midnight',
                'interval': 1,
                'backupCount': 30,
                'encoding': 'utf-8',
                'utc': True,
                'suffix': '%Y-%m-%d.jsonl',
                'formatter': 'json',
                'level': 'DEBUG',
            },
        },
        'root': {
            'handlers': ['console', 'file'],
            'level': 'INFO',
        },
        'loggers': {
            'nestedforms': {
                'handlers': ['console', 'file'],
                'level': level,
                'propagate': False,
            },
        },
    }
