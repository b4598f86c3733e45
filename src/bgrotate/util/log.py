# src/bgrotate/util/log.py: Process-wide logging setup.
# Log records go to stdout and, when configured, to a log file. The workspace
# being rotated is kept in a contextvar and injected into every record, so both
# the plain text and the JSON output say which workspace a line belongs to.

import contextvars
import logging
from logging.config import dictConfig

workspace_context = contextvars.ContextVar('workspace_context', default=None)

TEXT_FORMAT = "%(levelname)s: [%(asctime)s PID:%(process)d] %(message)s"
JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(workspace)s %(message)s"

class WorkspaceFilter(logging.Filter):
    """Attaches the current workspace id to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.workspace = workspace_context.get()
        return True

def get_logger(name):
    return logging.getLogger(name)

def setup_logging(config) -> None:
    """Configure the 'bgrotate' logger from a LoggingConfig."""
    log_level = config.level.upper()

    formatter = {'format': TEXT_FORMAT}
    if config.json_format:
        formatter = {
            '()': 'pythonjsonlogger.json.JsonFormatter',
            'format': JSON_FORMAT,
        }

    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'default',
            'filters': ['workspace'],
            'stream': 'ext://sys.stdout',
        },
    }
    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        handlers['file'] = {
            'class': 'logging.FileHandler',
            'formatter': 'default',
            'filters': ['workspace'],
            'filename': str(config.file),
            'encoding': 'utf-8',
        }

    dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'filters': {
            'workspace': {
                '()': WorkspaceFilter,
            },
        },
        'formatters': {
            'default': formatter,
        },
        'handlers': handlers,
        'loggers': {
            'bgrotate': {
                'handlers': list(handlers),
                'level': log_level,
            },
        },
    })
