"""Application-wide logging initialization

Call `configure_logging()` once at startup, before any other logging is done.

Logging format:
    2026-10-19 12:00:00,000 - hop_service.services.link_service - INFO - Generated AbCdEfG for https://example.com.
"""

import logging.config
from typing import Optional

from hop_service.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    log_level = (level or settings.log_level).upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': LOG_FORMAT,
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'default',
                    'stream': 'ext://sys.stdout',
                }
            },
            'loggers': {
                'hop_service': {
                    'level': log_level,
                    'handlers': ['stdout'],
                    'propagate': False,
                },
            },
        }
    )
