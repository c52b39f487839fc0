# agentstack/core/logging.py
from __future__ import annotations

import logging
import sys
from typing import Iterable

from pythonjsonlogger import jsonlogger

# SDK loggers that are chatty at INFO (credential lookups, connection pools)
NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "httpx", "httpcore")


def configure_logging(
    level: str = "INFO",
    json: bool = True,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    if json:
        formatter: logging.Formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
        )
    handler.setFormatter(formatter)

    # A warm Lambda container calls this again; replace, don't stack
    root.handlers = [handler]

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
