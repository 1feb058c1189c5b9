from __future__ import annotations

import logging

import orjson

from mailblob.core.config import Settings

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(message)s"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format=_LOG_FORMAT)
    logging.getLogger("mailblob").setLevel(settings.LOG_LEVEL)
    # botocore is chatty at INFO.
    logging.getLogger("botocore").setLevel(logging.WARNING)


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields) -> None:
    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(
        level,
        orjson.dumps(payload, option=orjson.OPT_SORT_KEYS, default=str).decode("utf-8"),
    )
