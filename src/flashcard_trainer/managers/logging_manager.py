"""
# Logging Manager

Central factory for application loggers. Every module obtains its logger here so that
formatting and level are configured in one place:

```python
from flashcard_trainer.managers.logging_manager import get_logger

logger = get_logger()
db_logger = get_logger(prefix="[DATABASE]")
db_logger.info("Connected to %s", "fiszki")
# 2024-01-01 12:00:00,000 - FlashcardTrainer - INFO - [DATABASE] Connected to fiszki
```

The level comes from `settings.LOG_LEVEL`.
"""

import logging
import sys
from typing import Any, MutableMapping, Tuple

from flashcard_trainer.config import settings

DEFAULT_LOGGER_NAME = "FlashcardTrainer"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


class PrefixedLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that prepends a fixed prefix such as `[DATABASE]` to every message."""

    def __init__(self, logger: logging.Logger, prefix: str = ""):
        super().__init__(logger, {})
        self.prefix = prefix

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        if self.prefix:
            return f"{self.prefix} {msg}", kwargs
        return msg, kwargs


def _configure_root(name: str) -> None:
    global _configured
    if _configured:
        return

    base_logger = logging.getLogger(name)
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)
    base_logger.setLevel(level)

    if not base_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        base_logger.addHandler(handler)

    # uvicorn installs its own handlers on the root logger
    base_logger.propagate = False
    _configured = True


def get_logger(name: str = DEFAULT_LOGGER_NAME, prefix: str = "") -> PrefixedLoggerAdapter:
    """
    Return a configured logger, optionally prefixing every message.

    Args:
        name: Logger name. Defaults to the application logger so all modules share
            one handler.
        prefix: Text prepended to each message, e.g. `"[FlashcardService]"`.

    Returns:
        PrefixedLoggerAdapter: Adapter exposing the usual `debug`/`info`/`warning`/
            `error`/`exception` methods.
    """
    _configure_root(DEFAULT_LOGGER_NAME)
    return PrefixedLoggerAdapter(logging.getLogger(name), prefix=prefix)
