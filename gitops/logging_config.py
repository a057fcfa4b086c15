"""Logging configuration and per-operation log prefixes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    if isinstance(level, str):
        level = level.upper()
    logger = logging.getLogger("gitops")
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    # Keep httpx request lines out of INFO output
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logger


@dataclass(frozen=True)
class OperationContext:
    """Who is logging: the running command and the repository being worked on."""
    command: str = "gitops"
    repository: Optional[str] = None

    def for_repository(self, full_name: str) -> "OperationContext":
        return replace(self, repository=full_name)

    @property
    def prefix(self) -> str:
        if self.repository:
            return f"[{self.command}] [{self.repository}]"
        return f"[{self.command}]"


class ContextLogger(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        return f"{self.extra['context'].prefix} {msg}", kwargs


def get_context_logger(name: str, context: Optional[OperationContext] = None) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {"context": context or OperationContext()})
