"""Sink for human-readable build progress messages."""

import logging
from dataclasses import dataclass, field
from typing import Protocol


class ProgressLogger(Protocol):
    """Receives progress lines destined for the build log."""

    def message(self, text: str) -> None:
        """Emit an informational line."""

    def warning(self, text: str) -> None:
        """Emit a warning line."""


@dataclass(frozen=True, kw_only=True)
class LoggingProgressLogger:
    """Progress sink writing to the standard logging module."""

    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("automate_website_action")
    )

    def message(self, text: str) -> None:
        self.logger.info("%s", text)

    def warning(self, text: str) -> None:
        self.logger.warning("%s", text)
