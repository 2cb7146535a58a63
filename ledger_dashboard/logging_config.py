"""Logging setup shared by the API server and the dashboard client."""

import logging

from ledger_dashboard.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once, at ``settings.LOG_LEVEL`` unless overridden."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
