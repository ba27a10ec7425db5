from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str = "INFO", *, detailed: bool = False) -> None:
    """`detailed` forces DEBUG so per-record skips and API calls show up."""
    if detailed:
        level = "DEBUG"
    logging.basicConfig(level=(level or "INFO").upper(), format=LOG_FORMAT)


def mask_token(token: str | None) -> str:
    """Keep the first and last 5 characters for log lines."""
    if not token:
        return "<empty>"
    if len(token) <= 10:
        return "*" * len(token)
    return f"{token[:5]}...{token[-5:]}"
