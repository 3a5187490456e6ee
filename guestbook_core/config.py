"""Configuration loading and logging setup.

Reads environment variables into a ``GuestbookConfig``. Unknown variables
are ignored; malformed numbers raise with the variable name in the message.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from guestbook_core.models.config import GuestbookConfig

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_logging_configured = False


def _get_env_int(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if raw_value is None or raw_value == "":
        return default
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer (got {raw_value!r})") from exc


def _get_env_float(name: str, default: float) -> float:
    raw_value = os.getenv(name)
    if raw_value is None or raw_value == "":
        return default
    try:
        return float(raw_value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be a number (got {raw_value!r})") from exc


def load_config() -> GuestbookConfig:
    """Load configuration from environment variables."""

    defaults = GuestbookConfig()
    chain_id = _get_env_int("GUESTBOOK_CHAIN_ID", defaults.chain_id)

    addresses = dict(defaults.contract_addresses)
    contract_address: Optional[str] = os.getenv("GUESTBOOK_CONTRACT_ADDRESS")
    if contract_address:
        addresses[chain_id] = contract_address

    return GuestbookConfig(
        chain_id=chain_id,
        contract_addresses=addresses,
        app_url=os.getenv("GUESTBOOK_APP_URL") or os.getenv("NEXT_PUBLIC_APP_URL") or defaults.app_url,
        refresh_delay_seconds=_get_env_float(
            "GUESTBOOK_REFRESH_DELAY_SECONDS", defaults.refresh_delay_seconds
        ),
        identity_db_path=os.getenv("GUESTBOOK_IDENTITY_DB", defaults.identity_db_path),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the package logger, once per process."""

    global _logging_configured
    logger = logging.getLogger("guestbook_core")
    logger.setLevel(level)
    if _logging_configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    _logging_configured = True
