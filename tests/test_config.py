"""Tests for configuration loading."""

import logging
import os
from unittest.mock import patch

import pytest

from guestbook_core.config import configure_logging, load_config
from guestbook_core.models.config import BASE_MAINNET, CELO_MAINNET, DEFAULT_APP_URL

_ENV_VARS = (
    "GUESTBOOK_CHAIN_ID",
    "GUESTBOOK_CONTRACT_ADDRESS",
    "GUESTBOOK_APP_URL",
    "NEXT_PUBLIC_APP_URL",
    "GUESTBOOK_REFRESH_DELAY_SECONDS",
    "GUESTBOOK_IDENTITY_DB",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env():
    saved = {name: os.environ.pop(name) for name in _ENV_VARS if name in os.environ}
    yield
    for name in _ENV_VARS:
        os.environ.pop(name, None)
    os.environ.update(saved)


class TestLoadConfig:
    def test_defaults(self):
        config = load_config()
        assert config.chain_id == CELO_MAINNET
        assert config.app_url == DEFAULT_APP_URL
        assert config.refresh_delay_seconds == 2.0
        assert config.identity_db_path == ":memory:"
        assert config.log_level == "INFO"

    def test_custom_values(self):
        with patch.dict(os.environ, {
            "GUESTBOOK_CHAIN_ID": str(BASE_MAINNET),
            "GUESTBOOK_CONTRACT_ADDRESS": "0xdeployed",
            "GUESTBOOK_APP_URL": "https://my.app",
            "GUESTBOOK_REFRESH_DELAY_SECONDS": "0.5",
            "LOG_LEVEL": "debug",
        }):
            config = load_config()

        assert config.chain_id == BASE_MAINNET
        assert config.contract_address == "0xdeployed"
        assert config.app_url == "https://my.app"
        assert config.refresh_delay_seconds == 0.5
        assert config.log_level == "DEBUG"

    def test_next_public_app_url_fallback(self):
        with patch.dict(os.environ, {"NEXT_PUBLIC_APP_URL": "https://legacy.app"}):
            assert load_config().app_url == "https://legacy.app"

    def test_invalid_integer_raises(self):
        with patch.dict(os.environ, {"GUESTBOOK_CHAIN_ID": "celo"}):
            with pytest.raises(ValueError, match="GUESTBOOK_CHAIN_ID"):
                load_config()

    def test_invalid_delay_raises(self):
        with patch.dict(os.environ, {"GUESTBOOK_REFRESH_DELAY_SECONDS": "soon"}):
            with pytest.raises(ValueError, match="GUESTBOOK_REFRESH_DELAY_SECONDS"):
                load_config()


class TestConfigureLogging:
    def test_handler_added_once(self):
        configure_logging("INFO")
        logger = logging.getLogger("guestbook_core")
        count = len(logger.handlers)

        configure_logging("DEBUG")

        assert len(logger.handlers) == count
        assert logger.level == logging.DEBUG
