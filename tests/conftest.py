import pytest
from loguru import logger

import tilegrid.config
from tilegrid.config import Config
from tilegrid.mercator import GlobalMercator


@pytest.fixture(autouse=True)
def setup_config():
    """Set up test CONFIG before each test."""
    config = Config()
    tilegrid.config.CONFIG = config

    yield config

    # Cleanup: Reset CONFIG after test
    tilegrid.config.CONFIG = None


@pytest.fixture(autouse=True)
def silence_logging():
    """Keep tilegrid's logger in its library default (disabled) between tests."""
    yield
    logger.disable("tilegrid")


@pytest.fixture
def log_messages():
    """Capture tilegrid log records as '<LEVEL> <message>' strings."""
    messages: list[str] = []
    logger.enable("tilegrid")
    handler_id = logger.add(messages.append, level="DEBUG", format="{level} {message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def mercator():
    return GlobalMercator(256)
