"""
Test configuration for feedscrub unit tests.

Ensures the project root is on sys.path so the package can be imported
without installing it, and keeps Loguru state from leaking between tests.
"""

import sys
from pathlib import Path

import pytest
from loguru import logger

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def log_messages():
    """Collect feedscrub log records emitted during the test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record), level="DEBUG")
    logger.enable("feedscrub")
    yield messages
    logger.remove(handler_id)
    logger.disable("feedscrub")
