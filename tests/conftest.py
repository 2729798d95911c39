"""
Pytest configuration for transcription tests.

Qt runs offscreen so the worker thread tests need no display.
"""
import logging
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest


@pytest.fixture
def config_dir(tmp_path):
    path = tmp_path / "config"
    path.mkdir()
    return path


@pytest.fixture
def propagate_logs():
    """Let caplog see records from the non-propagating voicelog logger."""
    logger = logging.getLogger("voicelog")
    previous = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = previous
