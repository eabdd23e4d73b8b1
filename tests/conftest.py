"""
Pytest configuration for the quadstream test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- A fresh config singleton per test
- Common fixtures for stores, sample quads and N-Quads files
"""

import asyncio
import os
import shutil
import tempfile
from pathlib import Path

import pytest

from quadstream.config import reset_config
from quadstream.logging_config import logger, setup_logging
from quadstream.schemas import quad
from quadstream.streaming_store import StreamingStore


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    os.environ.setdefault("QUADSTREAM_MACHINE_MODE", "1")


# ============================================================================
# LOGGING / CONFIG FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, force=True)


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from the environment defaults."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def log_messages():
    """
    Collect loguru records emitted during the test.

    Usage:
        def test_warns(log_messages):
            ...
            assert any("not keeping up" in m for m in log_messages)
    """
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


# ============================================================================
# STORE FIXTURES
# ============================================================================

@pytest.fixture
def store():
    """An empty StreamingStore over the in-memory backing store."""
    return StreamingStore()


@pytest.fixture
def abcd():
    """Four unrelated quads in the default graph."""
    return [
        quad("s1", "p1", "o1"),
        quad("s2", "p2", "o2"),
        quad("s3", "p3", "o3"),
        quad("s4", "p4", "o4"),
    ]


@pytest.fixture
def slow_source():
    """
    Build an async quad source that sleeps before every item.

    Usage:
        store.write(slow_source(quads, delay=0.01))
    """
    async def source(items, delay=0.0, fail_with=None):
        for item in items:
            await asyncio.sleep(delay)
            yield item
        if fail_with is not None:
            raise fail_with

    return source


# ============================================================================
# FILE FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="quadstream_test_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def nquads_file(temp_dir):
    """A small N-Quads file with a duplicate line and a named graph."""
    path = temp_dir / "data.nq"
    path.write_text(
        "# sample data\n"
        "<http://ex.org/alice> <http://ex.org/knows> <http://ex.org/bob> .\n"
        "<http://ex.org/alice> <http://ex.org/name> \"Alice\"@en .\n"
        "\n"
        "<http://ex.org/bob> <http://ex.org/knows> _:carol <http://ex.org/g1> .\n"
        "<http://ex.org/alice> <http://ex.org/knows> <http://ex.org/bob> .\n"
        "_:carol <http://ex.org/age> \"42\"^^<http://www.w3.org/2001/XMLSchema#integer> <http://ex.org/g1> .\n",
        encoding="utf-8",
    )
    return path
