"""
Pytest fixtures for the approval-chain test suite.

Provides:
- Structured logging configured for every test, plus a log capture helper
- A deterministic clock
- A store and command facade wired to the packaged default config

Everything is in memory; no external services are required.  Record
factories live in ``tests/factories.py``.
"""

import json
import logging
from io import StringIO

import pytest

from tests.factories import FIXED_NOW
from works_config import get_active_config
from works_kernel.domain.clock import DeterministicClock
from works_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from works_kernel.services.submission_store import SubmissionStore
from works_services import WorkflowCommandFacade


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture works_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, facade):
            facade.submit(...)
            logs = captured_logs()
            assert any(r["message"] == "command_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("works_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def workflow_config():
    return get_active_config()


@pytest.fixture
def store():
    return SubmissionStore()


@pytest.fixture
def facade(store, deterministic_clock, workflow_config):
    return WorkflowCommandFacade(store, clock=deterministic_clock, config=workflow_config)
