"""
Pytest configuration and shared fixtures.

Key fixtures:
- sample_body: Raw JSON body of a typical queue message
- outcomes: Bounded outcome queue
- mock_log: Diagnostics logger double for asserting warnings

No broker or network access is needed: HTTP targets are simulated with
httpx.MockTransport.
"""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from http_request_worker.outcome import OutcomeQueue


@pytest.fixture
def sample_body() -> bytes:
    """Body of a message posting a payload with two headers."""
    return json.dumps(
        {
            'url': 'http://x/y',
            'headers': [{'A': '1'}, {'B': '2'}],
            'body': 'payload',
        }
    ).encode()


@pytest.fixture
def outcomes() -> OutcomeQueue:
    """Outcome queue with room for a handful of results."""
    return OutcomeQueue(maxsize=10)


@pytest.fixture
def mock_log() -> MagicMock:
    """Stand-in diagnostics logger."""
    return MagicMock()
