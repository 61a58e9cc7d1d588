"""
pytest configuration for site transfer tests.

Adds src directory to Python path for imports and provides fixtures over
the in-memory HTTP fakes.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from config import TransferConfig, reset_config, set_config  # noqa: E402
from fakes import FakeRawClient, FakeUploadHelper  # noqa: E402


@pytest.fixture
def fake_raw_client():
    return FakeRawClient()


@pytest.fixture
def fake_upload_helper():
    return FakeUploadHelper()


@pytest.fixture(autouse=True)
def transfer_config():
    """Use built-in defaults instead of reading config.yaml from disk."""
    config = TransferConfig()
    set_config(config)
    yield config
    reset_config()
