"""Test configuration and fixtures."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))
sys.path.insert(0, str(Path(__file__).parent.parent))

from vgmswan.config import CompilerConfig
from vgm_builder import build_vgm, wait


@pytest.fixture
def config():
    """Default options."""
    return CompilerConfig()


@pytest.fixture
def bucket_config():
    """Options with resampling disabled, so sample bytes pass through."""
    return CompilerConfig(disable_resampling=True)


@pytest.fixture
def minimal_vgm():
    """One 441-sample delay and nothing else."""
    return build_vgm(wait(441))


@pytest.fixture
def minimal_vgm_file(tmp_path, minimal_vgm):
    """Write the minimal capture log to disk."""
    path = tmp_path / "minimal.vgm"
    path.write_bytes(minimal_vgm)
    return path


@pytest.fixture
def firmware():
    """Stand-in firmware asset."""
    return bytes(range(0x20, 0x40))
