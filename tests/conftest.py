"""
Shared pytest fixtures and configuration for sfvforge tests.

Fixture Organization
--------------------
- **temp_dir**: Temporary directory for file operations
- **workdir**: temp_dir made the current working directory (manifest
  filenames are bare names resolved against the working directory)
- **sample_files**: A few small files with known contents inside workdir
- **clean_env**: Autouse; strips SFVFORGE_* variables so tests see defaults
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, Generator

import pytest


# ============================================================================
# Path and Directory Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory (cleaned up after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def workdir(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Switch the working directory to temp_dir for the test."""
    monkeypatch.chdir(temp_dir)
    return temp_dir


@pytest.fixture
def sample_files(workdir: Path) -> Dict[str, bytes]:
    """Create sample files in workdir.

    Returns:
        Mapping of filename to file contents
    """
    files = {
        "empty.bin": b"",
        "fox.txt": b"The quick brown fox jumps over the lazy dog",
        "digits.dat": b"123456789",
        "large.bin": bytes(range(256)) * 1024,
    }
    for name, data in files.items():
        (workdir / name).write_bytes(data)
    return files


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Remove SFVFORGE_* overrides inherited from the developer's shell."""
    # Uses a private MonkeyPatch so the shared ``monkeypatch`` fixture is not
    # instantiated before ``temp_dir`` (its patches must be undone first).
    with pytest.MonkeyPatch.context() as mp:
        for key in list(os.environ):
            if key.startswith("SFVFORGE_"):
                mp.delenv(key, raising=False)
        yield
