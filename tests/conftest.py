"""Shared pytest fixtures for all tests."""

import pytest

from image_generator.config import config
from image_generator.rng import RandomSource


@pytest.fixture
def work_dir(tmp_path, monkeypatch):
    """
    Point the configured work directory at a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture
        monkeypatch: pytest monkeypatch fixture

    Returns:
        Path to the temporary work directory
    """
    monkeypatch.setattr(config, "WORK_DIR", str(tmp_path))
    monkeypatch.setattr(config, "BASE_IMAGE_DIR", "generated-files")
    monkeypatch.setattr(config, "MANIFEST_NAME", "dockerfile.generated")
    monkeypatch.setattr(config, "ARCHIVE_NAME", "context.tar")
    monkeypatch.setattr(config, "FORCE_REGENERATE", False)
    return tmp_path


@pytest.fixture
def source():
    """Random source with a fixed seed."""
    return RandomSource(1)


@pytest.fixture
def sample_files(tmp_path):
    """
    Create a few files with known contents.

    Returns:
        List of (path, content) tuples
    """
    files = []
    for name, content in (("a.txt", b"alpha"), ("b.txt", b""), ("c.txt", b"x" * 5000)):
        path = tmp_path / "files" / name
        path.parent.mkdir(exist_ok=True)
        path.write_bytes(content)
        files.append((str(path), content))
    return files
