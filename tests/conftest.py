"""Pytest configuration and fixtures for s3mock tests."""

from __future__ import annotations

import uuid
from pathlib import Path

import pytest

from s3mock.config import S3MOCK_ROOT_DIR_ENV
from s3mock.storage.filesystem_store import FilesystemObjectStore


@pytest.fixture(autouse=True)
def isolate_root_dir_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's S3MOCK_ROOT_DIR from leaking into tests."""
    monkeypatch.delenv(S3MOCK_ROOT_DIR_ENV, raising=False)


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    """Return a fresh storage root folder."""
    return tmp_path / "objects"


@pytest.fixture
def bucket() -> str:
    """Return a unique bucket name."""
    return f"s3store-bucket-{uuid.uuid4().hex[:10]}"


@pytest.fixture
def store(bucket: str, root_dir: Path) -> FilesystemObjectStore:
    """Create a FilesystemObjectStore rooted in a temp directory."""
    return FilesystemObjectStore(bucket, root_dir=root_dir)
