"""Tests for environment-driven settings and the error hierarchy."""

from __future__ import annotations

from pathlib import Path

import pytest

from s3mock.config import get_env_bool, get_env_str, resolve_root_dir
from s3mock.storage.errors import (
    InvalidKeyError,
    KeyExistsError,
    ObjectNotFoundError,
    ObjectStorageError,
    PathTraversalError,
    StaleDataError,
    StorageBackendError,
)


class TestResolveRootDir:
    """Tests for resolve_root_dir precedence."""

    def test_explicit_argument_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3MOCK_ROOT_DIR", str(tmp_path / "env"))

        assert resolve_root_dir(tmp_path / "explicit") == (tmp_path / "explicit").resolve()

    def test_env_var_used_when_no_argument(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("S3MOCK_ROOT_DIR", str(tmp_path / "env"))

        assert resolve_root_dir() == (tmp_path / "env").resolve()

    def test_default_under_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)

        assert resolve_root_dir() == (tmp_path / ".s3StoreMock").resolve()

    def test_blank_env_var_ignored(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("S3MOCK_ROOT_DIR", "   ")

        assert resolve_root_dir() == (tmp_path / ".s3StoreMock").resolve()

    def test_relative_path_anchored_at_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)

        assert resolve_root_dir("data/objects") == (tmp_path / "data" / "objects").resolve()


class TestEnvHelpers:
    """Tests for get_env_bool and get_env_str."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("1", True), ("true", True), ("YES", True), ("0", False), ("no", False), ("", False)],
    )
    def test_get_env_bool(
        self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
    ) -> None:
        monkeypatch.setenv("S3MOCK_TEST_FLAG", raw)

        assert get_env_bool("S3MOCK_TEST_FLAG") is expected

    def test_get_env_bool_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3MOCK_TEST_FLAG", "maybe")

        assert get_env_bool("S3MOCK_TEST_FLAG", True) is True

    def test_get_env_str_strips(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3MOCK_TEST_STR", "  value ")

        assert get_env_str("S3MOCK_TEST_STR") == "value"
        assert get_env_str("S3MOCK_TEST_MISSING", "fallback") == "fallback"


class TestErrors:
    """Tests for the error hierarchy."""

    def test_codes(self) -> None:
        assert KeyExistsError().code == "KeyExists"
        assert StaleDataError().code == "StaleData"
        assert ObjectNotFoundError().code == "NoSuchKey"
        assert PathTraversalError().code == "PathTraversal"

    def test_all_are_object_storage_errors(self) -> None:
        assert isinstance(PathTraversalError(), InvalidKeyError)
        for error in (KeyExistsError(), StaleDataError(), StorageBackendError()):
            assert isinstance(error, ObjectStorageError)

    def test_str_includes_context(self) -> None:
        error = ObjectNotFoundError(bucket="bkt", key="a/b")

        assert str(error) == "The specified key does not exist. bucket=bkt key=a/b"

    def test_stale_data_carries_etags(self) -> None:
        error = StaleDataError(expected_etag='"a"', current_etag='"b"')

        assert error.expected_etag == '"a"'
        assert error.current_etag == '"b"'
