"""Blocking file helpers shared by the filesystem store.

These run inside worker threads (see FilesystemObjectStore) and translate
unexpected OSErrors into StorageBackendError.
"""

from __future__ import annotations

import contextlib
import uuid
from pathlib import Path

from s3mock.storage.errors import StorageBackendError
from s3mock.storage.paths import temp_artifact_name


def ensure_parent_dir(path: Path) -> None:
    """Create the parent directories of path (idempotent, recursive)."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageBackendError(
            message=f"Failed to create directory: {e.strerror or e}",
            cause=e,
        ) from e


def atomic_write(path: Path, data: bytes) -> None:
    """Write data to path via a temp file and an atomic replace.

    The temp file lives in the same directory so the replace never crosses
    file systems. Parent directories are created as needed.
    """
    ensure_parent_dir(path)
    tmp_file = path.with_name(temp_artifact_name(uuid.uuid4().hex))
    try:
        tmp_file.write_bytes(data)
        tmp_file.replace(path)
    except OSError as e:
        with contextlib.suppress(OSError):
            tmp_file.unlink(missing_ok=True)
        raise StorageBackendError(
            message=f"Failed to write {path.name}: {e.strerror or e}",
            cause=e,
        ) from e


def read_bytes(path: Path) -> bytes | None:
    """Read a regular file, returning None if it does not exist."""
    try:
        return path.read_bytes()
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as e:
        raise StorageBackendError(
            message=f"Failed to read {path.name}: {e.strerror or e}",
            cause=e,
        ) from e


def exists(path: Path) -> bool:
    """Return True if path exists (as any kind of directory entry)."""
    try:
        path.lstat()
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as e:
        raise StorageBackendError(
            message=f"Failed to stat {path.name}: {e.strerror or e}",
            cause=e,
        ) from e
    return True


def remove(path: Path) -> bool:
    """Remove a file. A missing file is not an error.

    Returns:
        True if a file was removed, False if there was nothing to remove.
    """
    try:
        path.unlink()
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as e:
        raise StorageBackendError(
            message=f"Failed to delete {path.name}: {e.strerror or e}",
            cause=e,
        ) from e
    return True
