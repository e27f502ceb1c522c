"""Key-to-path mapping for the filesystem store.

Objects live at ``<bucket_dir>/<key>`` and their sidecar metadata at
``<bucket_dir>/<key>.meta``. Keys are validated before they touch the file
system: anything that could resolve outside the bucket directory is rejected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from s3mock.storage.errors import (
    InvalidBucketNameError,
    InvalidKeyError,
    PathTraversalError,
)

METADATA_SUFFIX = ".meta"

# Temp files written by atomic_write: ".<uuid4 hex>.tmp"
_TEMP_ARTIFACT_PATTERN = re.compile(r"^\.[0-9a-f]{32}\.tmp$")

# Longest segment whose sidecar name still fits a 255-byte file name
MAX_SEGMENT_BYTES = 255 - len(METADATA_SUFFIX)


def is_metadata_name(name: str) -> bool:
    return name.endswith(METADATA_SUFFIX)


def is_temp_artifact_name(name: str) -> bool:
    return bool(_TEMP_ARTIFACT_PATTERN.match(name))


def temp_artifact_name(token: str) -> str:
    return f".{token}.tmp"


def _traversal_reason(value: str, *, allow_trailing_slash: bool = False) -> str | None:
    """Return why a key or prefix is unsafe, or None if it is safe.

    Detects:
    - Empty value
    - Null bytes
    - Backslashes (Windows path separators)
    - Absolute paths (leading / or ~) and drive letters (C:)
    - Empty, "." or ".." segments
    """
    if not value:
        return "empty key"
    if "\x00" in value:
        return "null byte in key"
    if "\\" in value:
        return "backslash in key"
    if value.startswith("/") or value.startswith("~"):
        return "absolute path"
    if len(value) >= 2 and value[1] == ":":
        return "drive letter"

    if allow_trailing_slash and value.endswith("/"):
        value = value[:-1]
    segments = value.split("/")
    if any(segment in ("", ".", "..") for segment in segments):
        return "empty, '.' or '..' path segment"
    return None


def validate_key(key: str, bucket: str | None = None) -> None:
    """Validate an object key and raise if it cannot be stored safely.

    Raises:
        PathTraversalError: If the key could escape the bucket directory.
        InvalidKeyError: If a segment collides with a sidecar name, the last
            segment collides with a temp-file name, or a segment is too long
            to carry a sidecar.
    """
    reason = _traversal_reason(key)
    if reason is not None:
        raise PathTraversalError(
            message=f"Invalid key: {reason}",
            bucket=bucket,
            key=key,
        )

    segments = key.split("/")
    # A directory named "x.meta" would sit where key "x" keeps its sidecar.
    if any(is_metadata_name(segment) for segment in segments):
        raise InvalidKeyError(
            message=f"Invalid key: names ending in {METADATA_SUFFIX!r} are reserved for metadata",
            bucket=bucket,
            key=key,
        )
    if any(len(segment.encode("utf-8")) > MAX_SEGMENT_BYTES for segment in segments):
        raise InvalidKeyError(
            message=f"Invalid key: path segments are limited to {MAX_SEGMENT_BYTES} bytes",
            bucket=bucket,
            key=key,
        )
    if is_temp_artifact_name(segments[-1]):
        raise InvalidKeyError(
            message="Invalid key: name is reserved for temporary write files",
            bucket=bucket,
            key=key,
        )


def validate_prefix(prefix: str, bucket: str | None = None) -> None:
    """Validate a listing prefix. The empty prefix selects the whole bucket."""
    if not prefix:
        return
    reason = _traversal_reason(prefix, allow_trailing_slash=True)
    if reason is not None:
        raise PathTraversalError(
            message=f"Invalid prefix: {reason}",
            bucket=bucket,
            key=prefix,
        )


def validate_bucket_name(bucket: str) -> None:
    """Validate that a bucket name is a single safe directory name."""
    unsafe = (
        not bucket
        or bucket in (".", "..")
        or "/" in bucket
        or "\\" in bucket
        or "\x00" in bucket
        or (len(bucket) >= 2 and bucket[1] == ":")
    )
    if unsafe:
        raise InvalidBucketNameError(
            message=f"Invalid bucket name: {bucket!r}",
            bucket=bucket,
        )


@dataclass(frozen=True)
class ObjectPaths:
    """Resolved on-disk locations of one object."""

    data: Path
    meta: Path


class PathResolver:
    """Maps keys of one bucket to data and sidecar metadata paths.

    ``resolve`` and ``resolve_prefix`` only validate and join strings.
    ``ensure_within_bucket`` follows symlinks on disk, so it belongs in a
    worker thread next to the I/O it guards.
    """

    def __init__(self, bucket: str, bucket_dir: Path) -> None:
        self._bucket = bucket
        self._bucket_dir = bucket_dir

    @property
    def bucket_dir(self) -> Path:
        return self._bucket_dir

    def resolve(self, key: str) -> ObjectPaths:
        """Return the data and metadata paths for key.

        Raises:
            PathTraversalError: If key could escape the bucket directory.
            InvalidKeyError: If key uses a reserved name.
        """
        validate_key(key, self._bucket)
        data = self._bucket_dir / key
        return ObjectPaths(data=data, meta=data.with_name(data.name + METADATA_SUFFIX))

    def resolve_prefix(self, prefix: str) -> Path:
        """Return the directory (or file) a listing prefix points at."""
        validate_prefix(prefix, self._bucket)
        if not prefix:
            return self._bucket_dir
        return self._bucket_dir / prefix.rstrip("/")

    def relative_key(self, path: Path) -> str:
        """Return the key of a file under the bucket, with forward slashes."""
        return path.relative_to(self._bucket_dir).as_posix()

    def ensure_within_bucket(self, path: Path, key: str) -> None:
        """Ensure a path resolves within the bucket directory (defense in depth).

        Raises:
            PathTraversalError: If a symlink leads the path out of the bucket.
        """
        resolved = path.resolve()
        try:
            resolved.relative_to(self._bucket_dir.resolve())
        except ValueError as e:
            raise PathTraversalError(
                message="Path resolves outside bucket directory",
                bucket=self._bucket,
                key=key,
            ) from e
