"""s3mock object storage error types.

Every failure the engine raises is an ObjectStorageError subclass carrying a
stable ``code`` so callers can dispatch on the kind of failure instead of on
message text. Tolerated states (a missing file during an idempotent delete,
missing or unparsable sidecar metadata on read) are never raised.
"""

from __future__ import annotations


class ObjectStorageError(Exception):
    """Base exception for object storage operations.

    Attributes:
        message: Human-readable error message.
        bucket: Bucket associated with the operation (if applicable).
        key: Object key associated with the operation (if applicable).
    """

    code = "ObjectStorageError"

    def __init__(
        self,
        message: str,
        *,
        bucket: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.bucket = bucket
        self.key = key

    def __str__(self) -> str:
        parts = [self.message]
        if self.bucket:
            parts.append(f"bucket={self.bucket}")
        if self.key:
            parts.append(f"key={self.key}")
        return " ".join(parts)


class KeyExistsError(ObjectStorageError):
    """Raised when create_object targets a key that already has data.

    Recoverable: the caller picks another key or switches to
    put_object_if_match.
    """

    code = "KeyExists"

    def __init__(
        self,
        message: str = "cannot overwrite an existing key",
        *,
        bucket: str | None = None,
        key: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket, key=key)
        self.original_error = original_error


class StaleDataError(ObjectStorageError):
    """Raised when a supplied etag does not match the stored one.

    Also raised when an etag was required but the object has no metadata.
    Recoverable: the caller reloads the object and retries.
    """

    code = "StaleData"

    def __init__(
        self,
        message: str = "object was modified concurrently, reload your object first",
        *,
        bucket: str | None = None,
        key: str | None = None,
        expected_etag: str | None = None,
        current_etag: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket, key=key)
        self.expected_etag = expected_etag
        self.current_etag = current_etag
        self.original_error = original_error


class ObjectNotFoundError(ObjectStorageError):
    """Raised when a read targets a key with no data artifact."""

    code = "NoSuchKey"

    def __init__(
        self,
        message: str = "The specified key does not exist.",
        *,
        bucket: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket, key=key)


class UnsupportedBucketOperationError(ObjectStorageError):
    """Raised for bucket-level operations that have no local analog."""

    code = "UnsupportedBucketOperation"

    def __init__(
        self,
        message: str = "bucket operation is not supported by the filesystem store",
        *,
        bucket: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket)
        self.operation = operation


class InvalidKeyError(ObjectStorageError):
    """Raised when an object key cannot be mapped to a storage path."""

    code = "InvalidKey"

    def __init__(
        self,
        message: str = "Invalid key",
        *,
        bucket: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket, key=key)


class PathTraversalError(InvalidKeyError):
    """Raised when an object key or prefix would escape the bucket directory.

    Keys like "../x", "/abs", "C:\\x" or "a//b" are rejected before any
    file-system access happens.
    """

    code = "PathTraversal"

    def __init__(
        self,
        message: str = "Invalid key: path traversal detected",
        *,
        bucket: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket, key=key)


class InvalidBucketNameError(ObjectStorageError):
    """Raised when a bucket name is not a single safe path segment."""

    code = "InvalidBucketName"

    def __init__(
        self,
        message: str = "Invalid bucket name",
        *,
        bucket: str | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket)


class StorageBackendError(ObjectStorageError):
    """Raised when the file system cannot complete an operation.

    Covers permission denied, disk full, unexpected directory-entry types and
    any other OSError that is not one of the tolerated states. The original
    exception is kept in ``cause`` and chained as ``__cause__``.
    """

    code = "StorageBackendError"

    def __init__(
        self,
        message: str = "Storage backend error",
        *,
        bucket: str | None = None,
        key: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, bucket=bucket, key=key)
        self.cause = cause
