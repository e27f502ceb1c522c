"""s3mock filesystem object store.

Emulates a single S3 bucket on the local file system:
- Objects stored verbatim at ``<root>/<bucket>/<key>``
- Sidecar metadata (etag + content type) at ``<root>/<bucket>/<key>.meta``
- Quoted-MD5 etags with If-Match style conditional operations
- Depth-first, prefix-rooted listing

Blocking file-system work runs in worker threads via asyncio.to_thread.
Operations on the same key within one store instance are serialized by a
per-key asyncio.Lock, so the conditional check and the write it guards
happen as one step and readers never see data and metadata out of step.

Environment Variables:
    S3MOCK_ROOT_DIR: Root folder for buckets (default: ./.s3StoreMock)
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import weakref
from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

from s3mock.config import resolve_root_dir
from s3mock.storage import fileio
from s3mock.storage.errors import (
    KeyExistsError,
    ObjectNotFoundError,
    StaleDataError,
    StorageBackendError,
    UnsupportedBucketOperationError,
)
from s3mock.storage.etag import compute_etag, etags_match
from s3mock.storage.metadata import read_metadata, write_metadata
from s3mock.storage.models import (
    DEFAULT_CONTENT_TYPE,
    GetObjectResponse,
    ListEntry,
    ObjectMetadata,
    ObjectResponse,
)
from s3mock.storage.object_store import Body, ObjectStore
from s3mock.storage.paths import (
    ObjectPaths,
    PathResolver,
    is_metadata_name,
    is_temp_artifact_name,
    validate_bucket_name,
)
from s3mock.storage.tracing import traced_store_operation

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STALE_PUT_MESSAGE = "object was modified concurrently, reload your object first"
_STALE_GET_MESSAGE = (
    "object was modified concurrently, reload your object first. use get_object() instead"
)
_STALE_DELETE_MESSAGE = "object was modified concurrently, cannot proceed with deletion"


def _to_bytes(body: Body) -> bytes:
    """Normalize an object body to bytes. Strings are UTF-8 encoded."""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)
    raise TypeError(f"body must be bytes, bytearray, memoryview or str, not {type(body).__name__}")


class FilesystemObjectStore(ObjectStore):
    """Filesystem-based single-bucket object store.

    Objects are stored in a directory structure mirroring their keys:
        {root_dir}/{bucket}/
            a/b             # raw bytes of key "a/b"
            a/b.meta        # {"etag":"\\"<md5>\\"","contentType":"..."}

    Directories are created lazily on first write and are never removed.
    """

    def __init__(self, bucket: str, *, root_dir: str | Path | None = None) -> None:
        """Initialize filesystem storage for one bucket.

        Args:
            bucket: Bucket name; a single path segment.
            root_dir: Folder holding the bucket directories. If None, uses
                S3MOCK_ROOT_DIR or ``.s3StoreMock`` in the working directory.

        Raises:
            InvalidBucketNameError: If bucket is not a safe directory name.
        """
        validate_bucket_name(bucket)
        self._bucket = bucket
        self._root_dir = resolve_root_dir(root_dir)
        self._paths = PathResolver(bucket, self._root_dir / bucket)
        self._key_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        logger.debug(
            "FilesystemObjectStore initialized: bucket=%s root_dir=%s",
            bucket,
            self._root_dir,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def backend_name(self) -> str:
        return "filesystem"

    @property
    def root_dir(self) -> Path:
        """Return the bucket directory (``<root_dir>/<bucket>``)."""
        return self._paths.bucket_dir

    def _lock_for(self, key: str) -> asyncio.Lock:
        """Return the lock serializing operations on key.

        Locks are dropped once no operation holds a reference to them.
        """
        lock = self._key_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._key_locks[key] = lock
        return lock

    async def _run_blocking(self, key: str, func: Callable[..., T], *args: Any) -> T:
        """Run blocking file-system work in a worker thread."""
        try:
            return await asyncio.to_thread(func, *args)
        except StorageBackendError as e:
            if e.key is None:
                e.bucket = self._bucket
                e.key = key
            raise

    def _check_etag(self, key: str, paths: ObjectPaths, etag: str, message: str) -> None:
        """Raise StaleDataError unless the stored etag equals etag."""
        metadata = read_metadata(paths.meta)
        current = metadata.etag if metadata is not None else None
        if not etags_match(etag, current):
            raise StaleDataError(
                message=message,
                bucket=self._bucket,
                key=key,
                expected_etag=etag,
                current_etag=current,
            )

    def _write_object(
        self,
        key: str,
        paths: ObjectPaths,
        content: bytes,
        content_type: str,
        previous: bytes | None,
    ) -> ObjectResponse:
        """Write data then metadata, undoing the data write if metadata fails.

        ``previous`` is the data the key held before this write, or None if it
        had none.
        """
        fileio.atomic_write(paths.data, content)
        etag = compute_etag(content)
        try:
            write_metadata(paths.meta, ObjectMetadata(etag=etag, content_type=content_type))
        except StorageBackendError:
            self._restore_data(key, paths, previous)
            raise
        return ObjectResponse(etag=etag, content_type=content_type)

    def _restore_data(self, key: str, paths: ObjectPaths, previous: bytes | None) -> None:
        try:
            if previous is None:
                fileio.remove(paths.data)
            else:
                fileio.atomic_write(paths.data, previous)
        except StorageBackendError as e:
            logger.error(
                "Failed to roll back data after metadata write failed: bucket=%s key=%s: %s",
                self._bucket,
                key,
                e.message,
            )

    def _create_sync(
        self,
        key: str,
        paths: ObjectPaths,
        content: bytes,
        content_type: str,
    ) -> ObjectResponse:
        self._paths.ensure_within_bucket(paths.data, key)
        if fileio.exists(paths.data):
            raise KeyExistsError(bucket=self._bucket, key=key)
        return self._write_object(key, paths, content, content_type, previous=None)

    def _put_if_match_sync(
        self,
        key: str,
        paths: ObjectPaths,
        content: bytes,
        etag: str,
        content_type: str,
    ) -> ObjectResponse:
        self._paths.ensure_within_bucket(paths.data, key)
        self._check_etag(key, paths, etag, _STALE_PUT_MESSAGE)
        previous = fileio.read_bytes(paths.data)
        return self._write_object(key, paths, content, content_type, previous)

    def _get_sync(self, key: str, paths: ObjectPaths) -> GetObjectResponse:
        self._paths.ensure_within_bucket(paths.data, key)
        metadata = read_metadata(paths.meta)
        content = fileio.read_bytes(paths.data)
        if content is None:
            raise ObjectNotFoundError(bucket=self._bucket, key=key)
        if metadata is None:
            logger.debug("Serving object without metadata: bucket=%s key=%s", self._bucket, key)
            return GetObjectResponse(body=content, etag=None)
        return GetObjectResponse(
            body=content,
            etag=metadata.etag,
            content_type=metadata.content_type,
        )

    def _get_if_match_sync(self, key: str, paths: ObjectPaths, etag: str) -> GetObjectResponse:
        self._paths.ensure_within_bucket(paths.data, key)
        if not fileio.exists(paths.data):
            raise ObjectNotFoundError(bucket=self._bucket, key=key)
        self._check_etag(key, paths, etag, _STALE_GET_MESSAGE)
        return self._get_sync(key, paths)

    def _delete_sync(self, key: str, paths: ObjectPaths) -> bool:
        self._paths.ensure_within_bucket(paths.data, key)
        removed_data = fileio.remove(paths.data)
        removed_meta = fileio.remove(paths.meta)
        return removed_data or removed_meta

    def _delete_if_match_sync(self, key: str, paths: ObjectPaths, etag: str) -> bool:
        self._paths.ensure_within_bucket(paths.data, key)
        self._check_etag(key, paths, etag, _STALE_DELETE_MESSAGE)
        return self._delete_sync(key, paths)

    @traced_store_operation("create_object")
    async def create_object(
        self,
        key: str,
        body: Body,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> ObjectResponse:
        """Create a new object; fails with KeyExistsError if the key has data."""
        paths = self._paths.resolve(key)
        content = _to_bytes(body)

        lock = self._lock_for(key)
        async with lock:
            result = await self._run_blocking(
                key, self._create_sync, key, paths, content, content_type
            )

        logger.debug(
            "Created object: bucket=%s key=%s etag=%s size=%d",
            self._bucket,
            key,
            result.etag,
            len(content),
        )
        return result

    @traced_store_operation("put_object_if_match")
    async def put_object_if_match(
        self,
        key: str,
        body: Body,
        etag: str,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> ObjectResponse:
        """Replace an object if its stored etag equals etag."""
        paths = self._paths.resolve(key)
        content = _to_bytes(body)

        lock = self._lock_for(key)
        async with lock:
            result = await self._run_blocking(
                key, self._put_if_match_sync, key, paths, content, etag, content_type
            )

        logger.debug(
            "Updated object: bucket=%s key=%s etag=%s->%s size=%d",
            self._bucket,
            key,
            etag,
            result.etag,
            len(content),
        )
        return result

    @traced_store_operation("get_object")
    async def get_object(self, key: str) -> GetObjectResponse:
        """Read an object with whatever etag its metadata records."""
        paths = self._paths.resolve(key)

        lock = self._lock_for(key)
        async with lock:
            return await self._run_blocking(key, self._get_sync, key, paths)

    @traced_store_operation("get_object_if_match")
    async def get_object_if_match(self, key: str, etag: str) -> GetObjectResponse:
        """Read an object if its stored etag equals etag."""
        paths = self._paths.resolve(key)

        lock = self._lock_for(key)
        async with lock:
            return await self._run_blocking(key, self._get_if_match_sync, key, paths, etag)

    @traced_store_operation("delete_object")
    async def delete_object(self, key: str) -> ObjectResponse:
        """Delete an object's data and metadata; missing files are ignored."""
        paths = self._paths.resolve(key)

        lock = self._lock_for(key)
        async with lock:
            removed = await self._run_blocking(key, self._delete_sync, key, paths)

        logger.debug("Deleted object: bucket=%s key=%s existed=%s", self._bucket, key, removed)
        return ObjectResponse(etag=None)

    @traced_store_operation("delete_object_if_match")
    async def delete_object_if_match(self, key: str, etag: str) -> ObjectResponse:
        """Delete an object if its stored etag equals etag."""
        paths = self._paths.resolve(key)

        lock = self._lock_for(key)
        async with lock:
            await self._run_blocking(key, self._delete_if_match_sync, key, paths, etag)

        logger.debug("Deleted object: bucket=%s key=%s etag=%s", self._bucket, key, etag)
        return ObjectResponse(etag=None)

    async def list(self, prefix: str = "") -> AsyncIterator[list[ListEntry]]:
        """Yield every object under prefix as a single batch.

        The traversal is eager: all entries found by one call arrive in one
        batch, in directory-traversal order (not sorted). Nothing is yielded
        when the prefix does not exist or holds no objects. Each call starts
        a fresh traversal.

        Example:
            async for batch in store.list("some/prefix"):
                for entry in batch:
                    print(entry.key, entry.size)
        """
        entries = await self._list_entries(prefix)
        if entries:
            yield entries

    @traced_store_operation("list")
    async def _list_entries(self, prefix: str) -> list[ListEntry]:
        target = self._paths.resolve_prefix(prefix)
        return await self._run_blocking(prefix, self._scan_sync, prefix, target)

    def _entry_for(self, path: Path, st: os.stat_result) -> ListEntry:
        return ListEntry(
            key=self._paths.relative_key(path),
            last_modified=datetime.fromtimestamp(st.st_mtime, tz=UTC),
            size=st.st_size,
        )

    @staticmethod
    def _is_listable(name: str) -> bool:
        return not is_metadata_name(name) and not is_temp_artifact_name(name)

    def _scan_sync(self, prefix: str, target: Path) -> list[ListEntry]:
        """Collect the listable files under target, depth first."""
        self._paths.ensure_within_bucket(target, prefix)
        try:
            st = target.stat()
        except (FileNotFoundError, NotADirectoryError):
            return []
        except OSError as e:
            raise StorageBackendError(
                message=f"Failed to stat listing prefix: {e.strerror or e}",
                cause=e,
            ) from e

        if stat.S_ISREG(st.st_mode):
            if self._is_listable(target.name):
                return [self._entry_for(target, st)]
            return []
        if not stat.S_ISDIR(st.st_mode):
            return []

        results: list[ListEntry] = []
        self._walk(target, results)
        return results

    def _walk(self, directory: Path, results: list[ListEntry]) -> None:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except FileNotFoundError:
            # Removed while the traversal was running.
            return
        except OSError as e:
            raise StorageBackendError(
                message=f"Failed to read directory: {e.strerror or e}",
                cause=e,
            ) from e

        for entry in entries:
            path = directory / entry.name
            if entry.is_dir(follow_symlinks=False):
                self._walk(path, results)
            elif entry.is_file(follow_symlinks=False) and self._is_listable(entry.name):
                try:
                    st = entry.stat(follow_symlinks=False)
                except FileNotFoundError:
                    continue
                results.append(self._entry_for(path, st))

    async def create_bucket(self) -> None:
        """Buckets are plain directories created on first write."""
        raise UnsupportedBucketOperationError(
            message="create_bucket is not supported; buckets are created on first write",
            bucket=self._bucket,
            operation="create_bucket",
        )

    async def delete_bucket(self) -> None:
        """Bucket directories are owned by the caller, not the store."""
        raise UnsupportedBucketOperationError(
            message="delete_bucket is not supported; remove the bucket directory instead",
            bucket=self._bucket,
            operation="delete_bucket",
        )


def create_s3_store(bucket: str, *, root_dir: str | Path | None = None) -> FilesystemObjectStore:
    """Create a filesystem-backed store bound to bucket.

    Args:
        bucket: Bucket name.
        root_dir: Folder holding bucket directories (see FilesystemObjectStore).
    """
    return FilesystemObjectStore(bucket, root_dir=root_dir)
