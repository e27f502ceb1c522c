"""s3mock object store interface definition.

Provides the ObjectStore abstract base class that storage backends implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from s3mock.storage.models import (
    DEFAULT_CONTENT_TYPE,
    GetObjectResponse,
    ListEntry,
    ObjectResponse,
)

Body = bytes | bytearray | memoryview | str


class ObjectStore(ABC):
    """Abstract base class for single-bucket object stores.

    All implementations provide:
    - Content-derived etags (quoted MD5 hex)
    - Optimistic concurrency via *_if_match operations
    - Create-only semantics for create_object
    - Idempotent deletes

    Implementations:
    - FilesystemObjectStore: Local filesystem
    """

    @property
    @abstractmethod
    def bucket(self) -> str:
        """Return the bucket this store is bound to."""
        ...

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier for observability."""
        ...

    @abstractmethod
    async def create_object(
        self,
        key: str,
        body: Body,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> ObjectResponse:
        """Create a new object.

        Args:
            key: Object key.
            body: Object content. Strings are stored UTF-8 encoded.
            content_type: MIME type recorded with the object.

        Returns:
            ObjectResponse carrying the etag of the stored content.

        Raises:
            KeyExistsError: If the key already has data. Nothing is written.
            InvalidKeyError: If the key cannot be stored safely.
            StorageBackendError: If the backend cannot complete the write.
        """
        ...

    @abstractmethod
    async def put_object_if_match(
        self,
        key: str,
        body: Body,
        etag: str,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> ObjectResponse:
        """Replace an object if its current etag equals ``etag``.

        Returns:
            ObjectResponse carrying the etag of the new content.

        Raises:
            StaleDataError: If the object has no metadata or a different etag.
                Nothing is written.
            InvalidKeyError: If the key cannot be stored safely.
            StorageBackendError: If the backend cannot complete the write.
        """
        ...

    @abstractmethod
    async def get_object(self, key: str) -> GetObjectResponse:
        """Read an object.

        The response etag is None if the object's metadata is missing.

        Raises:
            ObjectNotFoundError: If the key has no data.
            StorageBackendError: If the backend cannot complete the read.
        """
        ...

    @abstractmethod
    async def get_object_if_match(self, key: str, etag: str) -> GetObjectResponse:
        """Read an object if its current etag equals ``etag``.

        Raises:
            ObjectNotFoundError: If the key has no data (checked first).
            StaleDataError: If the object has no metadata or a different etag.
        """
        ...

    @abstractmethod
    async def delete_object(self, key: str) -> ObjectResponse:
        """Delete an object. Deleting a missing key succeeds.

        Returns:
            ObjectResponse whose etag is None.

        Raises:
            StorageBackendError: If a file exists but cannot be removed.
        """
        ...

    @abstractmethod
    async def delete_object_if_match(self, key: str, etag: str) -> ObjectResponse:
        """Delete an object if its current etag equals ``etag``.

        Raises:
            StaleDataError: If the object has no metadata or a different etag.
        """
        ...

    @abstractmethod
    def list(self, prefix: str = "") -> AsyncIterator[list[ListEntry]]:
        """Iterate over batches of objects under prefix.

        Each call performs a fresh traversal. An empty or missing prefix
        yields no batches.
        """
        ...
