"""JSON document wrapper over an ObjectStore.

Serializes Python values to UTF-8 JSON on the way in and parses them on the
way out. Conditional semantics, etags and errors all come from the wrapped
store unchanged.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any, cast

from s3mock.storage.models import ListEntry, ObjectResponse
from s3mock.storage.object_store import ObjectStore

JSON_CONTENT_TYPE = "application/json"


class JsonObjectStore:
    """Object store wrapper that stores JSON-serializable values.

    Example:
        docs = create_json_wrapper(store)
        etag = await docs.create_object("users/1", {"name": "ada"})
        user = await docs.get_object_if_match("users/1", etag)
    """

    def __init__(self, inner_store: ObjectStore) -> None:
        """Initialize the wrapper.

        Args:
            inner_store: The underlying object store implementation.
        """
        self._inner = inner_store

    @property
    def bucket(self) -> str:
        return self._inner.bucket

    @property
    def backend_name(self) -> str:
        return f"json:{self._inner.backend_name}"

    @staticmethod
    def _dumps(value: Any) -> bytes:
        return json.dumps(value, ensure_ascii=False).encode("utf-8")

    async def create_object(self, key: str, value: Any) -> str:
        """Store a new JSON document and return its etag.

        Raises:
            TypeError: If value is not JSON-serializable.
            KeyExistsError: If the key already exists.
        """
        response = await self._inner.create_object(key, self._dumps(value), JSON_CONTENT_TYPE)
        return cast(str, response.etag)

    async def put_object_if_match(self, key: str, value: Any, etag: str) -> str:
        """Replace a JSON document if its etag matches and return the new etag.

        Raises:
            StaleDataError: If the stored etag differs from etag.
        """
        response = await self._inner.put_object_if_match(
            key, self._dumps(value), etag, JSON_CONTENT_TYPE
        )
        return cast(str, response.etag)

    async def get_object(self, key: str) -> Any:
        """Return the parsed JSON document stored at key."""
        response = await self._inner.get_object(key)
        return response.as_json()

    async def get_object_with_etag(self, key: str) -> tuple[Any, str | None]:
        """Return the parsed document together with its current etag.

        Use the etag for a later put_object_if_match or delete_object_if_match.
        """
        response = await self._inner.get_object(key)
        return response.as_json(), response.etag

    async def get_object_if_match(self, key: str, etag: str) -> Any:
        """Return the parsed document if its etag matches.

        Raises:
            ObjectNotFoundError: If the key does not exist.
            StaleDataError: If the stored etag differs from etag.
        """
        response = await self._inner.get_object_if_match(key, etag)
        return response.as_json()

    async def delete_object(self, key: str) -> ObjectResponse:
        return await self._inner.delete_object(key)

    async def delete_object_if_match(self, key: str, etag: str) -> ObjectResponse:
        return await self._inner.delete_object_if_match(key, etag)

    def list(self, prefix: str = "") -> AsyncIterator[list[ListEntry]]:
        return self._inner.list(prefix)


def create_json_wrapper(store: ObjectStore) -> JsonObjectStore:
    """Wrap store so it reads and writes JSON documents."""
    return JsonObjectStore(store)
