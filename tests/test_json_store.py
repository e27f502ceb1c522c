"""Tests for the JSON document wrapper."""

from __future__ import annotations

import json

import pytest

from s3mock.storage.errors import KeyExistsError, ObjectNotFoundError, StaleDataError
from s3mock.storage.etag import compute_etag
from s3mock.storage.filesystem_store import FilesystemObjectStore
from s3mock.storage.json_store import JsonObjectStore, create_json_wrapper


@pytest.fixture
def docs(store: FilesystemObjectStore) -> JsonObjectStore:
    return create_json_wrapper(store)


class TestJsonObjectStore:
    """Tests for JsonObjectStore."""

    def test_properties(self, docs: JsonObjectStore, store: FilesystemObjectStore) -> None:
        assert docs.bucket == store.bucket
        assert docs.backend_name == "json:filesystem"

    @pytest.mark.asyncio
    async def test_create_and_get(self, docs: JsonObjectStore) -> None:
        etag = await docs.create_object("users/1", {"name": "ada", "langs": ["en"]})

        assert etag == compute_etag(json.dumps({"name": "ada", "langs": ["en"]}).encode())
        assert await docs.get_object("users/1") == {"name": "ada", "langs": ["en"]}

    @pytest.mark.asyncio
    async def test_stored_as_utf8_json(
        self, docs: JsonObjectStore, store: FilesystemObjectStore
    ) -> None:
        await docs.create_object("doc", {"city": "Zürich"})

        raw = await store.get_object("doc")
        assert raw.content_type == "application/json"
        assert raw.as_bytes() == '{"city": "Zürich"}'.encode()

    @pytest.mark.asyncio
    async def test_get_with_etag_then_conditional_update(self, docs: JsonObjectStore) -> None:
        await docs.create_object("counter", {"n": 1})

        value, etag = await docs.get_object_with_etag("counter")
        assert etag is not None
        new_etag = await docs.put_object_if_match("counter", {"n": value["n"] + 1}, etag)

        assert await docs.get_object_if_match("counter", new_etag) == {"n": 2}
        with pytest.raises(StaleDataError):
            await docs.put_object_if_match("counter", {"n": 99}, etag)

    @pytest.mark.asyncio
    async def test_errors_pass_through(self, docs: JsonObjectStore) -> None:
        await docs.create_object("k", [1, 2, 3])

        with pytest.raises(KeyExistsError):
            await docs.create_object("k", [])
        with pytest.raises(ObjectNotFoundError):
            await docs.get_object("missing")

    @pytest.mark.asyncio
    async def test_unserializable_value_raises_type_error(self, docs: JsonObjectStore) -> None:
        with pytest.raises(TypeError):
            await docs.create_object("bad", {"s": {1, 2}})

        with pytest.raises(ObjectNotFoundError):
            await docs.get_object("bad")

    @pytest.mark.asyncio
    async def test_delete_and_list(self, docs: JsonObjectStore) -> None:
        etag = await docs.create_object("a/1", None)
        await docs.create_object("a/2", "two")

        response = await docs.delete_object_if_match("a/1", etag)
        assert response.etag is None
        await docs.delete_object("a/2")
        await docs.delete_object("a/2")

        assert [batch async for batch in docs.list("a")] == []
