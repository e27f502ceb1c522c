"""Tests for OpenTelemetry tracing of store operations.

- Tracing OFF by default, ON via S3MOCK_OTEL_ENABLED=1
- Fail-closed only when S3MOCK_REQUIRE_OTEL=1 and init fails
- One span per operation with bucket, hashed key and result fingerprints
- Raw keys and filesystem paths never appear in span attributes
- Tests use the in-memory exporter (no external collector required)
"""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from s3mock.observability.tracing import (
    TracingConfigError,
    TracingSettings,
    _parse_resource_attrs,
    configure_tracing,
    get_test_spans,
    reset_tracing,
)
from s3mock.storage.errors import StaleDataError
from s3mock.storage.filesystem_store import FilesystemObjectStore

_ENV_VARS = [
    "S3MOCK_OTEL_ENABLED",
    "S3MOCK_REQUIRE_OTEL",
    "S3MOCK_OTEL_SERVICE_NAME",
    "S3MOCK_OTEL_EXPORTER",
    "S3MOCK_OTEL_TEST_CAPTURE",
    "S3MOCK_OTEL_EXPORTER_OTLP_ENDPOINT",
    "S3MOCK_OTEL_EXPORTER_OTLP_PROTOCOL",
    "S3MOCK_OTEL_RESOURCE_ATTRS",
]


@pytest.fixture(autouse=True)
def reset_tracing_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Reset tracing environment and state around each test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_tracing()
    yield
    reset_tracing()


@pytest.fixture
def capture(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable tracing with the in-memory exporter."""
    monkeypatch.setenv("S3MOCK_OTEL_ENABLED", "1")
    monkeypatch.setenv("S3MOCK_OTEL_TEST_CAPTURE", "1")
    assert configure_tracing() is True


def _key_hash(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


class TestTracingConfiguration:
    """Tests for tracing configuration behavior."""

    def test_tracing_disabled_by_default(self) -> None:
        assert configure_tracing() is False
        assert get_test_spans() == []

    def test_tracing_enabled_with_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3MOCK_OTEL_ENABLED", "1")
        monkeypatch.setenv("S3MOCK_OTEL_TEST_CAPTURE", "1")

        assert configure_tracing() is True

    def test_tracing_idempotent(self, capture: None) -> None:
        assert configure_tracing() is True
        assert configure_tracing() is True

    def test_require_otel_fails_closed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """S3MOCK_REQUIRE_OTEL=1 turns an init failure into an error."""
        monkeypatch.setenv("S3MOCK_OTEL_ENABLED", "1")
        monkeypatch.setenv("S3MOCK_REQUIRE_OTEL", "1")

        with (
            patch("opentelemetry.sdk.resources.Resource.create", side_effect=RuntimeError("boom")),
            patch("s3mock.observability.tracing._provider_installed", False),
            pytest.raises(TracingConfigError),
        ):
            configure_tracing()

    def test_init_failure_without_require_returns_false(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("S3MOCK_OTEL_ENABLED", "1")

        with (
            patch("opentelemetry.sdk.resources.Resource.create", side_effect=RuntimeError("boom")),
            patch("s3mock.observability.tracing._provider_installed", False),
        ):
            assert configure_tracing() is False

    def test_parse_resource_attrs(self) -> None:
        assert _parse_resource_attrs("") == {}
        assert _parse_resource_attrs("env=dev, team = storage,broken") == {
            "env": "dev",
            "team": "storage",
        }

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("S3MOCK_OTEL_SERVICE_NAME", "store-tests")
        monkeypatch.setenv("S3MOCK_OTEL_EXPORTER", "console")
        monkeypatch.setenv("S3MOCK_OTEL_RESOURCE_ATTRS", "env=ci")

        settings = TracingSettings.from_env()

        assert settings.service_name == "store-tests"
        assert settings.exporter_label == "console"
        assert settings.otlp_endpoint is None
        assert settings.otlp_protocol == "http"
        assert settings.resource_attrs == {"env": "ci"}
        assert settings.require is False


class TestStoreSpans:
    """Spans emitted by FilesystemObjectStore operations."""

    @pytest.mark.asyncio
    async def test_no_spans_when_disabled(self, store: FilesystemObjectStore) -> None:
        await store.create_object("k", "v")

        assert get_test_spans() == []

    @pytest.mark.asyncio
    async def test_create_span_attributes(
        self, capture: None, store: FilesystemObjectStore
    ) -> None:
        response = await store.create_object("secret/key", "hello", "text/plain")

        [span] = get_test_spans()
        assert span.name == "s3mock.object_store.create_object"
        attrs = dict(span.attributes or {})
        assert attrs["s3mock.bucket"] == store.bucket
        assert attrs["s3mock.object_key_sha256"] == _key_hash("secret/key")
        assert attrs["storage.backend"] == "filesystem"
        assert attrs["s3mock.object_etag"] == response.etag
        assert attrs["s3mock.object_content_type"] == "text/plain"

    @pytest.mark.asyncio
    async def test_get_span_records_size(
        self, capture: None, store: FilesystemObjectStore
    ) -> None:
        await store.create_object("k", "hello")
        await store.get_object("k")

        spans = get_test_spans()
        assert [s.name for s in spans] == [
            "s3mock.object_store.create_object",
            "s3mock.object_store.get_object",
        ]
        assert spans[1].attributes["s3mock.object_size_bytes"] == 5

    @pytest.mark.asyncio
    async def test_error_span(self, capture: None, store: FilesystemObjectStore) -> None:
        await store.create_object("k", "v")

        with pytest.raises(StaleDataError):
            await store.put_object_if_match("k", "w", '"nope"')

        span = get_test_spans()[-1]
        assert span.name == "s3mock.object_store.put_object_if_match"
        assert span.attributes["error"] is True
        assert span.attributes["error.type"] == "StaleDataError"

    @pytest.mark.asyncio
    async def test_list_span_counts_entries(
        self, capture: None, store: FilesystemObjectStore
    ) -> None:
        await store.create_object("a/1", "1")
        await store.create_object("a/2", "2")

        [batch] = [b async for b in store.list("a")]

        span = get_test_spans()[-1]
        assert span.name == "s3mock.object_store.list"
        assert span.attributes["s3mock.object_count"] == len(batch) == 2

    @pytest.mark.asyncio
    async def test_no_raw_keys_or_paths_in_spans(
        self, capture: None, store: FilesystemObjectStore, root_dir: Path
    ) -> None:
        key = "customers/alice/profile.json"
        await store.create_object(key, "{}")
        await store.get_object(key)
        await store.delete_object(key)

        for span in get_test_spans():
            for value in (span.attributes or {}).values():
                text = str(value)
                assert key not in text
                assert "alice" not in text
                assert str(root_dir) not in text
                assert os.sep + store.bucket + os.sep not in text
