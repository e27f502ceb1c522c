"""s3mock object storage data models.

ObjectMetadata is the persisted sidecar record and is validated with Pydantic
on every read. The response and listing types are plain frozen dataclasses.
"""

from __future__ import annotations

import io
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CONTENT_TYPE = "application/json"


class ObjectMetadata(BaseModel):
    """Sidecar metadata persisted next to each object.

    Serialized as compact UTF-8 JSON with the wire field names
    ``{"etag": ..., "contentType": ...}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    etag: str = Field(..., min_length=1)
    content_type: str = Field(default=DEFAULT_CONTENT_TYPE, alias="contentType")

    def to_json(self) -> str:
        """Serialize to the on-disk JSON form."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> ObjectMetadata:
        """Parse the on-disk JSON form.

        Raises:
            pydantic.ValidationError: If the payload is not a valid record.
        """
        return cls.model_validate_json(raw)


@dataclass(frozen=True)
class ObjectResponse:
    """Result of a create, update or delete.

    Attributes:
        etag: Etag of the stored content. None for deletes.
        content_type: Content type recorded with the object, if any.
    """

    etag: str | None
    content_type: str | None = None

    @property
    def response(self) -> dict[str, str]:
        """Raw response view, mirroring the wire shape."""
        if self.etag is None:
            return {}
        result = {"etag": self.etag}
        if self.content_type is not None:
            result["contentType"] = self.content_type
        return result


@dataclass(frozen=True)
class GetObjectResponse:
    """Object content returned by get_object / get_object_if_match.

    ``etag`` is None when the object's metadata is missing or unreadable;
    the content is still served in that case.
    """

    body: bytes = field(repr=False)
    etag: str | None
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.body)

    def as_string(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)

    def as_bytes(self) -> bytes:
        return self.body

    def as_stream(self) -> io.BytesIO:
        """Return a fresh binary stream positioned at the start of the body."""
        return io.BytesIO(self.body)

    def as_json(self) -> Any:
        """Parse the body as UTF-8 JSON.

        Raises:
            json.JSONDecodeError: If the body is not valid JSON.
        """
        return json.loads(self.as_string())


@dataclass(frozen=True)
class ListEntry:
    """One object discovered by a listing.

    Attributes:
        key: Key relative to the bucket, always with forward slashes.
        last_modified: File modification time (UTC).
        size: Content size in bytes.
    """

    key: str
    last_modified: datetime
    size: int

    def to_dict(self) -> dict[str, str | int]:
        """Convert to the S3-style listing dict for JSON serialization."""
        return {
            "Key": self.key,
            "LastModified": self.last_modified.isoformat(),
            "Size": self.size,
        }
