"""Sidecar metadata persistence.

Each object's etag and content type are stored as compact UTF-8 JSON in
``<key>.meta`` next to the data file. A missing or unparsable sidecar reads
as "no metadata"; it is a tolerated state, not an error.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from s3mock.storage import fileio
from s3mock.storage.models import ObjectMetadata

logger = logging.getLogger(__name__)


def read_metadata(meta_path: Path) -> ObjectMetadata | None:
    """Read the sidecar record at meta_path.

    Returns:
        The parsed record, or None if the sidecar is absent or unparsable.

    Raises:
        StorageBackendError: If the sidecar exists but cannot be read.
    """
    raw = fileio.read_bytes(meta_path)
    if raw is None:
        return None
    try:
        return ObjectMetadata.from_json(raw)
    except ValidationError as e:
        logger.warning(
            "Ignoring unparsable metadata %s: %d validation error(s)",
            meta_path.name,
            e.error_count(),
        )
        return None


def write_metadata(meta_path: Path, metadata: ObjectMetadata) -> None:
    """Write the sidecar record, creating parent directories as needed."""
    fileio.atomic_write(meta_path, metadata.to_json().encode("utf-8"))
