"""Environment-driven settings for s3mock.

Environment Variables:
    S3MOCK_ROOT_DIR: Root folder holding one directory per bucket
        (default: ./.s3StoreMock in the current working directory)
    S3MOCK_OTEL_ENABLED: Set to "1" to emit OpenTelemetry spans
    See s3mock.observability.tracing for the remaining S3MOCK_OTEL_* settings.
"""

from __future__ import annotations

import os
from pathlib import Path

S3MOCK_ROOT_DIR_ENV = "S3MOCK_ROOT_DIR"
DEFAULT_ROOT_DIR_NAME = ".s3StoreMock"


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    val = os.environ.get(key, "").strip().lower()
    if val in ("1", "true", "yes"):
        return True
    if val in ("0", "false", "no"):
        return False
    return default


def get_env_str(key: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default).strip()


def resolve_root_dir(root_dir: str | Path | None = None) -> Path:
    """Resolve the storage root folder.

    Precedence: explicit argument, then S3MOCK_ROOT_DIR, then
    ``.s3StoreMock`` under the current working directory. Relative paths are
    anchored at the current working directory.
    """
    if root_dir is None:
        root_dir = get_env_str(S3MOCK_ROOT_DIR_ENV) or None

    if root_dir is None:
        root = Path.cwd() / DEFAULT_ROOT_DIR_NAME
    else:
        root = Path(root_dir).expanduser()
        if not root.is_absolute():
            root = Path.cwd() / root

    return root.resolve()
