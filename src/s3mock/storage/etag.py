"""Content etag calculation.

Etags are the MD5 digest of the exact object bytes, as lowercase hex wrapped
in double quotes, which is the form S3 returns for single-part uploads.
"""

from __future__ import annotations

import hashlib


def compute_etag(content: bytes) -> str:
    """Compute the quoted MD5 etag of content.

    Deterministic across processes and runs. Empty content is valid.
    """
    # Not used for security, only as a content fingerprint.
    digest = hashlib.md5(content, usedforsecurity=False).hexdigest()
    return f'"{digest}"'


def etags_match(expected: str | None, current: str | None) -> bool:
    """Return True if a caller-supplied etag matches the stored one.

    A missing stored etag never matches.
    """
    if current is None or expected is None:
        return False
    return expected == current
