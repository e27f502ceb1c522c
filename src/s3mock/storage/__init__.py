"""s3mock object storage.

Provides a single-bucket, S3-style object store on the local file system
with content etags and If-Match style optimistic concurrency.

Environment Variables:
    S3MOCK_ROOT_DIR: Root folder for bucket directories
        (default: ./.s3StoreMock in the current working directory)
"""

from s3mock.storage.errors import (
    InvalidBucketNameError,
    InvalidKeyError,
    KeyExistsError,
    ObjectNotFoundError,
    ObjectStorageError,
    PathTraversalError,
    StaleDataError,
    StorageBackendError,
    UnsupportedBucketOperationError,
)
from s3mock.storage.etag import compute_etag
from s3mock.storage.filesystem_store import FilesystemObjectStore, create_s3_store
from s3mock.storage.json_store import JsonObjectStore, create_json_wrapper
from s3mock.storage.models import (
    GetObjectResponse,
    ListEntry,
    ObjectMetadata,
    ObjectResponse,
)
from s3mock.storage.object_store import ObjectStore

__all__ = [
    "ObjectStore",
    "FilesystemObjectStore",
    "JsonObjectStore",
    "create_s3_store",
    "create_json_wrapper",
    "compute_etag",
    "ObjectMetadata",
    "ObjectResponse",
    "GetObjectResponse",
    "ListEntry",
    "ObjectStorageError",
    "KeyExistsError",
    "StaleDataError",
    "ObjectNotFoundError",
    "UnsupportedBucketOperationError",
    "InvalidKeyError",
    "InvalidBucketNameError",
    "PathTraversalError",
    "StorageBackendError",
]
