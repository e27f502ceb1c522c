"""s3mock - an S3-style object store backed by the local file system."""

from s3mock.storage import (
    FilesystemObjectStore,
    GetObjectResponse,
    InvalidBucketNameError,
    InvalidKeyError,
    JsonObjectStore,
    KeyExistsError,
    ListEntry,
    ObjectNotFoundError,
    ObjectResponse,
    ObjectStorageError,
    ObjectStore,
    PathTraversalError,
    StaleDataError,
    StorageBackendError,
    UnsupportedBucketOperationError,
    create_json_wrapper,
    create_s3_store,
)

__version__ = "0.1.0"

__all__ = [
    "create_s3_store",
    "create_json_wrapper",
    "ObjectStore",
    "FilesystemObjectStore",
    "JsonObjectStore",
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
