"""
Object storage integration for served files.

Supports S3 and S3-compatible services via boto3.
Includes mock mode for local development without credentials.
"""

from .client import (
    MockObjectStore,
    ObjectNotFoundError,
    ObjectStore,
    S3ObjectStore,
    StorageConfig,
    StorageError,
    StoredObject,
    create_object_store,
)

__all__ = [
    "MockObjectStore",
    "ObjectNotFoundError",
    "ObjectStore",
    "S3ObjectStore",
    "StorageConfig",
    "StorageError",
    "StoredObject",
    "create_object_store",
]
