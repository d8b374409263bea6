"""
Object storage client for the gateway.

Supports AWS S3 and S3-compatible services (MinIO, Cloudflare R2, ...)
through boto3, with a mock mode for local development.

The gateway only ever reads: one object per request, opened by key and
streamed back to the client. Every opened object is owned by exactly one
request and must be closed exactly once, whichever way the request ends.

Mock mode keeps objects in memory, enabling API testing without
provisioning actual object storage.
"""

import asyncio
import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional, Protocol

logger = logging.getLogger(__name__)

# Error codes S3 (and compatible services) use for a missing key.
NOT_FOUND_ERROR_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


class ObjectNotFoundError(StorageError):
    """Raised when the requested key does not exist in the bucket."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Object not found: {key}")
        self.key = key


@dataclass
class StorageConfig:
    """
    Configuration for S3-compatible storage.

    Credentials are not part of the config: they come from boto3's
    ambient chain (environment, shared config files, instance role).
    """
    bucket_name: str
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None


class StoredObject:
    """
    An opened object, ready to be streamed.

    Wraps the store's readable body. close() is idempotent, so every exit
    path may call it and the body is still released only once.
    """

    def __init__(
        self,
        key: str,
        body: BinaryIO,
        content_length: Optional[int] = None,
    ) -> None:
        self.key = key
        self.content_length = content_length
        self._body = body
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes; returns b"" at end of object."""
        return self._body.read(size)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._body.close()
        logger.debug("Closed object stream", extra={"key": self.key})


class ObjectStore(Protocol):
    """
    Protocol for the object storage the gateway reads from.

    Using a protocol means tests can provide an in-memory store and the
    HTTP layer never touches boto3 directly.
    """

    async def open_object(self, key: str) -> StoredObject:
        """
        Open the object stored under key.

        Raises ObjectNotFoundError if the key does not exist and
        StorageError for any other failure.
        """
        ...


class S3ObjectStore:
    """
    S3 object store bound to a single bucket.

    boto3 is synchronous, so blocking calls run in a worker thread to keep
    the event loop free for other requests. The boto3 client itself is
    thread-safe and shared by all requests.
    """

    def __init__(self, config: StorageConfig, s3_client=None) -> None:
        """
        Initialize the S3 client.

        Fails fast with StorageError when no credentials can be resolved,
        so a misconfigured deployment never starts listening. An existing
        client may be passed in (tests use a stubbed one).
        """
        self._config = config

        if s3_client is None:
            s3_client = self._build_client(config)

        self._s3_client = s3_client

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "region": config.region,
                "endpoint": config.endpoint_url,
            }
        )

    @staticmethod
    def _build_client(config: StorageConfig):
        import boto3
        from botocore.config import Config

        session = boto3.session.Session(region_name=config.region)
        if session.get_credentials() is None:
            raise StorageError(
                "No AWS credentials found. Set AWS_ACCESS_KEY_ID and "
                "AWS_SECRET_ACCESS_KEY or configure a profile."
            )

        # Custom endpoints (MinIO, R2) generally need path-style addressing
        boto_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path" if config.endpoint_url else "auto"},
        )

        return session.client(
            "s3",
            endpoint_url=config.endpoint_url,
            config=boto_config,
        )

    @property
    def bucket_name(self) -> str:
        return self._config.bucket_name

    async def open_object(self, key: str) -> StoredObject:
        """Open an object for streaming via GetObject."""
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            response = await asyncio.to_thread(
                self._s3_client.get_object,
                Bucket=self._config.bucket_name,
                Key=key,
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in NOT_FOUND_ERROR_CODES:
                raise ObjectNotFoundError(key) from e
            raise StorageError(f"Download failed: {e}") from e
        except BotoCoreError as e:
            # includes parameter validation, e.g. an unset bucket name
            raise StorageError(f"Download failed: {e}") from e

        return StoredObject(
            key=key,
            body=response["Body"],
            content_length=response.get("ContentLength"),
        )


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockObjectStore:
    """
    In-memory object store for local development and tests.

    Keeps every object it hands out in `opened` so tests can check that
    each stream was released.
    """

    def __init__(self, objects: Optional[dict[str, bytes]] = None) -> None:
        self._objects: dict[str, bytes] = dict(objects or {})
        self.opened: list[StoredObject] = []
        logger.info("Initialized mock storage client (in-memory)")

    def put_object(self, key: str, data: bytes) -> None:
        """Store an object in memory."""
        self._objects[key] = data

    async def open_object(self, key: str) -> StoredObject:
        """Open an object from memory."""
        if key not in self._objects:
            raise ObjectNotFoundError(key)

        data = self._objects[key]
        stored = StoredObject(key=key, body=io.BytesIO(data), content_length=len(data))
        self.opened.append(stored)
        return stored


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_object_store(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStore:
    """
    Create the object store based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return an empty in-memory store

    Returns:
        ObjectStore implementation (S3 or Mock)
    """
    if mock_mode:
        return MockObjectStore()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3ObjectStore(config)
