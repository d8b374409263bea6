"""
Gateway endpoint: every request path is served from the bucket.

Per request, strictly in order:
1. Basic auth check (only when credentials are configured)
2. Object key derivation from the configured prefix and request path
3. Object fetch from the store
4. Streaming the object back with a Content-Type from its extension

Method is not checked; every method behaves like GET and request bodies
are ignored.
"""

import asyncio
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from ...core.auth import challenge_header
from ...core.keys import derive_object_key, guess_content_type
from ...infrastructure.storage.client import ObjectNotFoundError, StorageError, StoredObject
from ..dependencies import ObjectStoreDep, SettingsDep, verify_basic_auth

logger = logging.getLogger(__name__)

router = APIRouter()

GATEWAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

# Bytes read from the store per chunk
CHUNK_SIZE = 64 * 1024


async def iter_object_chunks(
    stored: StoredObject,
    chunk_size: int = CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """
    Stream an object in chunks, closing it however the stream ends.

    Reads run in a worker thread because store bodies (boto3's
    StreamingBody) block. If the client disconnects the generator is
    cancelled and the finally clause still releases the body.
    """
    try:
        while True:
            chunk = await asyncio.to_thread(stored.read, chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        stored.close()


@router.api_route(
    "/{object_path:path}",
    methods=GATEWAY_METHODS,
    dependencies=[Depends(verify_basic_auth)],
    include_in_schema=False,
)
async def serve_object(
    object_path: str,
    request: Request,
    settings: SettingsDep,
    store: ObjectStoreDep,
) -> Response:
    """
    Serve the object the request path maps to.

    Returns 404 when the store can't provide the object. Missing keys and
    backend failures both end up here; only the server log tells them
    apart. The WWW-Authenticate challenge is attached to the 404 as well,
    whether or not auth is enabled, which existing clients rely on.
    """
    # Decoded path straight from the scope; request.url re-parses it and
    # would cut a decoded "?" or "#" off as query or fragment
    path = request.scope["path"]
    key = derive_object_key(settings.prefix, path, settings.index_file)

    if settings.verbose:
        logger.info("> %s => s3://%s/%s", path, settings.bucket, key)

    try:
        stored = await store.open_object(key)
    except ObjectNotFoundError:
        logger.debug("Object not found", extra={"path": path, "key": key})
        return Response(
            status_code=status.HTTP_404_NOT_FOUND,
            headers=challenge_header(settings.realm),
        )
    except StorageError as e:
        logger.warning(
            "Object fetch failed",
            extra={"path": path, "key": key, "error": str(e)}
        )
        return Response(
            status_code=status.HTTP_404_NOT_FOUND,
            headers=challenge_header(settings.realm),
        )

    headers = {"Cache-Control": f"max-age={settings.max_age}"}

    content_type = guess_content_type(key)
    if content_type:
        headers["Content-Type"] = content_type

    if stored.content_length is not None:
        headers["Content-Length"] = str(stored.content_length)

    return StreamingResponse(
        iter_object_chunks(stored),
        status_code=status.HTTP_200_OK,
        headers=headers,
        background=BackgroundTask(stored.close),
    )
