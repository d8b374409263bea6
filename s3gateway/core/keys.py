"""
Request path to object key translation.

The object store key space is flat and unrooted: keys never start with a
slash and never contain empty segments. These functions are pure so they
can be tested without a store or an HTTP stack.
"""

import mimetypes
import posixpath
from typing import Optional

DEFAULT_INDEX_FILE = "index.html"

# Archive types for hosts whose mime.types doesn't list them
COMPRESSED_TYPES = {
    ".gz": "application/gzip",
    ".bz2": "application/x-bzip2",
    ".xz": "application/x-xz",
    ".br": "application/x-brotli",
    ".zst": "application/zstd",
}


def collapse_slashes(path: str) -> str:
    """Collapse every run of consecutive slashes into a single slash."""
    while "//" in path:
        path = path.replace("//", "/")
    return path


def derive_object_key(
    prefix: str,
    request_path: str,
    index_file: str = DEFAULT_INDEX_FILE,
) -> str:
    """
    Derive the object key for a request path.

    Steps:
    1. Concatenate prefix and path (the path must not include the query).
    2. Collapse runs of slashes produced by the concatenation.
    3. Strip one leading slash.
    4. If the request path names a directory (trailing slash), append
       the index file.

    >>> derive_object_key("/p/", "/x")
    'p/x'
    >>> derive_object_key("", "/foo/")
    'foo/index.html'
    """
    key = collapse_slashes(f"{prefix}{request_path}")

    if key.startswith("/"):
        key = key[1:]

    if request_path.endswith("/"):
        key = key + index_file

    return key


def lookup_extension(extension: str) -> Optional[str]:
    """Type registered for an extension such as ".gz", or None."""
    if not mimetypes.inited:
        mimetypes.init()

    return (
        mimetypes.types_map.get(extension)
        or mimetypes.common_types.get(extension)
        or COMPRESSED_TYPES.get(extension)
    )


def guess_content_type(key: str) -> Optional[str]:
    """
    Infer a Content-Type from the key's extension.

    Only the last extension counts, so "site.tar.gz" is served as a gzip
    archive, not a tar archive. The extension is looked up in the type
    table directly (system mime.types files included) rather than through
    mimetypes.guess_type, which treats .gz, .xz and friends as encodings
    and reports no type for them. Text types get an explicit utf-8
    charset, matching what common server MIME tables send for .html,
    .css, .txt and friends. Returns None when the extension is unknown;
    no content sniffing is attempted.
    """
    _, extension = posixpath.splitext(key)
    if not extension:
        return None

    content_type = lookup_extension(extension) or lookup_extension(extension.lower())
    if content_type is None:
        return None

    if content_type.startswith("text/") and "charset" not in content_type:
        content_type = f"{content_type}; charset=utf-8"

    return content_type
