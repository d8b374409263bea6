"""
HTTP Basic Authentication for a single configured credential pair.

Framework-agnostic on purpose: the API layer passes in the raw
Authorization header and turns a failed check into a 401 challenge.
"""

import base64
import binascii
import hmac
from dataclasses import dataclass
from typing import Optional

BASIC_SCHEME = "Basic "


@dataclass(frozen=True)
class BasicCredentials:
    """Username and password supplied by a client."""
    username: str
    password: str


def parse_basic_authorization(header: Optional[str]) -> Optional[BasicCredentials]:
    """
    Extract credentials from an Authorization header value.

    The scheme name is matched case-insensitively, the token must be
    standard (padded) base64, and the decoded text is split at the first
    colon, so passwords may contain colons. Returns None for a missing
    or malformed header.
    """
    if not header or len(header) < len(BASIC_SCHEME):
        return None

    if header[:len(BASIC_SCHEME)].lower() != BASIC_SCHEME.lower():
        return None

    try:
        decoded = base64.b64decode(header[len(BASIC_SCHEME):], validate=True)
        text = decoded.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, separator, password = text.partition(":")
    if not separator:
        return None

    return BasicCredentials(username=username, password=password)


def credentials_match(
    supplied: Optional[BasicCredentials],
    username: str,
    password: str,
) -> bool:
    """
    Exact, case-sensitive comparison of both fields.

    Both comparisons always run so the time taken does not reveal which
    field was wrong.
    """
    if supplied is None:
        return False

    username_ok = hmac.compare_digest(supplied.username.encode("utf-8"), username.encode("utf-8"))
    password_ok = hmac.compare_digest(supplied.password.encode("utf-8"), password.encode("utf-8"))
    return username_ok and password_ok


def challenge_header(realm: str) -> dict[str, str]:
    """WWW-Authenticate header asking the client for Basic credentials."""
    return {"WWW-Authenticate": f'Basic realm="{realm}"'}
