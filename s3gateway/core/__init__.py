"""
Core gateway logic: request-to-key translation and Basic auth checks.

This package is framework-agnostic - it doesn't import FastAPI or boto3,
so the translation rules can be tested in isolation.
"""

from .auth import BasicCredentials, challenge_header, credentials_match, parse_basic_authorization
from .keys import collapse_slashes, derive_object_key, guess_content_type

__all__ = [
    "BasicCredentials",
    "challenge_header",
    "collapse_slashes",
    "credentials_match",
    "derive_object_key",
    "guess_content_type",
    "parse_basic_authorization",
]
