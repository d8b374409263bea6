"""
Gateway configuration using Pydantic settings.

Configuration comes from environment variables (and CLI flags) with
the same defaults as the command line flags.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
