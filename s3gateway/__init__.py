"""
s3gateway - serve the contents of an S3 bucket over HTTP.

This package contains the complete application:
- core: Framework-agnostic key derivation and Basic auth
- infrastructure: Object storage (S3) integration
- api: FastAPI routes and dependencies
- config: Application configuration
- cli: Command line entry point
"""

__version__ = "0.1.0"
