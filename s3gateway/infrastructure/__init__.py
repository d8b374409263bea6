"""
Infrastructure layer - external service integrations.

- storage: Object storage (S3 and S3-compatible)

These wrappers translate between boto3 and the gateway's own types.
"""
