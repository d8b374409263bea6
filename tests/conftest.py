"""
Shared fixtures.

Every test runs with the gateway's environment variables cleared and
from an empty working directory, so neither the host environment nor a
stray .env file leaks into Settings.
"""

import pytest

GATEWAY_ENV_VARS = [
    "PORT",
    "USERNAME",
    "PASSWORD",
    "REALM",
    "BUCKET",
    "PREFIX",
    "MAX_AGE",
    "VERBOSE",
    "INDEX",
    "INDEX_FILE",
    "REGION",
    "AWS_REGION",
    "ENDPOINT_URL",
    "S3_ENDPOINT_URL",
    "STORAGE_MOCK_MODE",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    for name in GATEWAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
