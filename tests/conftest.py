import os

import pytest

_ISOLATED_PREFIXES = ("AWS_", "SQS_", "BLOCK_IP_")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep host credentials and notifier settings out of the tests."""
    for key in list(os.environ):
        if key.startswith(_ISOLATED_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("APP_ENV", "development")
