from __future__ import annotations

import pytest

from mailblob.core.config import get_settings
from mailblob.storage.memory import InMemoryBlobStore


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch) -> None:
    # Keep a developer's `.env` out of the test run.
    monkeypatch.chdir(tmp_path)
    for name in ("BLOB_STORE", "BLOBREF_HASH", "BLOB_CHUNK_SIZE", "ENCODE_MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOCAL_BLOB_DIR", str(tmp_path / "blobs"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def memory_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()
