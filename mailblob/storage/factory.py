from __future__ import annotations

from mailblob.core.config import Settings, get_settings
from mailblob.models.enums import BlobStoreBackend
from mailblob.storage.base import BlobStore
from mailblob.storage.local import LocalBlobStore
from mailblob.storage.memory import InMemoryBlobStore
from mailblob.storage.s3 import S3BlobStore, S3Config


def build_blob_store(settings: Settings | None = None) -> BlobStore:
    settings = settings or get_settings()
    common = {"hash_name": settings.BLOBREF_HASH, "chunk_size": settings.BLOB_CHUNK_SIZE}
    if settings.BLOB_STORE == BlobStoreBackend.local:
        return LocalBlobStore(settings.LOCAL_BLOB_DIR, **common)
    if settings.BLOB_STORE == BlobStoreBackend.s3:
        return S3BlobStore(
            S3Config(
                endpoint_url=settings.S3_ENDPOINT_URL,
                access_key_id=settings.S3_ACCESS_KEY_ID,
                secret_access_key=settings.S3_SECRET_ACCESS_KEY,
                bucket=settings.S3_BUCKET,
                key_prefix=settings.S3_KEY_PREFIX,
            ),
            **common,
        )
    if settings.BLOB_STORE == BlobStoreBackend.memory:
        return InMemoryBlobStore(**common)
    raise ValueError(f"Unsupported BLOB_STORE: {settings.BLOB_STORE}")
