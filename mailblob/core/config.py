from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mailblob.models.blobref import DEFAULT_HASH, SUPPORTED_HASHES
from mailblob.models.enums import BlobStoreBackend


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    LOG_LEVEL: str = "INFO"

    BLOB_STORE: str = "local"  # "local", "s3" or "memory"
    LOCAL_BLOB_DIR: str = "var/blobs"
    S3_ENDPOINT_URL: str = "http://localhost:9000"
    S3_ACCESS_KEY_ID: str = "minio"
    S3_SECRET_ACCESS_KEY: str = "minioadmin"
    S3_BUCKET: str = "mailblob"
    S3_KEY_PREFIX: str = ""

    BLOBREF_HASH: str = DEFAULT_HASH
    BLOB_CHUNK_SIZE: int = 64 * 1024
    ENCODE_MAX_WORKERS: int = 1

    ENABLE_PROMETHEUS_METRICS: bool = False
    PROMETHEUS_METRICS_PORT: int = 9464

    @field_validator("BLOB_STORE")
    @classmethod
    def _validate_blob_store(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {b.value for b in BlobStoreBackend}:
            raise ValueError(f"Unsupported BLOB_STORE: {v}")
        return v

    @field_validator("BLOBREF_HASH")
    @classmethod
    def _validate_blobref_hash(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in SUPPORTED_HASHES:
            raise ValueError(f"Unsupported BLOBREF_HASH: {v}")
        return v

    @field_validator("BLOB_CHUNK_SIZE", "ENCODE_MAX_WORKERS")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
