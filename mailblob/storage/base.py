from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from mailblob.models.blobref import DEFAULT_HASH, BlobRef
from mailblob.storage.filemap import write_file_map

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StoredBlob:
    ref: BlobRef
    size_bytes: int


class BlobStoreError(RuntimeError):
    pass


class BlobNotFoundError(BlobStoreError):
    pass


class BlobStore:
    def __init__(
        self, *, hash_name: str = DEFAULT_HASH, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.hash_name = hash_name
        self.chunk_size = chunk_size

    def receive_at(self, *, ref: BlobRef, data: bytes) -> StoredBlob:  # pragma: no cover
        raise NotImplementedError

    def get_bytes(self, *, ref: BlobRef) -> bytes:  # pragma: no cover
        raise NotImplementedError

    def has(self, *, ref: BlobRef) -> bool:  # pragma: no cover
        raise NotImplementedError

    def write_stream(self, *, reader: BinaryIO) -> BlobRef:
        return write_file_map(
            self, reader=reader, hash_name=self.hash_name, chunk_size=self.chunk_size
        )
