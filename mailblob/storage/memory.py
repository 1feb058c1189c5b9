from __future__ import annotations

import threading

from mailblob.models.blobref import BlobRef
from mailblob.storage.base import BlobNotFoundError, BlobStore, StoredBlob


class InMemoryBlobStore(BlobStore):
    """Blob store kept in a dict; records every ``receive_at`` call in order."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._lock = threading.Lock()
        self._blobs: dict[BlobRef, bytes] = {}
        self._writes: list[BlobRef] = []

    def receive_at(self, *, ref: BlobRef, data: bytes) -> StoredBlob:
        with self._lock:
            self._blobs.setdefault(ref, bytes(data))
            self._writes.append(ref)
        return StoredBlob(ref=ref, size_bytes=len(data))

    def get_bytes(self, *, ref: BlobRef) -> bytes:
        with self._lock:
            data = self._blobs.get(ref)
        if data is None:
            raise BlobNotFoundError(f"blob not found: {ref}")
        return data

    def has(self, *, ref: BlobRef) -> bool:
        with self._lock:
            return ref in self._blobs

    @property
    def writes(self) -> list[BlobRef]:
        with self._lock:
            return list(self._writes)

    def __len__(self) -> int:
        with self._lock:
            return len(self._blobs)
