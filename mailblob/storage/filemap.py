"""Writes a byte stream as chunk blobs plus one ``bytes`` schema blob."""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

from mailblob.core.canonical import canonical_schema_bytes
from mailblob.core.metrics import observe_blob_written
from mailblob.models.blobref import BlobRef
from mailblob.models.enums import BlobKind, CamliType

if TYPE_CHECKING:
    from mailblob.storage.base import BlobStore


def write_file_map(
    store: BlobStore,
    *,
    reader: BinaryIO,
    hash_name: str,
    chunk_size: int,
) -> BlobRef:
    parts: list[dict[str, object]] = []
    while True:
        chunk = _read_full(reader, chunk_size)
        if not chunk:
            break
        chunk_ref = BlobRef.of_bytes(chunk, hash_name)
        if not store.has(ref=chunk_ref):
            store.receive_at(ref=chunk_ref, data=chunk)
            observe_blob_written(kind=BlobKind.chunk.value, size_bytes=len(chunk))
        parts.append({"blobRef": chunk_ref, "size": len(chunk)})
        if len(chunk) < chunk_size:
            break

    data = canonical_schema_bytes({"camliType": CamliType.bytes.value, "parts": parts})
    ref = BlobRef.of_bytes(data, hash_name)
    store.receive_at(ref=ref, data=data)
    observe_blob_written(kind=BlobKind.bytes.value, size_bytes=len(data))
    return ref


def _read_full(reader: BinaryIO, size: int) -> bytes:
    # Chunk boundaries must not depend on how the reader splits its reads.
    buf = bytearray()
    while len(buf) < size:
        piece = reader.read(size - len(buf))
        if not piece:
            break
        buf += piece
    return bytes(buf)
