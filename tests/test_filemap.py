from __future__ import annotations

import io

from mailblob.core.canonical import parse_schema_blob
from mailblob.models.blobref import BlobRef
from mailblob.storage.memory import InMemoryBlobStore


class _TrickleReader(io.RawIOBase):
    """Returns at most one byte per read call."""

    def __init__(self, data: bytes) -> None:
        self._buf = io.BytesIO(data)

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        return self._buf.read(1 if size != 0 else 0)


def _parts(store: InMemoryBlobStore, ref: BlobRef) -> list[dict]:
    schema = parse_schema_blob(store.get_bytes(ref=ref))
    assert schema["camliType"] == "bytes"
    return schema["parts"]


def test_stream_is_split_into_fixed_size_chunks() -> None:
    store = InMemoryBlobStore(chunk_size=4)

    ref = store.write_stream(reader=io.BytesIO(b"abcdefghij"))

    parts = _parts(store, ref)
    assert [p["size"] for p in parts] == [4, 4, 2]
    chunks = [store.get_bytes(ref=BlobRef.parse(p["blobRef"])) for p in parts]
    assert b"".join(chunks) == b"abcdefghij"
    assert list(parts[0]) == ["blobRef", "size"]


def test_exact_multiple_of_chunk_size_has_no_empty_tail() -> None:
    store = InMemoryBlobStore(chunk_size=4)

    ref = store.write_stream(reader=io.BytesIO(b"abcdefgh"))

    assert [p["size"] for p in _parts(store, ref)] == [4, 4]


def test_chunking_does_not_depend_on_read_sizes() -> None:
    data = b"The quick brown fox jumps over the lazy dog"

    whole = InMemoryBlobStore(chunk_size=8).write_stream(reader=io.BytesIO(data))
    trickled = InMemoryBlobStore(chunk_size=8).write_stream(reader=_TrickleReader(data))

    assert whole == trickled


def test_repeated_chunks_are_written_once() -> None:
    store = InMemoryBlobStore(chunk_size=4)

    ref = store.write_stream(reader=io.BytesIO(b"abcdabcdabcd"))

    parts = _parts(store, ref)
    assert len(parts) == 3
    assert len({p["blobRef"] for p in parts}) == 1
    assert store.writes.count(BlobRef.parse(parts[0]["blobRef"])) == 1


def test_empty_stream_yields_empty_parts() -> None:
    store = InMemoryBlobStore()

    ref = store.write_stream(reader=io.BytesIO(b""))

    assert store.get_bytes(ref=ref) == (
        b'{"camliVersion": 1,\n "camliType": "bytes",\n "parts": []\n}'
    )
    assert store.writes == [ref]


def test_bytes_schema_ref_is_digest_of_its_bytes() -> None:
    store = InMemoryBlobStore(hash_name="sha224")

    ref = store.write_stream(reader=io.BytesIO(b"payload"))

    assert ref.hash_name == "sha224"
    assert ref == BlobRef.of_bytes(store.get_bytes(ref=ref), "sha224")
