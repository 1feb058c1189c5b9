from __future__ import annotations

import pytest

from mailblob.models.blobref import BlobRef


def test_of_bytes_uses_sha1_by_default() -> None:
    assert str(BlobRef.of_bytes(b"")) == "sha1-da39a3ee5e6b4b0d3255bfef95601890afd80709"
    assert str(BlobRef.of_bytes(b"abc")) == "sha1-a9993e364706816aba3e25717850c26c9cd0d89d"


def test_of_bytes_supports_other_hashes() -> None:
    ref = BlobRef.of_bytes(b"abc", "sha256")

    assert ref.hash_name == "sha256"
    assert ref.digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_parse_round_trips_string_form() -> None:
    text = "sha1-a9993e364706816aba3e25717850c26c9cd0d89d"

    ref = BlobRef.parse(f"  {text}\n")

    assert ref == BlobRef(hash_name="sha1", digest="a9993e364706816aba3e25717850c26c9cd0d89d")
    assert str(ref) == text


@pytest.mark.parametrize(
    "value",
    [
        "",
        "sha1",
        "sha1-",
        "md5-d41d8cd98f00b204e9800998ecf8427e",
        "sha1-A9993E364706816ABA3E25717850C26C9CD0D89D",
        "sha1-a9993e364706816aba3e25717850c26c9cd0d8",
        "sha1-zz993e364706816aba3e25717850c26c9cd0d89d",
    ],
)
def test_parse_rejects_invalid_refs(value: str) -> None:
    with pytest.raises(ValueError):
        BlobRef.parse(value)


def test_of_bytes_rejects_unknown_hash() -> None:
    with pytest.raises(ValueError):
        BlobRef.of_bytes(b"abc", "md5")
