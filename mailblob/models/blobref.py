from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

DEFAULT_HASH = "sha1"

# Hex digest length per supported hash.
SUPPORTED_HASHES: dict[str, int] = {
    "sha1": 40,
    "sha224": 56,
    "sha256": 64,
}

_REF_RE = re.compile(r"^([a-z0-9]+)-([0-9a-f]+)$")


@dataclass(frozen=True, order=True)
class BlobRef:
    """Content address of a blob, written as ``<hash>-<hex digest>``."""

    hash_name: str
    digest: str

    def __post_init__(self) -> None:
        expected_len = SUPPORTED_HASHES.get(self.hash_name)
        if expected_len is None:
            raise ValueError(f"Unsupported blob hash: {self.hash_name!r}")
        if len(self.digest) != expected_len or not _is_lower_hex(self.digest):
            raise ValueError(f"Invalid {self.hash_name} digest: {self.digest!r}")

    def __str__(self) -> str:
        return f"{self.hash_name}-{self.digest}"

    @classmethod
    def parse(cls, value: str) -> BlobRef:
        m = _REF_RE.match((value or "").strip())
        if m is None:
            raise ValueError(f"Invalid blob ref: {value!r}")
        return cls(hash_name=m.group(1), digest=m.group(2))

    @classmethod
    def of_bytes(cls, data: bytes, hash_name: str = DEFAULT_HASH) -> BlobRef:
        if hash_name not in SUPPORTED_HASHES:
            raise ValueError(f"Unsupported blob hash: {hash_name!r}")
        return cls(hash_name=hash_name, digest=hashlib.new(hash_name, data).hexdigest())


def _is_lower_hex(value: str) -> bool:
    return all(c in "0123456789abcdef" for c in value)
