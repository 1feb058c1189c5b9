from __future__ import annotations

import os
import tempfile
from pathlib import Path

from mailblob.models.blobref import BlobRef
from mailblob.storage.base import BlobNotFoundError, BlobStore, BlobStoreError, StoredBlob


class LocalBlobStore(BlobStore):
    def __init__(self, root_dir: str | os.PathLike[str], **kwargs) -> None:
        super().__init__(**kwargs)
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, ref: BlobRef) -> Path:
        return self._root / ref.hash_name / ref.digest[:2] / ref.digest[2:4] / str(ref)

    def receive_at(self, *, ref: BlobRef, data: bytes) -> StoredBlob:
        path = self.path_for(ref)
        if path.exists():
            return StoredBlob(ref=ref, size_bytes=len(data))
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=path.parent, prefix=f".{ref}.", suffix=".tmp", delete=False
            ) as f:
                tmp_name = f.name
                f.write(data)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise BlobStoreError(str(e)) from e
        return StoredBlob(ref=ref, size_bytes=len(data))

    def get_bytes(self, *, ref: BlobRef) -> bytes:
        path = self.path_for(ref)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise BlobNotFoundError(f"blob not found: {ref}") from e
        except OSError as e:
            raise BlobStoreError(str(e)) from e

    def has(self, *, ref: BlobRef) -> bool:
        return self.path_for(ref).is_file()
