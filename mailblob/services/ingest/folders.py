from __future__ import annotations

import bz2
import gzip
import logging
import lzma
import mailbox
import os
import shutil
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger("mailblob.ingest")

_COMPRESSED_MAGIC: tuple[tuple[bytes, Callable[[str], BinaryIO]], ...] = (
    (b"\x1f\x8b", gzip.open),
    (b"BZh", bz2.open),
    (b"\xfd7zXZ\x00", lzma.open),
)
_MAILDIR_SUBDIRS = ("cur", "new", "tmp")


class FolderError(RuntimeError):
    pass


class MailFolder:
    """Raw messages from a maildir, an mbox (optionally compressed) or one RFC 822 file.

    Iterating yields each message's bytes in folder order. Use as a context
    manager so a decompressed temporary copy is removed afterwards.
    """

    def __init__(
        self,
        path: Path,
        *,
        box: mailbox.Mailbox | None = None,
        single_file: Path | None = None,
        temp_path: Path | None = None,
    ) -> None:
        self.path = path
        self._box = box
        self._single_file = single_file
        self._temp_path = temp_path

    @property
    def kind(self) -> str:
        if isinstance(self._box, mailbox.Maildir):
            return "maildir"
        if self._box is not None:
            return "mbox"
        return "file"

    def __iter__(self) -> Iterator[bytes]:
        if self._single_file is not None:
            yield self._single_file.read_bytes()
            return
        assert self._box is not None
        keys = self._box.keys()
        if isinstance(self._box, mailbox.Maildir):
            keys = sorted(keys)
        for key in keys:
            yield self._box.get_bytes(key)

    def close(self) -> None:
        if self._box is not None:
            self._box.close()
        if self._temp_path is not None:
            self._temp_path.unlink(missing_ok=True)
            self._temp_path = None

    def __enter__(self) -> MailFolder:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_folder(path: str | os.PathLike[str]) -> MailFolder:
    p = Path(path)
    if p.is_dir():
        if all((p / sub).is_dir() for sub in _MAILDIR_SUBDIRS):
            return MailFolder(p, box=mailbox.Maildir(p, factory=None, create=False))
        raise FolderError(f"{p} is a directory but not a maildir")
    if not p.is_file():
        raise FolderError(f"{p} does not exist")

    try:
        with open(p, "rb") as f:
            head = f.read(8)
    except OSError as e:
        raise FolderError(f"cannot read {p}: {e}") from e

    for magic, opener in _COMPRESSED_MAGIC:
        if head.startswith(magic):
            temp_path = _decompress_to_temp(p, opener)
            return _open_mbox_or_file(p, data_path=temp_path, temp_path=temp_path)
    return _open_mbox_or_file(p, data_path=p, temp_path=None)


def _open_mbox_or_file(path: Path, *, data_path: Path, temp_path: Path | None) -> MailFolder:
    with open(data_path, "rb") as f:
        starts_with_from = f.read(5) == b"From "
    if not starts_with_from:
        logger.debug("treating %s as a single message", path)
        return MailFolder(path, single_file=data_path, temp_path=temp_path)
    return MailFolder(path, box=mailbox.mbox(data_path, create=False), temp_path=temp_path)


def _decompress_to_temp(path: Path, opener: Callable[[str], BinaryIO]) -> Path:
    fd, temp_name = tempfile.mkstemp(prefix="mailblob-", suffix=".mbox")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as out, opener(str(path)) as src:
            shutil.copyfileobj(src, out)
    except (OSError, EOFError, lzma.LZMAError) as e:
        temp_path.unlink(missing_ok=True)
        raise FolderError(f"cannot decompress {path}: {e}") from e
    return temp_path
