from __future__ import annotations

import io
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, ClassVar, NamedTuple

from mailblob.models.enums import PartKind

DEFAULT_CHARSET = "us-ascii"


class HeaderField(NamedTuple):
    name: str
    values: tuple[str, ...]


BodyOpener = Callable[[], BinaryIO]


@dataclass(frozen=True, kw_only=True)
class _PartBase:
    fields: tuple[HeaderField, ...] = ()
    content_type: str = "text/plain"
    time: datetime | None = None
    charset: str = DEFAULT_CHARSET
    subject: str | None = None

    @property
    def major_type(self) -> str:
        return self.content_type.split("/", 1)[0].strip().lower()

    def fields_json(self) -> dict[str, list[str]]:
        # Repeated names merge in order.
        out: dict[str, list[str]] = {}
        for f in self.fields:
            out.setdefault(f.name, []).extend(f.values)
        return out


@dataclass(frozen=True, kw_only=True)
class MultipartPart(_PartBase):
    kind: ClassVar[PartKind] = PartKind.multipart

    children: tuple[Part, ...] = ()


@dataclass(frozen=True, kw_only=True)
class MessagePart(_PartBase):
    kind: ClassVar[PartKind] = PartKind.message

    message: Part


@dataclass(frozen=True, kw_only=True)
class LeafPart(_PartBase):
    kind: ClassVar[PartKind] = PartKind.leaf

    body: BodyOpener

    def open_body(self) -> BinaryIO:
        return self.body()


Part = MultipartPart | MessagePart | LeafPart


def bytes_body(data: bytes) -> BodyOpener:
    def _open() -> BinaryIO:
        return io.BytesIO(data)

    return _open


def group_header_fields(items: list[tuple[str, str]]) -> tuple[HeaderField, ...]:
    """Group ``(name, value)`` pairs by name, keeping first-appearance order."""
    grouped: dict[str, list[str]] = {}
    for name, value in items:
        grouped.setdefault(name, []).append(value)
    return tuple(HeaderField(name=k, values=tuple(v)) for k, v in grouped.items())
