from __future__ import annotations

import io
from datetime import UTC, datetime
from email import policy
from email.message import Message
from email.parser import BytesParser
from email.utils import parsedate_to_datetime
from typing import BinaryIO

from mailblob.models.part import (
    DEFAULT_CHARSET,
    BodyOpener,
    LeafPart,
    MessagePart,
    MultipartPart,
    Part,
    group_header_fields,
)


def parse_raw_message(raw: bytes) -> Part:
    msg = BytesParser(policy=policy.default).parsebytes(raw)
    return part_from_email(msg)


def part_from_email(msg: Message) -> Part:
    common = {
        "fields": group_header_fields(_raw_header_items(msg)),
        "content_type": msg.get_content_type(),
        "time": _parse_date(_first_raw_header(msg, "Date")),
        "charset": msg.get_content_charset(DEFAULT_CHARSET) or DEFAULT_CHARSET,
        "subject": _decoded_subject(msg),
    }

    maintype = msg.get_content_maintype()
    payload = msg.get_payload()
    if maintype == "multipart" and msg.get_boundary() is not None:
        # Preamble and epilogue are not kept. A boundary with no body parts is
        # still a multipart.
        children = payload if isinstance(payload, list) else []
        return MultipartPart(children=tuple(part_from_email(p) for p in children), **common)
    if _is_embedded_message(msg, payload):
        return MessagePart(message=part_from_email(payload[0]), **common)
    return LeafPart(body=_leaf_body(msg), **common)


def _is_embedded_message(msg: Message, payload: object) -> bool:
    if msg.get_content_maintype() != "message":
        return False
    # delivery-status parses into header blocks, not a message.
    if msg.get_content_type() == "message/delivery-status":
        return False
    return isinstance(payload, list) and len(payload) == 1


def _raw_header_items(msg: Message) -> list[tuple[str, str]]:
    return [(name, _redecode(value)) for name, value in msg.raw_items()]


def _first_raw_header(msg: Message, header_name: str) -> str | None:
    wanted = header_name.lower()
    for name, value in msg.raw_items():
        if name.lower() == wanted:
            return _redecode(value)
    return None


def _redecode(value: object) -> str:
    # The bytes parser keeps non-ASCII header bytes as surrogate escapes.
    text = str(value)
    try:
        return text.encode("ascii", "surrogateescape").decode("utf-8", errors="replace")
    except UnicodeEncodeError:
        return text


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def _decoded_subject(msg: Message) -> str | None:
    try:
        subject = msg.get("Subject")
    except (TypeError, ValueError, IndexError):
        subject = _first_raw_header(msg, "Subject")
    if subject is None:
        return None
    return str(subject) or None


def _leaf_body(msg: Message) -> BodyOpener:
    def _open() -> BinaryIO:
        payload = msg.get_payload()
        if isinstance(payload, list):
            # message/delivery-status and friends: a list of header blocks.
            return io.BytesIO(b"".join(p.as_bytes() for p in payload))
        return io.BytesIO(msg.get_payload(decode=True) or b"")

    return _open
