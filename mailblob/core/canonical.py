"""Canonical serialization of schema blobs.

A schema blob is a JSON object indented by one space whose first key is always
``"camliVersion": 1``. Its content address is the digest of exactly these bytes,
so any change to the output here changes every address that depends on it.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import orjson

from mailblob.models.blobref import BlobRef

CAMLI_VERSION_PREFIX = '{"camliVersion": 1,\n'

_UNPAIRED_SURROGATE_RE = re.compile("[\ud800-\udfff]")

# Escapes applied by the reference JSON encoder inside strings. None of these
# characters can appear in the JSON text outside of a string.
_HTML_SAFE_ESCAPES = (
    ("&", "\\u0026"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


class CanonicalFormError(ValueError):
    pass


def canonical_schema_bytes(obj: Mapping[str, Any]) -> bytes:
    if not obj:
        raise CanonicalFormError("schema blob must have at least one key")
    if "camliVersion" in obj:
        raise CanonicalFormError("camliVersion is added by the canonical encoder")

    try:
        text = json.dumps(
            dict(obj),
            indent=1,
            ensure_ascii=False,
            allow_nan=False,
            default=_json_default,
        )
    except (TypeError, ValueError) as e:
        raise CanonicalFormError(str(e)) from e

    for raw, escaped in _HTML_SAFE_ESCAPES:
        text = text.replace(raw, escaped)
    text = _UNPAIRED_SURROGATE_RE.sub("\ufffd", text)

    # json.dumps opens an indented object with "{\n".
    return (CAMLI_VERSION_PREFIX + text[2:]).encode("utf-8")


def parse_schema_blob(data: bytes) -> dict[str, Any]:
    if not data.startswith(CAMLI_VERSION_PREFIX.encode("ascii")):
        raise CanonicalFormError("blob does not start with the camliVersion prefix")
    try:
        obj = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise CanonicalFormError(f"invalid schema blob: {e}") from e
    if not isinstance(obj, dict) or not isinstance(obj.get("camliType"), str):
        raise CanonicalFormError("schema blob has no camliType")
    return obj


def format_rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)

    out = f"{value.year:04d}-" + value.strftime("%m-%dT%H:%M:%S")
    if value.microsecond:
        out += f".{value.microsecond:06d}".rstrip("0")

    offset = value.utcoffset()
    total_minutes = int(offset.total_seconds()) // 60 if offset is not None else 0
    if total_minutes == 0:
        return out + "Z"
    sign = "+" if total_minutes > 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{out}{sign}{hours:02d}:{minutes:02d}"


def _json_default(value: object) -> object:
    if isinstance(value, BlobRef):
        return str(value)
    if isinstance(value, datetime):
        return format_rfc3339(value)
    raise TypeError(f"Object of type {type(value).__name__} is not schema serializable")
