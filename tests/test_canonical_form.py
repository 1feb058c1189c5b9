from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from mailblob.core.canonical import (
    CanonicalFormError,
    canonical_schema_bytes,
    format_rfc3339,
    parse_schema_blob,
)
from mailblob.models.blobref import BlobRef

EMPTY_SHA1 = "da39a3ee5e6b4b0d3255bfef95601890afd80709"


def test_canonical_form_prefixes_camli_version_and_indents_by_one_space() -> None:
    out = canonical_schema_bytes({"camliType": "bytes", "parts": []})

    assert out == b'{"camliVersion": 1,\n "camliType": "bytes",\n "parts": []\n}'


def test_canonical_form_keeps_insertion_order_and_nests_indentation() -> None:
    out = canonical_schema_bytes(
        {
            "camliType": "mime-part",
            "fields": {"Subject": ["hi"], "Received": ["a", "b"]},
            "content_type": "text/plain",
        }
    )

    assert out == (
        b'{"camliVersion": 1,\n'
        b' "camliType": "mime-part",\n'
        b' "fields": {\n'
        b'  "Subject": [\n'
        b'   "hi"\n'
        b"  ],\n"
        b'  "Received": [\n'
        b'   "a",\n'
        b'   "b"\n'
        b"  ]\n"
        b" },\n"
        b' "content_type": "text/plain"\n'
        b"}"
    )


def test_canonical_form_escapes_html_characters_like_the_reference_encoder() -> None:
    out = canonical_schema_bytes({"camliType": "x", "v": "<a@b> & \u2028\u2029"})

    assert out == (
        b'{"camliVersion": 1,\n'
        b' "camliType": "x",\n'
        b' "v": "\\u003ca@b\\u003e \\u0026 \\u2028\\u2029"\n'
        b"}"
    )


def test_canonical_form_keeps_non_ascii_as_utf8_and_replaces_lone_surrogates() -> None:
    out = canonical_schema_bytes({"camliType": "x", "v": "café \udce9"})

    assert "\"v\": \"café \ufffd\"".encode("utf-8") in out


def test_canonical_form_serializes_blobrefs_and_datetimes() -> None:
    ref = BlobRef(hash_name="sha1", digest=EMPTY_SHA1)
    out = canonical_schema_bytes(
        {
            "camliType": "mime-part",
            "body": ref,
            "subparts": [ref],
            "time": datetime(2026, 2, 3, 4, 5, 6, tzinfo=UTC),
        }
    )

    assert out == (
        b'{"camliVersion": 1,\n'
        b' "camliType": "mime-part",\n'
        b' "body": "sha1-' + EMPTY_SHA1.encode() + b'",\n'
        b' "subparts": [\n'
        b'  "sha1-' + EMPTY_SHA1.encode() + b'"\n'
        b" ],\n"
        b' "time": "2026-02-03T04:05:06Z"\n'
        b"}"
    )


@pytest.mark.parametrize(
    "obj",
    [
        {},
        {"camliVersion": 1, "camliType": "bytes"},
        {"camliType": "bytes", "v": object()},
        {"camliType": "bytes", "v": float("nan")},
    ],
)
def test_canonical_form_rejects_invalid_objects(obj: dict) -> None:
    with pytest.raises(CanonicalFormError):
        canonical_schema_bytes(obj)


def test_parse_schema_blob_reads_canonical_bytes_back() -> None:
    data = canonical_schema_bytes({"camliType": "mime-part", "fields": {"To": ["<a@b>"]}})

    obj = parse_schema_blob(data)

    assert obj == {"camliVersion": 1, "camliType": "mime-part", "fields": {"To": ["<a@b>"]}}


@pytest.mark.parametrize(
    "data",
    [b"", b"hello", b'{"camliVersion": 1,\n "parts": []\n}', b'{"camliVersion": 1,\n broken'],
)
def test_parse_schema_blob_rejects_non_schema_bytes(data: bytes) -> None:
    with pytest.raises(CanonicalFormError):
        parse_schema_blob(data)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC), "2026-01-02T03:04:05Z"),
        (datetime(2026, 1, 2, 3, 4, 5), "2026-01-02T03:04:05Z"),
        (datetime(2026, 1, 2, 3, 4, 5, 500000, tzinfo=UTC), "2026-01-02T03:04:05.5Z"),
        (datetime(999, 1, 2, 3, 4, 5, tzinfo=UTC), "0999-01-02T03:04:05Z"),
        (
            datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=-5))),
            "2026-01-02T03:04:05-05:00",
        ),
        (
            datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=5, minutes=30))),
            "2026-01-02T03:04:05+05:30",
        ),
    ],
)
def test_format_rfc3339(value: datetime, expected: str) -> None:
    assert format_rfc3339(value) == expected
