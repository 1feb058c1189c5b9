from __future__ import annotations

import enum


class PartKind(enum.StrEnum):
    multipart = "multipart"
    message = "message"
    leaf = "leaf"


class CamliType(enum.StrEnum):
    mime_message = "mime-message"
    mime_part = "mime-part"
    bytes = "bytes"


class BlobKind(enum.StrEnum):
    mime_message = "mime-message"
    mime_part = "mime-part"
    bytes = "bytes"
    chunk = "chunk"


class BlobStoreBackend(enum.StrEnum):
    local = "local"
    s3 = "s3"
    memory = "memory"
