from __future__ import annotations

from mailblob.models.blobref import DEFAULT_HASH, SUPPORTED_HASHES, BlobRef  # noqa: F401
from mailblob.models.enums import BlobKind, BlobStoreBackend, CamliType, PartKind  # noqa: F401
from mailblob.models.part import (  # noqa: F401
    DEFAULT_CHARSET,
    HeaderField,
    LeafPart,
    MessagePart,
    MultipartPart,
    Part,
    bytes_body,
    group_header_fields,
)
