from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, assert_never

from mailblob.core.canonical import CanonicalFormError, canonical_schema_bytes
from mailblob.core.config import Settings
from mailblob.core.metrics import observe_blob_written
from mailblob.models.blobref import BlobRef
from mailblob.models.enums import BlobKind, CamliType
from mailblob.models.part import LeafPart, MessagePart, MultipartPart, Part
from mailblob.services.errors import DescriptorSerializationError, PartReadError
from mailblob.storage.base import BlobStore

logger = logging.getLogger("mailblob.encoder")


@dataclass(frozen=True)
class EncoderConfig:
    max_workers: int = 1
    hash_name: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> EncoderConfig:
        return cls(max_workers=settings.ENCODE_MAX_WORKERS, hash_name=settings.BLOBREF_HASH)


class PartEncoder:
    """Writes a Part tree to a blob store as a hierarchy of schema blobs.

    Every Part becomes one descriptor blob stored under the digest of its
    canonical bytes. Multipart children and embedded messages are written first,
    since the parent descriptor embeds their refs; leaf bodies are handed to
    ``store.write_stream``.

    With ``max_workers > 1`` the children of the outermost multipart are encoded
    on a thread pool, one subtree per task, and collected in order before the
    parent is written.

    Usage::

        encoder = PartEncoder(store)
        ref = encoder.encode_message(parse_raw_message(raw))
    """

    def __init__(self, store: BlobStore, *, config: EncoderConfig | None = None) -> None:
        self._store = store
        self._config = config or EncoderConfig()
        self._hash_name = self._config.hash_name or store.hash_name

    def encode_message(self, message: Part) -> BlobRef:
        return self._encode_root(message, CamliType.mime_message)

    def encode_part(self, part: Part) -> BlobRef:
        return self._encode_root(part, CamliType.mime_part)

    def _encode_root(self, part: Part, camli_type: CamliType) -> BlobRef:
        if self._config.max_workers <= 1:
            return self._encode(part, camli_type, executor=None)

        executor = ThreadPoolExecutor(
            max_workers=self._config.max_workers, thread_name_prefix="mailblob-encode"
        )
        try:
            return self._encode(part, camli_type, executor=executor)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def _encode(
        self, part: Part, camli_type: CamliType, *, executor: ThreadPoolExecutor | None
    ) -> BlobRef:
        body_name: str
        body: object
        match part:
            case MultipartPart():
                body_name = "subparts"
                body = self._encode_children(part.children, executor=executor)
            case MessagePart():
                body_name = "submessage"
                body = self._encode(part.message, CamliType.mime_message, executor=executor)
            case LeafPart():
                body_name = "body"
                body = self._write_body(part)
            case _:
                assert_never(part)

        descriptor = build_descriptor(part, camli_type=camli_type, body_name=body_name, body=body)
        try:
            data = canonical_schema_bytes(descriptor)
        except CanonicalFormError as e:
            raise DescriptorSerializationError(
                f"cannot serialize {camli_type} descriptor for {part.content_type}: {e}"
            ) from e

        # The store does not re-derive descriptor refs.
        ref = BlobRef.of_bytes(data, self._hash_name)
        self._store.receive_at(ref=ref, data=data)
        observe_blob_written(kind=BlobKind(camli_type.value).value, size_bytes=len(data))
        logger.debug(
            "wrote %s %s for %s part %s (%d bytes)",
            camli_type,
            ref,
            part.kind,
            part.content_type,
            len(data),
        )
        return ref

    def _encode_children(
        self, children: tuple[Part, ...], *, executor: ThreadPoolExecutor | None
    ) -> list[BlobRef]:
        if executor is None or len(children) < 2:
            return [self._encode(c, CamliType.mime_part, executor=executor) for c in children]

        futures = [
            executor.submit(self._encode, child, CamliType.mime_part, executor=None)
            for child in children
        ]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        failed = next((f for f in futures if f in done and f.exception() is not None), None)
        if failed is not None:
            for future in pending:
                future.cancel()
            failed.result()
        return [future.result() for future in futures]

    def _write_body(self, part: LeafPart) -> BlobRef:
        try:
            reader = part.open_body()
        except OSError as e:
            raise PartReadError(f"cannot open body of {part.content_type} part: {e}") from e
        with reader:
            try:
                return self._store.write_stream(reader=reader)
            except OSError as e:
                raise PartReadError(f"cannot read body of {part.content_type} part: {e}") from e


def build_descriptor(
    part: Part, *, camli_type: CamliType, body_name: str, body: object
) -> dict[str, Any]:
    descriptor: dict[str, Any] = {
        "camliType": camli_type.value,
        "fields": part.fields_json(),
        "content_type": part.content_type,
        body_name: body,
    }
    if part.time is not None:
        descriptor["time"] = part.time
    if part.major_type == "text":
        descriptor["charset"] = part.charset
    if part.subject:
        descriptor["subject"] = part.subject
    return descriptor


def encode_message(
    store: BlobStore, message: Part, *, config: EncoderConfig | None = None
) -> BlobRef:
    return PartEncoder(store, config=config).encode_message(message)


def encode_part(store: BlobStore, part: Part, *, config: EncoderConfig | None = None) -> BlobRef:
    return PartEncoder(store, config=config).encode_part(part)
