"""CLI command implementations."""

from __future__ import annotations

import logging
import time

import click

from mailblob.core.config import Settings
from mailblob.core.logging import log_event
from mailblob.core.metrics import observe_message_encoded, start_metrics_server
from mailblob.models.blobref import BlobRef
from mailblob.services.encoder import EncoderConfig, PartEncoder
from mailblob.services.errors import EncodeError
from mailblob.services.ingest.folders import FolderError, open_folder
from mailblob.services.ingest.parser import parse_raw_message
from mailblob.storage.base import BlobNotFoundError, BlobStoreError
from mailblob.storage.factory import build_blob_store

logger = logging.getLogger("mailblob.cli")


@click.command()
@click.argument("folders", nargs=-1, required=True, type=click.Path())
@click.pass_obj
def put(settings: Settings, folders: tuple[str, ...]) -> None:
    """Add every message in FOLDERS (maildir, mbox or single message file)."""
    store = build_blob_store(settings)
    encoder = PartEncoder(store, config=EncoderConfig.from_settings(settings))
    if settings.ENABLE_PROMETHEUS_METRICS:
        start_metrics_server(port=settings.PROMETHEUS_METRICS_PORT)

    for folder_path in folders:
        try:
            folder = open_folder(folder_path)
        except FolderError as e:
            log_event(
                logger,
                "folder.open_failed",
                level=logging.WARNING,
                folder=folder_path,
                error=str(e),
            )
            continue

        with folder:
            try:
                for i, raw in enumerate(folder, start=1):
                    ref = _put_message(encoder, raw, index=i, folder=folder_path)
                    click.echo(f"message {i} in {folder_path} added as {ref}")
            except OSError as e:
                raise click.ClickException(f"reading {folder_path}: {e}") from e


@click.command()
@click.argument("ref")
@click.option(
    "--check/--no-check",
    default=True,
    show_default=True,
    help="Verify that the blob content hashes to REF.",
)
@click.pass_obj
def show(settings: Settings, ref: str, check: bool) -> None:
    """Print the blob stored at REF."""
    try:
        blob_ref = BlobRef.parse(ref)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="REF") from e

    store = build_blob_store(settings)
    try:
        data = store.get_bytes(ref=blob_ref)
    except BlobNotFoundError as e:
        raise click.ClickException(str(e)) from e
    except BlobStoreError as e:
        raise click.ClickException(f"reading {blob_ref}: {e}") from e

    if check and BlobRef.of_bytes(data, blob_ref.hash_name) != blob_ref:
        raise click.ClickException(f"blob content does not match {blob_ref}")
    click.echo(data, nl=False)


def _put_message(encoder: PartEncoder, raw: bytes, *, index: int, folder: str) -> BlobRef:
    start = time.monotonic()
    try:
        ref = encoder.encode_message(parse_raw_message(raw))
    except (EncodeError, BlobStoreError) as e:
        observe_message_encoded(status="failed", duration_ms=_elapsed_ms(start))
        raise click.ClickException(f"adding message {index} from {folder}: {e}") from e

    duration_ms = _elapsed_ms(start)
    observe_message_encoded(status="ok", duration_ms=duration_ms)
    log_event(
        logger,
        "message.encoded",
        folder=folder,
        index=index,
        ref=str(ref),
        size_bytes=len(raw),
        duration_ms=duration_ms,
    )
    return ref


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
