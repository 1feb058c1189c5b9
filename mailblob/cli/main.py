"""Command-line entry point: import mail folders into a blob store."""

from __future__ import annotations

import click

from mailblob.core.config import get_settings
from mailblob.core.logging import configure_logging
from mailblob.models.enums import BlobStoreBackend


@click.group()
@click.option(
    "--store",
    type=click.Choice([b.value for b in BlobStoreBackend]),
    default=None,
    help="Blob store backend (overrides BLOB_STORE).",
)
@click.option(
    "--blob-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for the local store (overrides LOCAL_BLOB_DIR).",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Sibling parts encoded concurrently (overrides ENCODE_MAX_WORKERS).",
)
@click.pass_context
def cli(ctx: click.Context, store: str | None, blob_dir: str | None, workers: int | None) -> None:
    """Store e-mail messages as content-addressed schema blobs."""
    overrides: dict[str, object] = {}
    if store is not None:
        overrides["BLOB_STORE"] = store
    if blob_dir is not None:
        overrides["LOCAL_BLOB_DIR"] = blob_dir
    if workers is not None:
        overrides["ENCODE_MAX_WORKERS"] = workers

    settings = get_settings().model_copy(update=overrides)
    configure_logging(settings)
    ctx.obj = settings


# Import and register commands after cli is defined to avoid circular imports.
from mailblob.cli.commands import put, show  # noqa: E402

cli.add_command(put)
cli.add_command(show)
