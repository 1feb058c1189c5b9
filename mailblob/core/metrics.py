from __future__ import annotations

from prometheus_client import Counter, Histogram, start_http_server

_BLOBS_WRITTEN_TOTAL = Counter(
    "mailblob_blobs_written_total",
    "Total blobs handed to the blob store.",
    labelnames=("kind",),
)
_BLOB_BYTES_WRITTEN_TOTAL = Counter(
    "mailblob_blob_bytes_written_total",
    "Total bytes handed to the blob store.",
    labelnames=("kind",),
)
_MESSAGES_ENCODED_TOTAL = Counter(
    "mailblob_messages_encoded_total",
    "Total messages encoded into schema blobs.",
    labelnames=("status",),
)
_MESSAGE_ENCODE_DURATION_SECONDS = Histogram(
    "mailblob_message_encode_duration_seconds",
    "Time spent encoding one message, including store writes.",
)


def observe_blob_written(*, kind: str, size_bytes: int) -> None:
    safe_kind = kind or "unknown"
    _BLOBS_WRITTEN_TOTAL.labels(kind=safe_kind).inc()
    _BLOB_BYTES_WRITTEN_TOTAL.labels(kind=safe_kind).inc(max(0, size_bytes))


def observe_message_encoded(*, status: str, duration_ms: int) -> None:
    _MESSAGES_ENCODED_TOTAL.labels(status=status or "unknown").inc()
    _MESSAGE_ENCODE_DURATION_SECONDS.observe(max(0.0, duration_ms / 1000.0))


def start_metrics_server(*, port: int) -> None:
    start_http_server(port)
