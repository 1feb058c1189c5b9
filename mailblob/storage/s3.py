from __future__ import annotations

from dataclasses import dataclass

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from mailblob.models.blobref import BlobRef
from mailblob.storage.base import BlobNotFoundError, BlobStore, BlobStoreError, StoredBlob

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass(frozen=True)
class S3Config:
    endpoint_url: str
    access_key_id: str
    secret_access_key: str
    bucket: str
    key_prefix: str = ""


class S3BlobStore(BlobStore):
    def __init__(self, config: S3Config, **kwargs) -> None:
        super().__init__(**kwargs)
        self._bucket = config.bucket
        self._prefix = config.key_prefix
        self._client = boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
        )

    def key_for(self, ref: BlobRef) -> str:
        return f"{self._prefix}{ref}"

    def receive_at(self, *, ref: BlobRef, data: bytes) -> StoredBlob:
        try:
            self._client.put_object(Bucket=self._bucket, Key=self.key_for(ref), Body=data)
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(str(e)) from e
        return StoredBlob(ref=ref, size_bytes=len(data))

    def get_bytes(self, *, ref: BlobRef) -> bytes:
        try:
            res = self._client.get_object(Bucket=self._bucket, Key=self.key_for(ref))
            body = res["Body"].read()
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                raise BlobNotFoundError(f"blob not found: {ref}") from e
            raise BlobStoreError(str(e)) from e
        except BotoCoreError as e:
            raise BlobStoreError(str(e)) from e
        if not isinstance(body, (bytes, bytearray)):
            raise BlobStoreError("S3 returned non-bytes body")
        return bytes(body)

    def has(self, *, ref: BlobRef) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=self.key_for(ref))
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return False
            raise BlobStoreError(str(e)) from e
        except BotoCoreError as e:
            raise BlobStoreError(str(e)) from e
        return True


def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))
