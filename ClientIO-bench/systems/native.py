"""
Native object store client (S3 API) built on boto3.

Streams are emulated over ranged GETs and multipart uploads: a streaming read
issues one ranged GET from the current position, a positioned read one ranged
GET at the given offset.
"""

import logging
from typing import Optional, Tuple
from urllib.parse import urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from configuration import (
    MIN_MULTIPART_PART_BYTES,
    REQUEST_TIMEOUT_SECONDS,
    BUCKET_NAME,
    S3_ENDPOINT,
    R2_ENDPOINT,
    AWS_ACCESS_KEY_ID,
    AWS_SECRET_ACCESS_KEY,
    AWS_REGION,
    R2_ACCESS_KEY_ID,
    R2_SECRET_ACCESS_KEY,
)
from common.operations import ClientIOOperation
from systems.base import StorageClient, InStream, OutStream, EOF

logger = logging.getLogger(__name__)


class NativeInStream(InStream):
    """Seekable reader over one object."""

    def __init__(self, client, bucket: str, key: str):
        self._client = client
        self.bucket = bucket
        self.key = key
        self.size = client.head_object(Bucket=bucket, Key=key)["ContentLength"]
        self._pos = 0

    def _get_range(self, start: int, length: int) -> bytes:
        end = min(start + length, self.size) - 1
        response = self._client.get_object(
            Bucket=self.bucket, Key=self.key, Range=f"bytes={start}-{end}"
        )
        return response["Body"].read()

    def read_into(self, buffer) -> int:
        view = memoryview(buffer)
        if self._pos >= self.size:
            return EOF
        data = self._get_range(self._pos, len(view))
        n = len(data)
        view[:n] = data
        self._pos += n
        return n

    def read_buffer(self, size: int) -> int:
        if self._pos >= self.size:
            return EOF
        data = self._get_range(self._pos, size)
        self._pos += len(data)
        return len(data)

    def seek(self, offset: int) -> None:
        self._pos = offset

    def tell(self) -> int:
        return self._pos

    def read_at(self, offset: int, buffer) -> int:
        view = memoryview(buffer)
        if offset >= self.size:
            return EOF
        data = self._get_range(offset, len(view))
        n = len(data)
        view[:n] = data
        return n


class NativeOutStream(OutStream):
    """Multipart upload writer; parts are cut at the block size."""

    def __init__(self, client, bucket: str, key: str, part_size: int):
        super().__init__()
        self._client = client
        self.bucket = bucket
        self.key = key
        self.part_size = max(part_size, MIN_MULTIPART_PART_BYTES)
        self._pending = bytearray()
        self._upload_id: Optional[str] = None
        self._parts = []

    def _upload_part(self, data: bytes) -> None:
        if self._upload_id is None:
            response = self._client.create_multipart_upload(Bucket=self.bucket, Key=self.key)
            self._upload_id = response["UploadId"]
        part_number = len(self._parts) + 1
        response = self._client.upload_part(
            Bucket=self.bucket,
            Key=self.key,
            UploadId=self._upload_id,
            PartNumber=part_number,
            Body=data,
        )
        self._parts.append({"PartNumber": part_number, "ETag": response["ETag"]})

    def write(self, buffer, length: int) -> None:
        self._pending += memoryview(buffer)[:length]
        self.bytes_written += length
        while len(self._pending) >= self.part_size:
            part = bytes(self._pending[:self.part_size])
            del self._pending[:self.part_size]
            self._upload_part(part)

    def close(self) -> None:
        try:
            if self._upload_id is None:
                self._client.put_object(Bucket=self.bucket, Key=self.key, Body=bytes(self._pending))
            else:
                if self._pending:
                    self._upload_part(bytes(self._pending))
                self._client.complete_multipart_upload(
                    Bucket=self.bucket,
                    Key=self.key,
                    UploadId=self._upload_id,
                    MultipartUpload={"Parts": self._parts},
                )
            self._pending = bytearray()
        except ClientError:
            if self._upload_id is not None:
                logger.warning(f"Aborting multipart upload of {self.key}")
                self._client.abort_multipart_upload(
                    Bucket=self.bucket, Key=self.key, UploadId=self._upload_id
                )
            raise


class NativeClient(StorageClient):
    """One boto3 S3 client against an S3-compatible endpoint."""

    client_type = "native"
    unsupported_operations = frozenset({
        ClientIOOperation.READ_FULLY,
        ClientIOOperation.POS_READ_FULLY,
    })

    def __init__(self, endpoint: str, bucket_name: str, credentials: dict,
                 max_pool_connections: int = 10):
        self.endpoint = endpoint
        self.bucket_name = bucket_name
        self._config = Config(
            max_pool_connections=max_pool_connections,
            connect_timeout=5,
            read_timeout=REQUEST_TIMEOUT_SECONDS,
            # the benchmark never retries, neither does the client
            retries={"max_attempts": 1, "mode": "standard"},
            s3={"payload_signing_enabled": False},
            tcp_keepalive=True,
        )
        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint or None,
            aws_access_key_id=credentials.get("access_key_id") or None,
            aws_secret_access_key=credentials.get("secret_access_key") or None,
            region_name=credentials.get("region_name", "auto"),
            config=self._config,
        )
        logger.info(
            f"Initialized native client for {endpoint or 'default endpoint'} "
            f"(max_pool_connections={max_pool_connections})"
        )

    @classmethod
    def for_object_store(cls, object_store: str, max_pool_connections: int = 10) -> "NativeClient":
        """Build a client for the "s3" or "r2" endpoint configured in the environment.

        Raises:
            ValueError: If object_store is neither "s3" nor "r2"
        """
        object_store = object_store.lower()
        if object_store == "r2":
            credentials = {
                "access_key_id": R2_ACCESS_KEY_ID,
                "secret_access_key": R2_SECRET_ACCESS_KEY,
                "region_name": "auto",
            }
            return cls(R2_ENDPOINT, BUCKET_NAME, credentials, max_pool_connections)
        elif object_store == "s3":
            credentials = {
                "access_key_id": AWS_ACCESS_KEY_ID,
                "secret_access_key": AWS_SECRET_ACCESS_KEY,
                "region_name": AWS_REGION,
            }
            return cls(S3_ENDPOINT, BUCKET_NAME, credentials, max_pool_connections)
        raise ValueError(f"Unsupported object store: {object_store}. Must be 'r2' or 's3'.")

    def resolve(self, path: str) -> Tuple[str, str]:
        """Map a path or s3:// URI to (bucket, key)."""
        parsed = urlparse(path)
        if parsed.scheme:
            return parsed.netloc, parsed.path.lstrip("/")
        return self.bucket_name, path.lstrip("/")

    def open_for_read(self, path: str) -> NativeInStream:
        bucket, key = self.resolve(path)
        return NativeInStream(self.client, bucket, key)

    def open_for_write(self, path: str, block_size: int, buffer_size: int) -> NativeOutStream:
        bucket, key = self.resolve(path)
        return NativeOutStream(self.client, bucket, key, part_size=block_size)

    def prepare_base(self, path: str, clean: bool) -> None:
        # Object stores have no directories to create
        if not clean:
            return
        bucket, prefix = self.resolve(path)
        prefix = prefix.rstrip("/") + "/"
        paginator = self.client.get_paginator("list_objects_v2")
        deleted = 0
        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            keys = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
            if keys:
                self.client.delete_objects(Bucket=bucket, Delete={"Objects": keys})
                deleted += len(keys)
        logger.info(f"Removed {deleted} objects under s3://{bucket}/{prefix}")

    def close(self) -> None:
        self.client.close()

    def __repr__(self) -> str:
        return f"NativeClient(endpoint={self.endpoint!r}, bucket={self.bucket_name!r})"
