"""Content transfer strategies.

The write strategy is chosen by configuration, never by payload size:

- putObject: one PUT request; payloads over the single-request limit fail.
- managedUpload: boto3's managed transfer handles buffering and parts.
- multipart: explicit initiate / upload parts / complete, strictly
  sequential with part numbers starting at 1.
- presignedUrl: PUT against a time-limited signed URL over plain HTTP.

Reads are either a direct GET through the storage client or an HTTP GET
against a signed URL. Strategies raise raw storage/transport exceptions;
the accessor translates them.
"""

from __future__ import annotations

import itertools
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any, BinaryIO, ClassVar, Final

import httpx
from boto3.s3.transfer import TransferConfig

from s3vfs.config import ReadMethod, S3FileSystemOptions, WriteMethod
from s3vfs.storage.client_errors import STORAGE_ERRORS
from s3vfs.storage.content import Content, to_bytes, to_stream
from s3vfs.storage.signed_urls import SignedUrlCache, SignedUrlKey

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"
NO_CACHE: Final[str] = "no-cache"


class UrlSigner:
    """Generates presigned URLs, reusing cached ones while still fresh."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        expiry_seconds: int,
        cache: SignedUrlCache | None = None,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._expiry_seconds = expiry_seconds
        self._cache = cache

    def url(
        self,
        key: str,
        operation: str,
        *,
        no_cache: bool = False,
        content_type: str | None = None,
    ) -> str:
        """Return a signed URL for ``operation`` ("get_object" or "put_object") on ``key``.

        A ``content_type`` is signed into PUT URLs; the upload must send the
        same Content-Type header.
        """
        variant = NO_CACHE if no_cache else content_type or ""
        cache_key = SignedUrlKey(key=key, operation=operation, variant=variant)
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        params: dict[str, Any] = {"Bucket": self._bucket, "Key": key}
        if no_cache and operation == "get_object":
            params["ResponseCacheControl"] = NO_CACHE
        if content_type is not None and operation == "put_object":
            params["ContentType"] = content_type
        url: str = self._client.generate_presigned_url(
            ClientMethod=operation,
            Params=params,
            ExpiresIn=self._expiry_seconds,
        )
        logger.debug("Generated signed URL: bucket=%s key=%s op=%s", self._bucket, key, operation)

        if self._cache is not None:
            # Handed-out URLs must stay valid for a while after they leave the cache.
            self._cache.put(cache_key, url, self._expiry_seconds / 2)
        return url


class HttpTransport:
    """Runs presigned-URL requests on an injected or short-lived httpx client."""

    def __init__(self, http_client: httpx.Client | None, timeout_seconds: float) -> None:
        self._http_client = http_client
        self._timeout_seconds = timeout_seconds

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise ``httpx.HTTPStatusError`` on non-2xx."""
        client = self._http_client
        should_close = False
        if client is None:
            client = httpx.Client(timeout=self._timeout_seconds)
            should_close = True
        try:
            response = client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        finally:
            if should_close:
                client.close()


class ContentWriter(ABC):
    """Uploads a whole object."""

    method: ClassVar[WriteMethod]

    def __init__(self, client: Any, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    @abstractmethod
    def write(self, key: str, content: Content, *, content_type: str) -> None:
        """Upload ``content`` as the object at ``key``."""
        ...


class PutObjectWriter(ContentWriter):
    method = WriteMethod.PUT_OBJECT

    def write(self, key: str, content: Content, *, content_type: str) -> None:
        self._client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=to_bytes(content),
            ContentType=content_type,
        )


class ManagedUploadWriter(ContentWriter):
    """Delegates buffering, part splitting and retries to boto3's transfer manager."""

    method = WriteMethod.MANAGED_UPLOAD

    def __init__(self, client: Any, bucket: str, *, chunk_size: int) -> None:
        super().__init__(client, bucket)
        self._config = TransferConfig(
            multipart_threshold=chunk_size, multipart_chunksize=chunk_size
        )

    def write(self, key: str, content: Content, *, content_type: str) -> None:
        self._client.upload_fileobj(
            to_stream(content),
            self._bucket,
            key,
            ExtraArgs={"ContentType": content_type},
            Config=self._config,
        )


def _iter_chunks(stream: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            return
        yield chunk


class MultipartWriter(ContentWriter):
    """Three-phase multipart upload with fixed-size parts.

    A failure after the upload is initiated aborts the session before the
    error propagates, so no incomplete upload is left behind.
    """

    method = WriteMethod.MULTIPART

    def __init__(self, client: Any, bucket: str, *, chunk_size: int) -> None:
        super().__init__(client, bucket)
        self._chunk_size = chunk_size

    def write(self, key: str, content: Content, *, content_type: str) -> None:
        stream = to_stream(content)
        first = stream.read(self._chunk_size)
        if not first:
            # Complete requires at least one part; an empty object is a plain PUT.
            self._client.put_object(
                Bucket=self._bucket, Key=key, Body=b"", ContentType=content_type
            )
            return

        upload = self._client.create_multipart_upload(
            Bucket=self._bucket,
            Key=key,
            ContentType=content_type,
        )
        upload_id = upload["UploadId"]
        parts: list[dict[str, Any]] = []

        try:
            chunks = itertools.chain([first], _iter_chunks(stream, self._chunk_size))
            for part_number, chunk in enumerate(chunks, start=1):
                parts.append(self._upload_part(key, upload_id, part_number, chunk))

            self._client.complete_multipart_upload(
                Bucket=self._bucket,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={"Parts": parts},
            )
        except Exception as e:
            logger.warning(
                "Multipart upload failed after %d parts, aborting: bucket=%s key=%s error=%s",
                len(parts),
                self._bucket,
                key,
                e,
            )
            self._abort(key, upload_id)
            raise

        logger.debug(
            "Multipart upload complete: bucket=%s key=%s parts=%d", self._bucket, key, len(parts)
        )

    def _upload_part(
        self, key: str, upload_id: str, part_number: int, chunk: bytes
    ) -> dict[str, Any]:
        response = self._client.upload_part(
            Bucket=self._bucket,
            Key=key,
            PartNumber=part_number,
            UploadId=upload_id,
            Body=chunk,
        )
        return {"PartNumber": part_number, "ETag": response["ETag"]}

    def _abort(self, key: str, upload_id: str) -> None:
        try:
            self._client.abort_multipart_upload(
                Bucket=self._bucket, Key=key, UploadId=upload_id
            )
        except STORAGE_ERRORS as e:
            logger.warning("Failed to abort multipart upload %s for key=%s: %s", upload_id, key, e)


class PresignedUrlWriter(ContentWriter):
    """PUTs content to a signed URL, bypassing the storage client on the data path."""

    method = WriteMethod.PRESIGNED_URL

    def __init__(self, client: Any, bucket: str, *, signer: UrlSigner, http: HttpTransport) -> None:
        super().__init__(client, bucket)
        self._signer = signer
        self._http = http

    def write(self, key: str, content: Content, *, content_type: str) -> None:
        url = self._signer.url(key, "put_object", content_type=content_type)
        self._http.request(
            "PUT", url, content=to_bytes(content), headers={"Content-Type": content_type}
        )


class ContentReader(ABC):
    """Downloads a whole object."""

    method: ClassVar[ReadMethod]

    def __init__(self, client: Any, bucket: str, *, no_cache: bool) -> None:
        self._client = client
        self._bucket = bucket
        self._no_cache = no_cache

    @abstractmethod
    def read(self, key: str) -> bytes: ...


class DirectReader(ContentReader):
    method = ReadMethod.DIRECT

    def read(self, key: str) -> bytes:
        params: dict[str, Any] = {"Bucket": self._bucket, "Key": key}
        if self._no_cache:
            params["ResponseCacheControl"] = NO_CACHE
        response = self._client.get_object(**params)
        body = response["Body"]
        try:
            return body.read()
        finally:
            close = getattr(body, "close", None)
            if close is not None:
                close()


class PresignedUrlReader(ContentReader):
    method = ReadMethod.PRESIGNED_URL

    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        no_cache: bool,
        signer: UrlSigner,
        http: HttpTransport,
    ) -> None:
        super().__init__(client, bucket, no_cache=no_cache)
        self._signer = signer
        self._http = http

    def read(self, key: str) -> bytes:
        url = self._signer.url(key, "get_object", no_cache=self._no_cache)
        headers = {"Cache-Control": NO_CACHE} if self._no_cache else {}
        return self._http.request("GET", url, headers=headers).content


class ContentTransfer:
    """Selects and runs the configured read and write strategies."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        options: S3FileSystemOptions,
        *,
        signer: UrlSigner,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the transfer strategies.

        Args:
            client: boto3 S3 client (or compatible).
            bucket: Bucket name.
            options: Resolved filesystem options.
            signer: Presigned URL generator shared with the accessor.
            http_client: Optional httpx.Client for dependency injection (testing).
        """
        http = HttpTransport(http_client, options.http_timeout_seconds)
        self.writer = self._create_writer(client, bucket, options, signer, http)
        self.reader = self._create_reader(client, bucket, options, signer, http)

    @staticmethod
    def _create_writer(
        client: Any,
        bucket: str,
        options: S3FileSystemOptions,
        signer: UrlSigner,
        http: HttpTransport,
    ) -> ContentWriter:
        method = options.method_of_write
        if method is WriteMethod.MANAGED_UPLOAD:
            return ManagedUploadWriter(client, bucket, chunk_size=options.multipart_chunk_size)
        if method is WriteMethod.MULTIPART:
            return MultipartWriter(client, bucket, chunk_size=options.multipart_chunk_size)
        if method is WriteMethod.PRESIGNED_URL:
            return PresignedUrlWriter(client, bucket, signer=signer, http=http)
        return PutObjectWriter(client, bucket)

    @staticmethod
    def _create_reader(
        client: Any,
        bucket: str,
        options: S3FileSystemOptions,
        signer: UrlSigner,
        http: HttpTransport,
    ) -> ContentReader:
        if options.method_of_read is ReadMethod.PRESIGNED_URL:
            return PresignedUrlReader(
                client, bucket, no_cache=options.no_cache, signer=signer, http=http
            )
        return DirectReader(client, bucket, no_cache=options.no_cache)

    def write(
        self, key: str, content: Content, *, content_type: str = DEFAULT_CONTENT_TYPE
    ) -> None:
        logger.debug("Writing key=%s via %s", key, self.writer.method.value)
        self.writer.write(key, content, content_type=content_type)

    def read(self, key: str) -> bytes:
        logger.debug("Reading key=%s via %s", key, self.reader.method.value)
        return self.reader.read(key)
