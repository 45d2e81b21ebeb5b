"""Classification of storage and transport exceptions."""

from __future__ import annotations

from typing import Final

import httpx
from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError

NOT_FOUND_CODES: Final[frozenset[str]] = frozenset({"404", "NoSuchKey", "NotFound", "NoSuchBucket"})

# Exception types raised by the storage client or presigned-URL transfers.
STORAGE_ERRORS: Final[tuple[type[Exception], ...]] = (
    ClientError,
    BotoCoreError,
    Boto3Error,
    httpx.HTTPError,
)


def status_code(exc: BaseException) -> int | None:
    """Return the HTTP status carried by a storage exception, if any."""
    if isinstance(exc, ClientError):
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        return int(status) if status is not None else None
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


def error_code(exc: BaseException) -> str | None:
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code")
        return str(code) if code is not None else None
    return None


def is_not_found(exc: BaseException) -> bool:
    """Return True if the exception means the key, prefix or bucket is absent."""
    if status_code(exc) == 404:
        return True
    return error_code(exc) in NOT_FOUND_CODES
