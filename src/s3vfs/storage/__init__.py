"""s3vfs storage layer.

Maps filesystem paths onto S3 keys and runs every storage request:

- KeyMapper: path <-> key/prefix conversion under a configured root
- ObjectLister: paginated prefix/delimiter listing
- ContentTransfer: putObject / managedUpload / multipart / presignedUrl writes,
  direct / presignedUrl reads
- S3Accessor: the façade entries talk to; translates storage errors
"""

from s3vfs.storage.accessor import S3Accessor
from s3vfs.storage.keys import KeyMapper
from s3vfs.storage.lister import ObjectLister
from s3vfs.storage.signed_urls import SignedUrlCache
from s3vfs.storage.transfer import ContentTransfer

__all__ = [
    "ContentTransfer",
    "KeyMapper",
    "ObjectLister",
    "S3Accessor",
    "SignedUrlCache",
]
