"""
S3 origin: the API only hands out presigned URLs.

Uploads go straight from the client to the bucket using a PUT grant; the
client then calls register so the object shows up in the document list.
"""

import logging
import re
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Optional

from botocore.exceptions import BotoCoreError, ClientError

from cloudpdf_api.adapters.base import FileOrigin, new_document_id, now_ms, to_base36
from cloudpdf_api.config.settings import Settings
from cloudpdf_api.database.local import MetadataStore, Record
from cloudpdf_api.errors import UnsupportedSourceError, UpstreamError, ValidationError
from cloudpdf_api.s3.client import get_s3_client
from cloudpdf_api.s3.delete_objects import delete_s3_object
from cloudpdf_api.s3.read_objects import fetch_s3_object_size, generate_download_url
from cloudpdf_api.s3.write_objects import generate_upload_url
from cloudpdf_api.schemas import (
    DEFAULT_CATEGORY,
    PDF_CONTENT_TYPE,
    DocumentRecord,
    FileUrlResponse,
    PresignedListEntry,
    Source,
    UploadGrant,
)

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

UPLOAD_PREFIX = "uploads"
_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(filename: str) -> str:
    """Reduce a client-supplied filename to characters that are safe in an object key."""
    return _UNSAFE_KEY_CHARS.sub("_", PurePosixPath(filename.replace("\\", "/")).name)


class PresignedOrigin(FileOrigin):
    mode = "presigned"
    list_entry_model = PresignedListEntry

    def __init__(
        self,
        store: MetadataStore,
        settings: Settings,
        s3_client: Optional["S3Client"] = None,
    ):
        super().__init__(store, settings)
        self.s3_client = s3_client or get_s3_client(settings)
        self.bucket_name = settings.s3_bucket_name

    def create_upload_grant(self, filename: Optional[str], content_type: Optional[str] = None) -> UploadGrant:
        if not filename:
            raise ValidationError("filename required")
        safe_name = sanitize_filename(filename)
        if not safe_name.strip("._"):
            raise ValidationError("filename required")

        content_type = content_type or PDF_CONTENT_TYPE
        key = f"{UPLOAD_PREFIX}/{to_base36(now_ms())}-{safe_name}"
        try:
            upload_url = generate_upload_url(
                bucket_name=self.bucket_name,
                object_key=key,
                content_type=content_type,
                expires_in=self.settings.presign_put_expires,
                s3_client=self.s3_client,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Could not presign upload for {key}: {e}")
            raise UpstreamError("Could not create upload URL") from e

        return UploadGrant(upload_url=upload_url, key=key, content_type=content_type)

    def register(
        self,
        key: Optional[str],
        title: Optional[str],
        category: Optional[str] = None,
        size: Optional[int] = None,
        document_id: Optional[str] = None,
    ) -> Record:
        """Create (or overwrite, when ``document_id`` is given) the record of an uploaded object."""
        if not key or not title:
            raise ValidationError("key and title required")

        # The HEAD check is advisory; registration goes ahead without it
        try:
            size = fetch_s3_object_size(self.bucket_name, key, s3_client=self.s3_client)
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"Could not confirm s3://{self.bucket_name}/{key}: {e}")

        record = DocumentRecord(
            id=document_id or new_document_id(),
            source=Source.S3,
            title=title,
            category=category or DEFAULT_CATEGORY,
            key=key,
            size=size,
            date=now_ms(),
        ).to_document()
        self.store.upsert(record)
        logger.info(f"Registered {record['id']} for s3://{self.bucket_name}/{key}")
        return record

    def resolve(self, document_id: str) -> FileUrlResponse:
        record = self.get(document_id)
        if not record.get("key"):
            raise UnsupportedSourceError(source=record.get("source"))

        expires_in = self.settings.presign_get_expires
        try:
            url = generate_download_url(
                bucket_name=self.bucket_name,
                object_key=record["key"],
                expires_in=expires_in,
                s3_client=self.s3_client,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Could not presign download for {document_id}: {e}")
            raise UpstreamError("Could not create download URL") from e
        return FileUrlResponse(url=url, expires_in=expires_in)

    def delete(self, document_id: str) -> None:
        record = self.get(document_id)
        key = record.get("key")
        if key:
            try:
                delete_s3_object(self.bucket_name, key, s3_client=self.s3_client)
            except (BotoCoreError, ClientError) as e:
                logger.warning(f"Failed to delete s3://{self.bucket_name}/{key}: {e}")
        self.store.remove(document_id)
