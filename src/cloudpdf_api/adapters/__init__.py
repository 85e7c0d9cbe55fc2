"""
Adapter layer for the CloudPDF API.

Contains the two file origins (local disk with a Telegram cache, and S3 via
presigned URLs). Exactly one is built per process, from ``Settings.storage_mode``.
"""

from typing import TYPE_CHECKING, Optional

from cloudpdf_api.adapters.base import FileOrigin
from cloudpdf_api.adapters.local_cache import LocalCacheOrigin
from cloudpdf_api.adapters.presigned import PresignedOrigin
from cloudpdf_api.config.settings import Settings
from cloudpdf_api.database.local import MetadataStore
from cloudpdf_api.telegram.client import TelegramClient

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


def build_origin(
    settings: Settings,
    store: MetadataStore,
    telegram: Optional[TelegramClient] = None,
    s3_client: Optional["S3Client"] = None,
) -> FileOrigin:
    if settings.storage_mode == PresignedOrigin.mode:
        return PresignedOrigin(store, settings, s3_client=s3_client)
    return LocalCacheOrigin(store, settings, telegram=telegram)


__all__ = ["FileOrigin", "LocalCacheOrigin", "PresignedOrigin", "build_origin"]
