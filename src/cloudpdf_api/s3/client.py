"""S3 client construction."""

from typing import TYPE_CHECKING

import boto3
from botocore.config import Config

from cloudpdf_api.config.settings import Settings

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


def get_s3_client(settings: Settings) -> "S3Client":
    """Build an S3 client for the configured region and optional endpoint.

    Credentials come from the default boto3 chain (env, profile, or IAM role).
    Presigned URLs are always SigV4.
    """
    return boto3.client(
        "s3",
        region_name=settings.aws_region,
        endpoint_url=settings.aws_endpoint_url,
        config=Config(signature_version="s3v4"),
    )
