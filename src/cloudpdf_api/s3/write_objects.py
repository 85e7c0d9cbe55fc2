"""Functions for writing objects to an S3 bucket--the "C" and "U" in CRUD."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


def generate_upload_url(
    bucket_name: str,
    object_key: str,
    content_type: str,
    expires_in: int,
    s3_client: "S3Client",
) -> str:
    """
    Create a time-limited PUT URL the client uploads to directly.

    The content type is part of the signature, so the client must send the
    same `Content-Type` header with its PUT.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param content_type: The MIME type the upload must declare.
    :param expires_in: Lifetime of the URL in seconds.
    :param s3_client: A boto3 S3 client.
    """
    return s3_client.generate_presigned_url(
        "put_object",
        Params={"Bucket": bucket_name, "Key": object_key, "ContentType": content_type},
        ExpiresIn=expires_in,
    )
