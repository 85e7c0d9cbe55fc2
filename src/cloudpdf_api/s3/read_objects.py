"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


def fetch_s3_object_size(bucket_name: str, object_key: str, s3_client: "S3Client") -> int:
    """
    Look up the size of an object without downloading it.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param s3_client: A boto3 S3 client.
    :return: The object's size in bytes.
    :raises botocore.exceptions.ClientError: if the object does not exist or can't be read.
    """
    head = s3_client.head_object(Bucket=bucket_name, Key=object_key)
    return int(head["ContentLength"])


def generate_download_url(bucket_name: str, object_key: str, expires_in: int, s3_client: "S3Client") -> str:
    """
    Create a time-limited GET URL for an object.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param expires_in: Lifetime of the URL in seconds.
    :param s3_client: A boto3 S3 client.
    """
    return s3_client.generate_presigned_url(
        "get_object",
        Params={"Bucket": bucket_name, "Key": object_key},
        ExpiresIn=expires_in,
    )
