"""Retrieve raw S3 log objects from a bucket."""

import datetime
from collections.abc import Iterator

import boto3
import botocore.exceptions

from ._exceptions import LogSourceUnavailableError

_BOTOCORE_SOURCE_ERRORS = (
    botocore.exceptions.ClientError,
    botocore.exceptions.BotoCoreError,
)


def get_s3_client(
    *,
    region_name: str | None = None,
    aws_access_key_id: str | None = None,
    aws_secret_access_key: str | None = None,
):
    """
    Create a boto3 S3 client.

    Any option left unset falls back to the standard AWS resolution (environment variables, shared credentials file,
    instance profile, ...).
    """
    return boto3.client(
        "s3",
        region_name=region_name,
        aws_access_key_id=aws_access_key_id,
        aws_secret_access_key=aws_secret_access_key,
    )


def find_s3_log_object_keys(
    *,
    bucket: str,
    prefix: str = "",
    date: datetime.date | None = None,
    s3_client=None,
) -> list[str]:
    """
    List the keys of all log objects in a bucket under a prefix, following pagination.

    Parameters
    ----------
    bucket : str
        The name of the bucket the server access logs are delivered to.
    prefix : str, default: ""
        The key prefix the logs are delivered under.
    date : datetime.date, optional
        If given, only objects whose keys start with the prefix immediately followed by this day ('YYYY-MM-DD') are
        listed. Log objects delivered by S3 are named after the time of delivery in this form.
    s3_client : optional
        A boto3 S3 client. Defaults to `get_s3_client()`.
    """
    s3_client = s3_client or get_s3_client()
    full_prefix = prefix + (date.strftime("%Y-%m-%d") if date is not None else "")

    try:
        paginator = s3_client.get_paginator("list_objects_v2")
        object_keys = [
            s3_object["Key"]
            for page in paginator.paginate(Bucket=bucket, Prefix=full_prefix)
            for s3_object in page.get("Contents", [])
        ]
    except _BOTOCORE_SOURCE_ERRORS as exception:
        raise LogSourceUnavailableError(
            f"Unable to list the log objects in bucket '{bucket}' under prefix '{full_prefix}'!"
        ) from exception

    return object_keys


def iter_s3_log_object_texts(
    *,
    bucket: str,
    prefix: str = "",
    date: datetime.date | None = None,
    s3_client=None,
) -> Iterator[str]:
    """
    Yield the decoded text of every log object in a bucket under a prefix, in listing order.

    The listing is completed before the first object is downloaded, so listing failures are raised before any text
    is yielded. See `find_s3_log_object_keys` for a description of the parameters.
    """
    s3_client = s3_client or get_s3_client()
    object_keys = find_s3_log_object_keys(bucket=bucket, prefix=prefix, date=date, s3_client=s3_client)

    for object_key in object_keys:
        try:
            response = s3_client.get_object(Bucket=bucket, Key=object_key)
            raw_bytes = response["Body"].read()
        except _BOTOCORE_SOURCE_ERRORS as exception:
            raise LogSourceUnavailableError(
                f"Unable to retrieve the log object '{object_key}' from bucket '{bucket}'!"
            ) from exception

        yield raw_bytes.decode("utf-8", errors="replace")
