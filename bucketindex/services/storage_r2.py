# bucketindex/services/storage_r2.py
from __future__ import annotations

import logging
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from bucketindex.core.config import Settings, settings
from bucketindex.models.storage import StoredObject

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


def get_s3_client(config: Optional[Settings] = None):
    config = config or settings
    # Blank keys are passed as None so boto3 can use its own credential chain.
    return boto3.client(
        "s3",
        endpoint_url=config.endpoint_url,
        aws_access_key_id=config.r2_access_key_id.strip() or None,
        aws_secret_access_key=config.r2_secret_access_key.strip() or None,
        region_name=config.r2_region,
    )


def _bucket(config: Optional[Settings] = None) -> str:
    return (config or settings).r2_bucket_name.strip()


def list_prefix(prefix: str, config: Optional[Settings] = None) -> tuple[list[str], list[str]]:
    """
    Lists one "directory level" under `prefix`, following continuation tokens.
    Returns (folder prefixes, file keys), both unsorted.
    The placeholder object whose key equals the prefix is skipped.
    """
    s3 = get_s3_client(config)
    logger.debug("R2 list: bucket=%r prefix=%r", _bucket(config), prefix)

    folders: dict[str, None] = {}
    files: list[str] = []
    kwargs = {"Bucket": _bucket(config), "Prefix": prefix, "Delimiter": "/"}

    while True:
        page = s3.list_objects_v2(**kwargs)

        for entry in page.get("CommonPrefixes") or []:
            folders[entry["Prefix"]] = None

        for obj in page.get("Contents") or []:
            if obj["Key"] != prefix:
                files.append(obj["Key"])

        token = page.get("NextContinuationToken")
        if not page.get("IsTruncated") or not token:
            break
        kwargs["ContinuationToken"] = token

    return list(folders), files


def get_object(key: str, config: Optional[Settings] = None) -> Optional[StoredObject]:
    """
    Fetches an object for streaming. None if the key does not exist.
    """
    s3 = get_s3_client(config)
    logger.debug("R2 fetch: bucket=%r key=%r", _bucket(config), key)

    try:
        obj = s3.get_object(Bucket=_bucket(config), Key=key)
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
            logger.info("R2 key not found: %s", key)
            return None
        raise

    expires = obj.get("Expires")
    if hasattr(expires, "strftime"):
        expires = expires.strftime("%a, %d %b %Y %H:%M:%S GMT")

    return StoredObject(
        key=key,
        body=obj["Body"],
        etag=obj.get("ETag"),
        content_type=obj.get("ContentType"),
        content_encoding=obj.get("ContentEncoding"),
        content_language=obj.get("ContentLanguage"),
        content_disposition=obj.get("ContentDisposition"),
        cache_control=obj.get("CacheControl"),
        expires=expires or None,
        content_length=obj.get("ContentLength"),
    )
