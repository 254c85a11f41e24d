# bucketindex/services/signer.py
"""
AWS Signature Version 4 presigning (query-string variant) for R2 downloads.

Only one request shape is ever signed: an unsigned-payload GetObject with
`host` as the single signed header and a forced attachment disposition.
"""
from __future__ import annotations

import hashlib
import hmac
import re
from datetime import datetime, timezone
from typing import Iterable, Optional, Union
from urllib.parse import quote

from bucketindex.models.storage import BucketIdentity, Credentials

ALGORITHM = "AWS4-HMAC-SHA256"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
REGION = "auto"
SERVICE = "s3"
TERMINATOR = "aws4_request"

DEFAULT_EXPIRES_SEC = 300
MIN_EXPIRES_SEC = 1
MAX_EXPIRES_SEC = 604800  # 7 days, hard SigV4 limit

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


def encode_rfc3986(value: str) -> str:
    """
    Percent-encode everything outside A-Za-z0-9-_.~ (uppercase hex, UTF-8).
    quote() with no safe chars already escapes ! ' ( ) *.
    """
    return quote(value, safe="")


def encode_key_path(key: str) -> str:
    return "/".join(encode_rfc3986(segment) for segment in key.split("/"))


def format_amz_date(now: datetime) -> str:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def canonical_query(params: Iterable[tuple[str, str]]) -> str:
    encoded = sorted((encode_rfc3986(k), encode_rfc3986(v)) for k, v in params)
    return "&".join(f"{k}={v}" for k, v in encoded)


def disposition_filename(key: str) -> str:
    return key.split("/")[-1] or "file"


def attachment_disposition(key: str) -> str:
    # Quotes are dropped, not escaped: the value is embedded as-is.
    filename = disposition_filename(key).replace('"', "")
    return f'attachment; filename="{filename}"'


def parse_presign_expiry(raw: Optional[Union[str, int]]) -> int:
    """
    Leading-integer parse ("60s" -> 60), 300 for anything non-numeric,
    then clamped to [1, 604800].
    """
    if isinstance(raw, bool):
        return DEFAULT_EXPIRES_SEC
    if isinstance(raw, int):
        value = raw
    else:
        match = _LEADING_INT.match(raw or "")
        if not match:
            return DEFAULT_EXPIRES_SEC
        value = int(match.group(1))
    return _clamp_expiry(value)


def _clamp_expiry(value: int) -> int:
    return max(MIN_EXPIRES_SEC, min(MAX_EXPIRES_SEC, value))


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def credential_scope(date_stamp: str, region: str = REGION) -> str:
    return f"{date_stamp}/{region}/{SERVICE}/{TERMINATOR}"


def build_canonical_request(encoded_path: str, query: str, host: str) -> str:
    return "\n".join(
        [
            "GET",
            f"/{encoded_path}",
            query,
            f"host:{host}\n",
            "host",
            UNSIGNED_PAYLOAD,
        ]
    )


def build_string_to_sign(amz_date: str, scope: str, canonical_request: str) -> str:
    return "\n".join([ALGORITHM, amz_date, scope, _sha256_hex(canonical_request)])


def derive_signing_key(secret_access_key: str, date_stamp: str, region: str = REGION) -> bytes:
    k_date = _hmac_sha256(f"AWS4{secret_access_key}".encode("utf-8"), date_stamp)
    k_region = _hmac_sha256(k_date, region)
    k_service = _hmac_sha256(k_region, SERVICE)
    return _hmac_sha256(k_service, TERMINATOR)


def sign(secret_access_key: str, date_stamp: str, string_to_sign: str, region: str = REGION) -> str:
    signing_key = derive_signing_key(secret_access_key, date_stamp, region)
    return hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


def presign_get(
    identity: BucketIdentity,
    credentials: Credentials,
    key: str,
    expires_in: int = DEFAULT_EXPIRES_SEC,
    now: Optional[datetime] = None,
) -> str:
    """
    Returns a presigned GetObject URL for `key`, valid for `expires_in` seconds.
    The object is served as an attachment named after the last key segment.
    """
    host = identity.host
    encoded_path = encode_key_path(key)
    amz_date = format_amz_date(now or datetime.now(timezone.utc))
    date_stamp = amz_date[:8]
    scope = credential_scope(date_stamp)

    params = [
        ("X-Amz-Algorithm", ALGORITHM),
        ("X-Amz-Content-Sha256", UNSIGNED_PAYLOAD),
        ("X-Amz-Credential", f"{credentials.access_key_id}/{scope}"),
        ("X-Amz-Date", amz_date),
        ("X-Amz-Expires", str(_clamp_expiry(expires_in))),
        ("X-Amz-SignedHeaders", "host"),
        ("response-content-disposition", attachment_disposition(key)),
        ("x-id", "GetObject"),
    ]
    query = canonical_query(params)

    canonical_request = build_canonical_request(encoded_path, query, host)
    string_to_sign = build_string_to_sign(amz_date, scope, canonical_request)
    signature = sign(credentials.secret_access_key.get_secret_value(), date_stamp, string_to_sign)

    return f"https://{host}/{encoded_path}?{query}&X-Amz-Signature={signature}"
