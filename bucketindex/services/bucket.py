# bucketindex/services/bucket.py
from __future__ import annotations

import logging
from typing import Iterator, Optional

from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response, StreamingResponse

from bucketindex.core.config import Settings, settings
from bucketindex.models.storage import StoredObject
from bucketindex.services.listing import build_listing, normalize_prefix, render_index
from bucketindex.services.signer import attachment_disposition, parse_presign_expiry, presign_get
from bucketindex.services.storage_r2 import get_object, list_prefix

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def _iter_body(obj: StoredObject) -> Iterator[bytes]:
    try:
        yield from obj.body.iter_chunks(chunk_size=_CHUNK_SIZE)
    finally:
        obj.body.close()


class BucketService:
    """
    Browses and serves a single bucket.

    Downloads prefer a presigned redirect so object bytes never pass through
    this process. When the credentials are incomplete, or signing blows up,
    the object is streamed from the storage binding instead.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    # -------------------------
    # Listing
    # -------------------------

    def browse(self, raw_path: Optional[str]) -> HTMLResponse:
        prefix = normalize_prefix(raw_path)
        folders, files = list_prefix(prefix, config=self.config)
        listing = build_listing(prefix, folders, files)
        return HTMLResponse(render_index(listing))

    # -------------------------
    # Download
    # -------------------------

    def download(self, key: Optional[str]) -> Response:
        if not key:
            return PlainTextResponse("missing key", status_code=400)

        url = self.presigned_url(key)
        if url:
            return RedirectResponse(url, status_code=302)

        return self.stream(key)

    def presigned_url(self, key: str) -> Optional[str]:
        """
        None when presigning is not configured or failed; either way the
        caller streams instead.
        """
        if not self.config.can_presign():
            return None

        try:
            return presign_get(
                self.config.bucket_identity(),
                self.config.credentials(),
                key,
                expires_in=parse_presign_expiry(self.config.r2_presign_expires),
            )
        except Exception:
            logger.exception("failed to create presigned URL")
            return None

    def stream(self, key: str) -> Response:
        obj = get_object(key, config=self.config)
        if obj is None:
            return PlainTextResponse("not found", status_code=404)

        headers = obj.http_metadata()
        if obj.etag:
            headers["etag"] = obj.etag
        headers["content-disposition"] = attachment_disposition(key)
        if obj.content_length is not None and "content-encoding" not in headers:
            headers["content-length"] = str(obj.content_length)

        return StreamingResponse(
            _iter_body(obj),
            headers=headers,
            media_type=obj.content_type or "application/octet-stream",
        )
