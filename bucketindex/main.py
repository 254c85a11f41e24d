from __future__ import annotations

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from bucketindex.core.config import settings
from bucketindex.services.bucket import BucketService

# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("bucketindex")

app = FastAPI(title="Bucket Index", version="1.0.0")


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return PlainTextResponse("not found", status_code=404)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


@app.get("/health")
def health():
    return {"ok": True, "service": "bucket-index"}


@app.api_route("/", methods=["GET", "HEAD"])
def index(path: Optional[str] = None) -> Response:
    """
    HTML directory listing of one level under `path`.
    """
    return BucketService().browse(path)


@app.api_route("/download", methods=["GET", "HEAD"])
def download(key: Optional[str] = None) -> Response:
    """
    302 to a presigned URL when credentials are configured,
    otherwise the object body is streamed through this process.
    """
    return BucketService().download(key)


def run() -> None:
    logger.info("Bucket index starting (bucket=%r)", settings.r2_bucket_name)
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
