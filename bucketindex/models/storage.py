from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Credentials(BaseModel):
    """
    Access key pair for the S3-compatible endpoint.
    The secret stays wrapped so it never shows up in reprs or logs.
    """

    model_config = ConfigDict(frozen=True)

    access_key_id: str = Field(min_length=1)
    secret_access_key: SecretStr


class BucketIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    account_id: str = Field(min_length=1)
    bucket_name: str = Field(min_length=1)
    storage_domain: str = "r2.cloudflarestorage.com"

    @property
    def host(self) -> str:
        # virtual-hosted style: <bucket>.<account>.<domain>
        return f"{self.bucket_name}.{self.account_id}.{self.storage_domain}"


class DirectoryListing(BaseModel):
    prefix: str = ""
    parent: str = ""
    folders: list[str] = Field(default_factory=list)  # full prefixes, "a/b/"
    files: list[str] = Field(default_factory=list)  # full keys

    @property
    def is_empty(self) -> bool:
        return not self.folders and not self.files


class StoredObject(BaseModel):
    """
    Result of a GetObject call, ready to be streamed back to the client.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: str
    body: Any  # botocore StreamingBody (or anything with iter_chunks/close)
    etag: Optional[str] = None
    content_type: Optional[str] = None
    content_encoding: Optional[str] = None
    content_language: Optional[str] = None
    content_disposition: Optional[str] = None
    cache_control: Optional[str] = None
    expires: Optional[str] = None
    content_length: Optional[int] = None

    def http_metadata(self) -> dict[str, str]:
        headers = {
            "content-type": self.content_type,
            "content-encoding": self.content_encoding,
            "content-language": self.content_language,
            "content-disposition": self.content_disposition,
            "cache-control": self.cache_control,
            "expires": self.expires,
        }
        return {k: v for k, v in headers.items() if v}
