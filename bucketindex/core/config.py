# bucketindex/core/config.py
from __future__ import annotations

from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from bucketindex.models.storage import BucketIdentity, Credentials


class Settings(BaseSettings):
    """
    Environment settings for the bucket front-end.

    Every R2 field is optional:
    - listing/streaming goes through boto3, which can fall back to its own
      credential chain when the keys here are blank
    - presigning needs all four of account, bucket, key id and secret
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # R2 / S3
    r2_account_id: str = Field(default="", alias="R2_ACCOUNT_ID")
    r2_bucket_name: str = Field(default="", alias="R2_BUCKET_NAME")
    r2_access_key_id: str = Field(default="", alias="R2_ACCESS_KEY_ID")
    r2_secret_access_key: str = Field(default="", alias="R2_SECRET_ACCESS_KEY")
    r2_storage_domain: str = Field(default="r2.cloudflarestorage.com", alias="R2_STORAGE_DOMAIN")
    r2_endpoint: Optional[str] = Field(default=None, alias="R2_ENDPOINT")
    r2_region: str = Field(default="auto", alias="R2_REGION")

    # Raw on purpose: junk values fall back to the default TTL instead of
    # failing settings validation at boot.
    r2_presign_expires: Optional[str] = Field(default=None, alias="R2_PRESIGN_EXPIRES")

    @property
    def endpoint_url(self) -> Optional[str]:
        if self.r2_endpoint and self.r2_endpoint.strip():
            return self.r2_endpoint.strip()
        account = self.r2_account_id.strip()
        if not account:
            return None
        return f"https://{account}.{self.r2_storage_domain}"

    def can_presign(self) -> bool:
        return all(
            v.strip()
            for v in (
                self.r2_account_id,
                self.r2_bucket_name,
                self.r2_access_key_id,
                self.r2_secret_access_key,
            )
        )

    def bucket_identity(self) -> BucketIdentity:
        return BucketIdentity(
            account_id=self.r2_account_id.strip(),
            bucket_name=self.r2_bucket_name.strip(),
            storage_domain=self.r2_storage_domain.strip(),
        )

    def credentials(self) -> Credentials:
        """
        Built per request from the settings; never cached elsewhere.
        """
        return Credentials(
            access_key_id=self.r2_access_key_id.strip(),
            secret_access_key=SecretStr(self.r2_secret_access_key.strip()),
        )


settings = Settings()
