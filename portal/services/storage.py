# portal/services/storage.py
from typing import Optional

import boto3
from botocore.config import Config
from portal.config import settings
import structlog

logger = structlog.get_logger()


class BillStorage:
    """S3-compatible (Cloudflare R2) bucket holding uploaded bills."""

    def __init__(self):
        self._s3 = None
        self.bucket = settings.R2_BUCKET_NAME

    @property
    def s3(self):
        # created on first use so importing the app needs no credentials
        if self._s3 is None:
            self._s3 = boto3.client(
                "s3",
                endpoint_url=settings.R2_ENDPOINT_URL or None,
                aws_access_key_id=settings.R2_ACCESS_KEY_ID or None,
                aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY or None,
                config=Config(signature_version="s3v4"),
                region_name="auto",
            )
        return self._s3

    def upload(
        self, file_bytes: bytes, key: str, content_type: str = "application/pdf"
    ) -> str:
        self.s3.put_object(
            Bucket=self.bucket, Key=key, Body=file_bytes, ContentType=content_type
        )
        logger.info("bill_uploaded", key=key, size=len(file_bytes))
        return key

    def get_presigned_url(self, key: str, expires_in: int = 7 * 24 * 3600) -> str:
        return self.s3.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )

    def public_url(self, key: str, base_url: Optional[str] = None) -> str:
        """Public bucket URL when a public domain is configured, presigned otherwise."""
        base_url = base_url if base_url is not None else settings.R2_PUBLIC_BASE_URL
        if base_url:
            return f"{base_url.rstrip('/')}/{key}"
        return self.get_presigned_url(key)


bill_storage = BillStorage()
