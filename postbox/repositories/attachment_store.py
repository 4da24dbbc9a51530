import logging

from botocore.exceptions import BotoCoreError, ClientError

from postbox.errors import ConfigurationError, UploadError
from postbox.repositories.aws_errors import error_code, error_message
from postbox.repositories.base import AbstractObjectStore

logger = logging.getLogger(__name__)


class AttachmentStore(AbstractObjectStore):
    """S3-backed object store for contact form attachments."""

    def __init__(self, s3_client, bucket_name: str | None, region: str | None) -> None:
        self._s3 = s3_client
        self._bucket_name = bucket_name
        self._region = region

    def ensure_configured(self) -> None:
        if not self._bucket_name:
            raise ConfigurationError("S3_BUCKET_NAME")

    def object_url(self, key: str) -> str:
        return f"https://{self._bucket_name}.s3.{self._region}.amazonaws.com/{key}"

    def put(
        self, key: str, body: bytes, content_type: str, metadata: dict[str, str] | None = None
    ) -> str:
        self.ensure_configured()
        logger.info("[s3] uploading | bucket=%s | key=%s | bytes=%d", self._bucket_name, key, len(body))
        try:
            self._s3.put_object(
                Bucket=self._bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type or "application/octet-stream",
                Metadata=metadata or {},
            )
        except (ClientError, BotoCoreError) as exc:
            code = error_code(exc)
            logger.error("[s3] upload failed | bucket=%s | key=%s | code=%s", self._bucket_name, key, code)
            raise UploadError(
                f"Failed to upload file to S3: {error_message(exc)}",
                context={"bucketName": self._bucket_name, "providerCode": code},
            ) from exc
        return self.object_url(key)
