import logging
from dataclasses import dataclass

import boto3
from botocore.exceptions import BotoCoreError

from postbox.config import Settings
from postbox.credentials import credential_context
from postbox.errors import ConfigurationError
from postbox.repositories.attachment_store import AttachmentStore
from postbox.repositories.base import AbstractIdentityProbe, AbstractObjectStore, AbstractRecordStore
from postbox.repositories.identity_probe import IdentityProbe
from postbox.repositories.submission_repository import SubmissionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Clients:
    """The external collaborators the service talks to, built once at startup."""

    object_store: AbstractObjectStore
    record_store: AbstractRecordStore
    identity_probe: AbstractIdentityProbe

    @classmethod
    def from_settings(cls, settings: Settings) -> "Clients":
        """
        Build boto3-backed stores from settings.
        Raises ConfigurationError if the region is missing or only half of an
        explicit credential pair is set. With no explicit keys, boto3's default
        credential chain is used.
        """
        region = settings.region
        if not region:
            raise ConfigurationError("AWS_REGION")

        access_key_id = settings.access_key_id
        secret_access_key = settings.secret_access_key
        if access_key_id and not secret_access_key:
            raise ConfigurationError("AWS_SECRET_ACCESS_KEY")
        if secret_access_key and not access_key_id:
            raise ConfigurationError("AWS_ACCESS_KEY_ID")

        try:
            session = boto3.session.Session(
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                region_name=region,
            )
            s3_client = session.client("s3")
            dynamodb = session.resource("dynamodb")
            sts_client = session.client("sts")
        except BotoCoreError as exc:
            raise ConfigurationError("AWS clients", f"Failed to initialize AWS clients: {exc}") from exc

        context = credential_context(settings)
        logger.info(
            "[clients] initialized | region=%s | access_key=%s",
            region,
            f"{access_key_id[:4]}***" if access_key_id else "default chain",
        )
        return cls(
            object_store=AttachmentStore(s3_client, settings.bucket_name, region),
            record_store=SubmissionRepository(
                dynamodb,
                settings.table_name,
                partition_key=settings.DYNAMODB_PARTITION_KEY,
                credential_context=context,
            ),
            identity_probe=IdentityProbe(sts_client, credential_context=context),
        )
