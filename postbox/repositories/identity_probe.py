import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from postbox.models.submission import CallerIdentity
from postbox.repositories.aws_errors import translate_aws_error
from postbox.repositories.base import AbstractIdentityProbe

logger = logging.getLogger(__name__)


class IdentityProbe(AbstractIdentityProbe):
    def __init__(self, sts_client, credential_context: dict[str, Any] | None = None) -> None:
        self._sts = sts_client
        self._credential_context = credential_context or {}

    def caller_identity(self) -> CallerIdentity:
        try:
            response = self._sts.get_caller_identity()
        except (ClientError, BotoCoreError) as exc:
            logger.error("[sts] get_caller_identity failed | error=%s", exc)
            raise translate_aws_error(
                exc, resource="caller identity", credential_context=self._credential_context
            ) from exc
        return CallerIdentity(
            account=response.get("Account", ""),
            arn=response.get("Arn", ""),
            user_id=response.get("UserId", ""),
        )
