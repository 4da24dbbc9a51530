import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from postbox.errors import ConfigurationError
from postbox.models.submission import Submission, TableDescription
from postbox.repositories.aws_errors import translate_aws_error
from postbox.repositories.base import AbstractRecordStore

logger = logging.getLogger(__name__)


class SubmissionRepository(AbstractRecordStore):
    """DynamoDB-backed record store. One item per submission, never updated."""

    def __init__(
        self,
        dynamodb,
        table_name: str | None,
        partition_key: str = "userId",
        credential_context: dict[str, Any] | None = None,
    ) -> None:
        self._dynamodb = dynamodb
        self._table_name = table_name
        self._partition_key = partition_key
        self._credential_context = credential_context or {}

    @property
    def table_name(self) -> str | None:
        return self._table_name

    def ensure_configured(self) -> None:
        if not self._table_name:
            raise ConfigurationError("DYNAMODB_TABLE_NAME")

    def _context(self) -> dict[str, Any]:
        return {**self._credential_context, "tableName": self._table_name}

    def put(self, submission: Submission) -> None:
        self.ensure_configured()
        table = self._dynamodb.Table(self._table_name)
        try:
            table.put_item(Item=submission.to_record(self._partition_key))
        except (ClientError, BotoCoreError) as exc:
            logger.error(
                "[dynamodb] put_item failed | table=%s | id=%s | error=%s",
                self._table_name,
                submission.id,
                exc,
            )
            raise translate_aws_error(
                exc, resource=f"table {self._table_name}", credential_context=self._context()
            ) from exc
        logger.info("[dynamodb] stored | table=%s | id=%s", self._table_name, submission.id)

    def list(self) -> list[Submission]:
        self.ensure_configured()
        table = self._dynamodb.Table(self._table_name)
        try:
            response = table.scan()
            items = response.get("Items", [])
            while "LastEvaluatedKey" in response:
                response = table.scan(ExclusiveStartKey=response["LastEvaluatedKey"])
                items.extend(response.get("Items", []))
        except (ClientError, BotoCoreError) as exc:
            logger.error("[dynamodb] scan failed | table=%s | error=%s", self._table_name, exc)
            raise translate_aws_error(
                exc, resource=f"table {self._table_name}", credential_context=self._context()
            ) from exc

        submissions = [Submission.from_record(item, self._partition_key) for item in items]
        submissions.sort(key=lambda s: s.created_at, reverse=True)
        logger.info("[dynamodb] listed | table=%s | count=%d", self._table_name, len(submissions))
        return submissions

    def describe(self) -> TableDescription:
        self.ensure_configured()
        try:
            response = self._dynamodb.meta.client.describe_table(TableName=self._table_name)
        except (ClientError, BotoCoreError) as exc:
            logger.error("[dynamodb] describe_table failed | table=%s | error=%s", self._table_name, exc)
            raise translate_aws_error(
                exc, resource=f"table {self._table_name}", credential_context=self._context()
            ) from exc
        table = response.get("Table", {})
        return TableDescription(
            name=table.get("TableName", self._table_name),
            status=table.get("TableStatus", "UNKNOWN"),
            item_count=int(table.get("ItemCount", 0)),
            key_schema=table.get("KeySchema", []),
        )
