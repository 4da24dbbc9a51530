import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from postbox.clients import Clients
from postbox.config import Settings
from postbox.credentials import (
    NOT_SET,
    access_key_id_warnings,
    is_valid_access_key_id,
    mask_access_key_id,
    mask_secret,
    secret_access_key_warnings,
)
from postbox.errors import ConfigurationError
from postbox.models.submission import Submission, SubmissionStatus, new_test_id

logger = logging.getLogger(__name__)


class ProbeKind(str, Enum):
    CONFIG = "config"
    READ_PROBE = "read_probe"
    WRITE_PROBE = "write_probe"
    HEALTH = "health"


class DiagnosticsService:
    """
    Answers "is this deployment configured correctly".
    Only the write probe mutates anything: it stores one record with status "test".
    Store failures propagate as classified PostboxError subclasses.
    """

    def __init__(
        self,
        settings: Settings,
        clients: Clients | None,
        clients_error: ConfigurationError | None = None,
    ) -> None:
        self._settings = settings
        self._clients = clients
        self._clients_error = clients_error

    def run(self, kind: ProbeKind) -> dict[str, Any]:
        handlers = {
            ProbeKind.CONFIG: self._config,
            ProbeKind.READ_PROBE: self._read_probe,
            ProbeKind.WRITE_PROBE: self._write_probe,
            ProbeKind.HEALTH: self._health,
        }
        kind = ProbeKind(kind)
        logger.debug("[diagnostics] probe | kind=%s", kind.value)
        return handlers[kind]()

    def _require_clients(self) -> Clients:
        if self._clients is None:
            raise self._clients_error or ConfigurationError("AWS_REGION")
        return self._clients

    def _health(self) -> dict[str, Any]:
        return {"status": "ok"}

    def _config(self) -> dict[str, Any]:
        s = self._settings
        access_key_id = s.access_key_id
        secret = s.secret_access_key
        warnings = access_key_id_warnings(access_key_id) + secret_access_key_warnings(
            s.AWS_SECRET_ACCESS_KEY
        )
        if access_key_id:
            access_key_format = "valid" if is_valid_access_key_id(access_key_id) else "invalid"
        else:
            access_key_format = NOT_SET

        return {
            "success": True,
            "configured": {
                "accessKeyId": bool(access_key_id),
                "secretAccessKey": bool(secret),
                "region": bool(s.region),
                "bucketName": bool(s.bucket_name),
                "tableName": bool(s.table_name),
            },
            "values": {
                "accessKeyId": mask_access_key_id(access_key_id),
                "secretAccessKey": mask_secret(secret),
                "region": s.region or NOT_SET,
                "bucketName": s.bucket_name or NOT_SET,
                "tableName": s.table_name or NOT_SET,
            },
            "clients": {
                "initialized": self._clients is not None,
                "error": self._clients_error.message if self._clients_error else None,
            },
            "debug": {
                "accessKeyIdLength": len(access_key_id) if access_key_id else 0,
                "secretAccessKeyLength": len(secret) if secret else 0,
                "accessKeyIdFormat": access_key_format,
            },
            "warnings": warnings or None,
        }

    def _read_probe(self) -> dict[str, Any]:
        clients = self._require_clients()
        clients.record_store.ensure_configured()
        table = clients.record_store.describe()
        identity = clients.identity_probe.caller_identity()
        logger.info("[diagnostics] read probe ok | table=%s | status=%s", table.name, table.status)
        return {
            "success": True,
            "message": "Successfully connected to DynamoDB",
            "user": identity.arn,
            "table": {
                "name": table.name,
                "status": table.status,
                "itemCount": table.item_count,
                "keySchema": table.key_schema,
            },
        }

    def _write_probe(self) -> dict[str, Any]:
        clients = self._require_clients()
        record_store = clients.record_store
        record_store.ensure_configured()
        submission = Submission(
            id=new_test_id(),
            name="Test User",
            email="test@example.com",
            message="This is a test write from the diagnostic tool",
            status=SubmissionStatus.TEST,
            created_at=datetime.now(timezone.utc),
        )
        record_store.put(submission)
        logger.info("[diagnostics] write probe ok | table=%s | id=%s", record_store.table_name, submission.id)
        return {
            "success": True,
            "message": "Test item written successfully to DynamoDB",
            "testId": submission.id,
            "tableName": record_store.table_name,
        }
