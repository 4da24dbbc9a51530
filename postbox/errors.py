"""Error taxonomy shared by the submission pipeline and the diagnostics.

Every failure that leaves the service is one of the six kinds below. Provider
exceptions are translated into them at the store adapters, never later.
"""
from typing import Any

REMEDIATION_HINTS: dict[str, list[str]] = {
    "validation_error": [
        "Name, email, and message are required.",
    ],
    "configuration_error": [
        "Set the missing value in the deployment environment (or .env) and restart the service.",
    ],
    "upload_error": [
        "1. Verify the S3 bucket exists in the configured region",
        "2. Check that the credentials allow s3:PutObject on the bucket",
        "3. Retry the submission without an attachment if the problem persists",
    ],
    "authentication_error": [
        "1. AWS_ACCESS_KEY_ID is incorrect - Please double-check the value",
        "2. AWS_SECRET_ACCESS_KEY is incorrect - Please verify there are no typos",
        "3. The credentials have extra spaces/newlines - Re-enter them carefully",
        "4. AWS_REGION does not match your table location - Check your DynamoDB console",
        "5. The IAM user needs dynamodb:DescribeTable and dynamodb:PutItem permissions",
    ],
    "not_found_error": [
        "1. Verify the table name is correct",
        "2. Check that the table is in the correct AWS region",
        "3. Ensure the table has been created in your AWS account",
    ],
    "persistence_error": [
        "Please check the server logs for more details.",
    ],
}


class PostboxError(Exception):
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    @property
    def troubleshooting(self) -> list[str]:
        return REMEDIATION_HINTS.get(self.kind, [])

    @property
    def hint(self) -> str:
        return "\n".join(self.troubleshooting)

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": False,
            "error": self.kind,
            "message": self.message,
            "hint": self.hint,
            "troubleshooting": self.troubleshooting,
        }
        if self.context:
            body["context"] = self.context
        return body


class ValidationError(PostboxError):
    kind = "validation_error"
    status_code = 400

    def __init__(self, missing_fields: list[str], message: str | None = None) -> None:
        self.missing_fields = missing_fields
        super().__init__(
            message or f"Missing required fields: {', '.join(missing_fields)}",
            context={"missingFields": missing_fields} if missing_fields else None,
        )


class ConfigurationError(PostboxError):
    kind = "configuration_error"
    status_code = 500

    def __init__(self, setting: str, message: str | None = None) -> None:
        self.setting = setting
        super().__init__(message or f"{setting} not configured", context={"setting": setting})


class UploadError(PostboxError):
    kind = "upload_error"
    status_code = 502


class AuthenticationError(PostboxError):
    kind = "authentication_error"
    status_code = 401


class NotFoundError(PostboxError):
    kind = "not_found_error"
    status_code = 404


class PersistenceError(PostboxError):
    kind = "persistence_error"
    status_code = 500
