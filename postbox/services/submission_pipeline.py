import logging
import re
from urllib.parse import quote

from postbox.clients import Clients
from postbox.config import DEFAULT_ATTACHMENT_PREFIX
from postbox.errors import PersistenceError, PostboxError, UploadError, ValidationError
from postbox.models.submission import Attachment, Submission, SubmissionResult, new_submission_id

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "email", "message")

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9.-]")


def sanitize_filename(filename: str) -> str:
    """Replace every character outside [A-Za-z0-9.-] with an underscore."""
    sanitized = _UNSAFE_FILENAME_CHARS.sub("_", filename or "")
    return sanitized or "attachment"


def attachment_key(submission_id: str, filename: str, prefix: str = DEFAULT_ATTACHMENT_PREFIX) -> str:
    return f"{prefix}/{submission_id}/{sanitize_filename(filename)}"


def ascii_metadata(value: str) -> str:
    """Percent-encode non-ASCII characters; S3 object metadata must be ASCII."""
    return quote(value, safe="@.+-_!~*'()")


def missing_fields(name: str | None, email: str | None, message: str | None) -> list[str]:
    values = {"name": name, "email": email, "message": message}
    return [f for f in REQUIRED_FIELDS if not values[f] or not values[f].strip()]


class SubmissionPipeline:
    def __init__(self, clients: Clients, attachment_prefix: str = DEFAULT_ATTACHMENT_PREFIX) -> None:
        self._clients = clients
        self._attachment_prefix = attachment_prefix

    def submit(
        self,
        name: str | None,
        email: str | None,
        message: str | None,
        attachment: Attachment | None = None,
    ) -> SubmissionResult:
        """
        Validate, upload the attachment (if any), then persist one record.
        Never raises: every failure comes back as a classified SubmissionResult.
        """
        missing = missing_fields(name, email, message)
        if missing:
            logger.info("[contact] rejected | missing=%s", ",".join(missing))
            return SubmissionResult.failure(ValidationError(missing))

        object_store = self._clients.object_store
        record_store = self._clients.record_store
        try:
            record_store.ensure_configured()
            if attachment is not None:
                object_store.ensure_configured()
        except PostboxError as exc:
            logger.error("[contact] not configured | reason=%s", exc.message)
            return SubmissionResult.failure(exc)

        submission_id = new_submission_id()
        logger.info(
            "[contact] processing | id=%s | message_length=%d | has_file=%s",
            submission_id,
            len(message),
            attachment is not None,
        )

        file_url = ""
        if attachment is not None:
            key = attachment_key(submission_id, attachment.filename, self._attachment_prefix)
            try:
                file_url = object_store.put(
                    key,
                    attachment.content,
                    attachment.content_type,
                    metadata={
                        "original-filename": sanitize_filename(attachment.filename),
                        "uploaded-by": ascii_metadata(email.strip()),
                        "submission-id": submission_id,
                    },
                )
            except PostboxError as exc:
                logger.error("[contact] upload failed | id=%s | kind=%s", submission_id, exc.kind)
                return SubmissionResult.failure(exc)
            except Exception as exc:
                logger.exception("[contact] upload crashed | id=%s", submission_id)
                return SubmissionResult.failure(UploadError(f"Failed to upload file: {exc}"))
            logger.info("[contact] file uploaded | id=%s | key=%s", submission_id, key)

        submission = Submission(
            id=submission_id,
            name=name.strip(),
            email=email.strip(),
            message=message.strip(),
            file_url=file_url,
        )
        try:
            record_store.put(submission)
        except PostboxError as exc:
            error = exc
        except Exception as exc:
            logger.exception("[contact] persist crashed | id=%s", submission_id)
            error = PersistenceError(f"Failed to store submission: {exc}")
        else:
            logger.info("[contact] stored | id=%s", submission_id)
            return SubmissionResult.success(submission)

        if file_url:
            # No compensating delete; the uploaded object stays behind.
            logger.warning("[contact] orphaned attachment | id=%s | url=%s", submission_id, file_url)
        logger.error("[contact] persist failed | id=%s | kind=%s", submission_id, error.kind)
        return SubmissionResult.failure(error)
