import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from postbox.errors import PostboxError


class SubmissionStatus(str, Enum):
    NEW = "new"
    TEST = "test"


def new_submission_id() -> str:
    return str(uuid.uuid4())


def new_test_id() -> str:
    return f"test-{uuid.uuid4().hex}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Attachment:
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class Submission:
    name: str
    email: str
    message: str
    id: str = field(default_factory=new_submission_id)
    file_url: str = ""
    status: SubmissionStatus = SubmissionStatus.NEW
    created_at: datetime = field(default_factory=_utcnow)

    def to_record(self, partition_key: str) -> dict[str, str]:
        """Flatten into the stored record shape, keyed by ``partition_key``."""
        record = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "message": self.message,
            "fileUrl": self.file_url,
            "timestamp": self.created_at.isoformat(),
            "status": self.status.value,
        }
        record[partition_key] = self.id
        return record

    @classmethod
    def from_record(cls, record: dict, partition_key: str) -> "Submission":
        # Older diagnostic writes stored only the partition key, without id or fileUrl.
        timestamp = record.get("timestamp")
        return cls(
            id=record.get("id") or record.get(partition_key, ""),
            name=record.get("name", ""),
            email=record.get("email", ""),
            message=record.get("message", ""),
            file_url=record.get("fileUrl", ""),
            status=SubmissionStatus(record.get("status", SubmissionStatus.NEW.value)),
            created_at=_parse_timestamp(timestamp) if timestamp else _utcnow(),
        )


@dataclass(frozen=True)
class SubmissionResult:
    """Either a persisted submission or exactly one classified error."""

    submission: Submission | None = None
    error: PostboxError | None = None

    def __post_init__(self) -> None:
        if (self.submission is None) == (self.error is None):
            raise ValueError("SubmissionResult holds exactly one of submission or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, submission: Submission) -> "SubmissionResult":
        return cls(submission=submission)

    @classmethod
    def failure(cls, error: PostboxError) -> "SubmissionResult":
        return cls(error=error)


@dataclass(frozen=True)
class CallerIdentity:
    account: str
    arn: str
    user_id: str = ""


@dataclass(frozen=True)
class TableDescription:
    name: str
    status: str
    item_count: int
    key_schema: list[dict] = field(default_factory=list)
