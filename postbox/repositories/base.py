from abc import ABC, abstractmethod

from postbox.models.submission import CallerIdentity, Submission, TableDescription


class AbstractObjectStore(ABC):
    @abstractmethod
    def ensure_configured(self) -> None:
        """Raise ConfigurationError if the target bucket is not configured."""

    @abstractmethod
    def put(
        self, key: str, body: bytes, content_type: str, metadata: dict[str, str] | None = None
    ) -> str:
        """Store a blob under ``key`` and return its URL. Raises UploadError on failure."""


class AbstractRecordStore(ABC):
    @property
    @abstractmethod
    def table_name(self) -> str | None:
        """Name of the target table, or None if not configured."""

    @abstractmethod
    def ensure_configured(self) -> None:
        """Raise ConfigurationError if the target table is not configured."""

    @abstractmethod
    def put(self, submission: Submission) -> None:
        """Persist a submission record keyed by its id."""

    @abstractmethod
    def list(self) -> list[Submission]:
        """Return every stored submission, newest first."""

    @abstractmethod
    def describe(self) -> TableDescription:
        """Return name, status and item count of the target table."""


class AbstractIdentityProbe(ABC):
    @abstractmethod
    def caller_identity(self) -> CallerIdentity:
        """Return the principal the service is authenticated as."""
