from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ATTACHMENT_PREFIX = "contact-attachments"


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    PORT: int = 3002
    LOG_LEVEL: str = "info"
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # Raw values; whitespace is reported by the diagnostics, so nothing is stripped here.
    AWS_REGION: str | None = None
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None
    S3_BUCKET_NAME: str | None = Field(
        default=None, validation_alias=AliasChoices("S3_BUCKET_NAME", "AWS_S3_BUCKET_NAME")
    )
    DYNAMODB_TABLE_NAME: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DYNAMODB_TABLE_NAME", "AWS_DYNAMODB_TABLE_NAME"),
    )
    DYNAMODB_PARTITION_KEY: str = "userId"
    ATTACHMENT_PREFIX: str = DEFAULT_ATTACHMENT_PREFIX

    @property
    def region(self) -> str | None:
        return _clean(self.AWS_REGION)

    @property
    def access_key_id(self) -> str | None:
        return _clean(self.AWS_ACCESS_KEY_ID)

    @property
    def secret_access_key(self) -> str | None:
        return _clean(self.AWS_SECRET_ACCESS_KEY)

    @property
    def bucket_name(self) -> str | None:
        return _clean(self.S3_BUCKET_NAME)

    @property
    def table_name(self) -> str | None:
        return _clean(self.DYNAMODB_TABLE_NAME)


settings = Settings()
