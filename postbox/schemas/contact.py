import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field, field_validator

from postbox.models.submission import Attachment


class AttachmentPayload(BaseModel):
    """A file sent inside a JSON body, content base64-encoded."""

    model_config = ConfigDict(populate_by_name=True)

    filename: str
    content_type: str = Field(default="application/octet-stream", alias="contentType")
    content: str

    @field_validator("content")
    @classmethod
    def content_must_be_base64(cls, v: str) -> str:
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("file content must be base64-encoded")
        return v

    def to_attachment(self) -> Attachment:
        return Attachment(
            filename=self.filename,
            content_type=self.content_type,
            content=base64.b64decode(self.content),
        )


class ContactRequest(BaseModel):
    # Presence is checked by the pipeline so that a missing field is a ValidationError, not a 422.
    name: str | None = None
    email: str | None = None
    message: str | None = None
    file: AttachmentPayload | None = None


class ContactResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    submission_id: str = Field(alias="submissionId")
    file_url: str | None = Field(default=None, alias="fileUrl")
    message: str = "Contact form submitted successfully"
