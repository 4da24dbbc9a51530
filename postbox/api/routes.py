import asyncio
import logging
from json import JSONDecodeError

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaValidationError
from starlette.datastructures import UploadFile

from postbox.clients import Clients
from postbox.errors import ConfigurationError, ValidationError
from postbox.models.submission import Attachment
from postbox.schemas.contact import ContactRequest, ContactResponse
from postbox.services.diagnostics_service import ProbeKind
from postbox.services.submission_pipeline import SubmissionPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

_FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def _form_text(value) -> str | None:
    return value if isinstance(value, str) else None


async def _read_contact_request(request: Request) -> tuple[ContactRequest, Attachment | None]:
    """Accept either a multipart/urlencoded form or a JSON body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        payload = ContactRequest(
            name=_form_text(form.get("name")),
            email=_form_text(form.get("email")),
            message=_form_text(form.get("message")),
        )
        upload = form.get("file")
        if isinstance(upload, UploadFile) and upload.filename:
            content = await upload.read()
            return payload, Attachment(
                filename=upload.filename,
                content_type=upload.content_type or "application/octet-stream",
                content=content,
            )
        return payload, None

    try:
        body = await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        body = {}
    if not isinstance(body, dict):
        body = {}
    try:
        payload = ContactRequest.model_validate(body)
    except SchemaValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise ValidationError(fields, f"Invalid fields: {', '.join(fields)}") from exc
    return payload, payload.file.to_attachment() if payload.file else None


def _pipeline(request: Request) -> SubmissionPipeline:
    pipeline = request.app.state.pipeline
    if pipeline is None:
        raise request.app.state.clients_error or ConfigurationError("AWS_REGION")
    return pipeline


def _clients(request: Request) -> Clients:
    clients = request.app.state.clients
    if clients is None:
        raise request.app.state.clients_error or ConfigurationError("AWS_REGION")
    return clients


@router.get("/health")
async def health(request: Request) -> dict:
    return request.app.state.diagnostics.run(ProbeKind.HEALTH)


@router.post("/contact")
async def contact(request: Request) -> JSONResponse:
    payload, attachment = await _read_contact_request(request)
    pipeline = _pipeline(request)

    result = await asyncio.to_thread(
        pipeline.submit, payload.name, payload.email, payload.message, attachment
    )
    if not result.ok:
        return JSONResponse(status_code=result.error.status_code, content=result.error.to_response())

    submission = result.submission
    response = ContactResponse(submission_id=submission.id, file_url=submission.file_url or None)
    return JSONResponse(content=response.model_dump(by_alias=True, exclude_none=True))


@router.get("/aws-config")
async def aws_config(request: Request) -> dict:
    return request.app.state.diagnostics.run(ProbeKind.CONFIG)


@router.get("/test-dynamodb")
async def test_dynamodb(request: Request) -> dict:
    return await asyncio.to_thread(request.app.state.diagnostics.run, ProbeKind.READ_PROBE)


@router.post("/test-write")
async def test_write(request: Request) -> dict:
    return await asyncio.to_thread(request.app.state.diagnostics.run, ProbeKind.WRITE_PROBE)


@router.get("/submissions")
async def submissions(request: Request) -> dict:
    record_store = _clients(request).record_store
    stored = await asyncio.to_thread(record_store.list)
    return {
        "success": True,
        "count": len(stored),
        "submissions": [s.to_record("id") for s in stored],
    }
