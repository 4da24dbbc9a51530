"""Integration tests for the HTTP surface, with the AWS adapters replaced by fakes."""
import base64
from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient

from conftest import SECRET_ACCESS_KEY, FakeIdentityProbe, FakeObjectStore, FakeRecordStore, make_settings
from postbox.clients import Clients
from postbox.errors import AuthenticationError, ConfigurationError, NotFoundError, PersistenceError
from postbox.main import create_app
from postbox.services.diagnostics_service import DiagnosticsService
from postbox.services.submission_pipeline import SubmissionPipeline


def _wire(app, clients, settings=None, clients_error=None):
    settings = settings or make_settings()
    app.state.clients = clients
    app.state.clients_error = clients_error
    app.state.pipeline = SubmissionPipeline(clients) if clients else None
    app.state.diagnostics = DiagnosticsService(settings, clients, clients_error)


@contextmanager
def _client_for(clients, settings=None, clients_error=None):
    app = create_app()
    # Override lifespan state directly
    with TestClient(app, raise_server_exceptions=True) as c:
        _wire(app, clients, settings, clients_error)
        yield c


@pytest.fixture
def client(clients):
    with _client_for(clients) as c:
        yield c


def _failing_clients(record_error) -> Clients:
    return Clients(FakeObjectStore(), FakeRecordStore(error=record_error), FakeIdentityProbe())


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# POST /contact
def test_contact_json_without_file(client, record_store):
    response = client.post("/contact", json={"name": "Ada", "email": "ada@x.com", "message": "hello"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["submissionId"]
    assert "fileUrl" not in data

    assert len(record_store.records) == 1
    record = record_store.records[0].to_record("userId")
    assert record["id"] == data["submissionId"]
    assert record["status"] == "new"
    assert record["fileUrl"] == ""


def test_contact_multipart_with_file(client, record_store, object_store):
    response = client.post(
        "/contact",
        data={"name": "Ada", "email": "ada@x.com", "message": "hello"},
        files={"file": ("my cv (1).pdf", b"%PDF" + b"0" * 2044, "application/pdf")},
    )

    assert response.status_code == 200
    data = response.json()
    key = f"contact-attachments/{data['submissionId']}/my_cv__1_.pdf"
    assert list(object_store.objects) == [key]
    assert len(object_store.objects[key]["body"]) == 2048
    assert data["fileUrl"].endswith(key)
    assert record_store.records[0].file_url == data["fileUrl"]


def test_contact_multipart_without_file(client, object_store):
    response = client.post("/contact", data={"name": "Ada", "email": "ada@x.com", "message": "hello"})
    assert response.status_code == 200
    assert object_store.objects == {}


def test_contact_json_with_base64_file(client, object_store):
    payload = {
        "name": "Ada",
        "email": "ada@x.com",
        "message": "hello",
        "file": {"filename": "notes.txt", "contentType": "text/plain", "content": base64.b64encode(b"hi").decode()},
    }
    response = client.post("/contact", json=payload)

    assert response.status_code == 200
    (stored,) = object_store.objects.values()
    assert stored["body"] == b"hi"
    assert stored["content_type"] == "text/plain"


def test_contact_json_with_bad_base64(client, record_store):
    payload = {"name": "Ada", "email": "ada@x.com", "message": "hello", "file": {"filename": "a", "content": "%%%"}}
    response = client.post("/contact", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
    assert record_store.records == []


def test_contact_missing_fields(client, record_store, object_store):
    response = client.post(
        "/contact",
        data={"name": "Ada", "message": ""},
        files={"file": ("cv.pdf", b"data", "application/pdf")},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "validation_error"
    assert data["context"]["missingFields"] == ["email", "message"]
    assert record_store.records == []
    assert object_store.objects == {}


def test_contact_empty_json_body(client, record_store):
    response = client.post("/contact", content=b"not json", headers={"content-type": "application/json"})
    assert response.status_code == 400
    assert response.json()["context"]["missingFields"] == ["name", "email", "message"]


def test_contact_authentication_failure_is_masked():
    error = AuthenticationError(
        "AWS authentication failed: The security token included in the request is invalid.",
        context={"region": "us-east-1", "accessKeyIdPrefix": "AKIAIOSF...", "secretKeyLength": 40},
    )
    with _client_for(_failing_clients(error)) as c:
        response = c.post("/contact", json={"name": "Ada", "email": "ada@x.com", "message": "hello"})

    assert response.status_code == 401
    data = response.json()
    assert data["error"] == "authentication_error"
    assert data["context"]["accessKeyIdPrefix"] == "AKIAIOSF..."
    assert "AWS_SECRET_ACCESS_KEY" in data["hint"]
    assert SECRET_ACCESS_KEY not in response.text


def test_contact_persist_failure_after_upload_is_failure():
    clients = _failing_clients(PersistenceError("throttled"))
    with _client_for(clients) as c:
        response = c.post(
            "/contact",
            data={"name": "Ada", "email": "ada@x.com", "message": "hello"},
            files={"file": ("cv.pdf", b"data", "application/pdf")},
        )

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert len(clients.object_store.objects) == 1


def test_contact_without_clients_is_configuration_error():
    settings = make_settings(AWS_REGION=None)
    with _client_for(None, settings, ConfigurationError("AWS_REGION")) as c:
        response = c.post("/contact", json={"name": "Ada", "email": "ada@x.com", "message": "hello"})

    assert response.status_code == 500
    assert response.json()["error"] == "configuration_error"
    assert response.json()["context"]["setting"] == "AWS_REGION"


# Diagnostics
def test_aws_config_never_returns_secret(client):
    response = client.get("/aws-config")

    assert response.status_code == 200
    data = response.json()
    assert all(data["configured"].values())
    assert data["values"]["secretAccessKey"] == "set (40 chars)"
    assert SECRET_ACCESS_KEY not in response.text


def test_aws_config_works_without_clients():
    settings = make_settings(AWS_REGION=None)
    with _client_for(None, settings, ConfigurationError("AWS_REGION")) as c:
        response = c.get("/aws-config")

    assert response.status_code == 200
    assert response.json()["configured"]["region"] is False
    assert response.json()["clients"]["initialized"] is False


def test_test_dynamodb(client):
    response = client.get("/test-dynamodb")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["user"].startswith("arn:aws:iam::")
    assert data["table"]["name"] == "contact-submissions"


def test_test_write(client, record_store):
    response = client.post("/test-write")

    assert response.status_code == 200
    data = response.json()
    assert data["tableName"] == "contact-submissions"
    assert record_store.records[0].id == data["testId"]
    assert record_store.records[0].status.value == "test"


def test_test_dynamodb_not_found():
    with _client_for(_failing_clients(NotFoundError("table contact-submissions does not exist"))) as c:
        response = c.get("/test-dynamodb")

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "not_found_error"
    assert data["troubleshooting"][0] == "1. Verify the table name is correct"


# Stored submissions
def test_list_submissions(client):
    client.post("/contact", json={"name": "Ada", "email": "ada@x.com", "message": "hello"})
    client.post("/test-write")

    response = client.get("/submissions")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["count"] == 2
    assert {s["status"] for s in data["submissions"]} == {"new", "test"}
    ada = next(s for s in data["submissions"] if s["status"] == "new")
    assert ada["name"] == "Ada"
    assert ada["fileUrl"] == ""


def test_list_submissions_store_failure():
    with _client_for(_failing_clients(NotFoundError("table contact-submissions does not exist"))) as c:
        response = c.get("/submissions")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found_error"


def test_list_submissions_without_clients():
    with _client_for(None, make_settings(AWS_REGION=None), ConfigurationError("AWS_REGION")) as c:
        response = c.get("/submissions")

    assert response.status_code == 500
    assert response.json()["context"]["setting"] == "AWS_REGION"
