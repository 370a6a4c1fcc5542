"""Tests for /api/forms and /api/intake"""
from intakefill.app.core.config import settings


def _upload(client, content, filename="plan.pdf", content_type="application/pdf"):
    return client.post("/api/forms/upload", files={"file": (filename, content, content_type)})


def test_root_and_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").status_code == 200


def test_upload_returns_fields_and_mappings(client, plan_pdf_bytes):
    r = _upload(client, plan_pdf_bytes)
    assert r.status_code == 200
    data = r.json()
    assert data["source"] == "pdf"
    assert data["has_document"] is True
    assert data["field_count"] == 15
    assert data["mappings"]["clientName"] == "CLIENT NAME"
    assert data["form_data"] == {}


def test_upload_rejects_non_pdf(client):
    r = _upload(client, b"hello", filename="notes.txt", content_type="text/plain")
    assert r.status_code == 400


def test_upload_rejects_empty_pdf(client):
    r = _upload(client, b"")
    assert r.status_code == 400


def test_unknown_document_is_404(client):
    assert client.get("/api/forms/does-not-exist").status_code == 404
    assert client.post("/api/forms/does-not-exist/fill").status_code == 404


def test_intake_fill_and_download(client, plan_pdf_bytes, sample_intake):
    document_id = _upload(client, plan_pdf_bytes).json()["document_id"]

    r = client.post(f"/api/forms/{document_id}/intake", json={"text": sample_intake})
    assert r.status_code == 200
    data = r.json()
    assert data["extracted"]["clientName"] == "Jane Doe"
    assert data["mapped"]["CLIENT NAME"] == "Jane Doe"
    assert data["mapped"]["Fiction Manuscript"] is True
    assert data["form_data"] == data["mapped"]
    assert data["stats"]["filledFields"] == 9
    assert data["validation"]["isValid"] is True

    r = client.post(f"/api/forms/{document_id}/fill")
    assert r.status_code == 200
    fill = r.json()
    assert fill["state"] == "Completed"
    assert fill["success_count"] == 9
    assert fill["failure_count"] == 0

    r = client.post(f"/api/forms/{document_id}/download")
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert 'filename="Jane-Doe-Services-Plan-' in r.headers["content-disposition"]
    assert r.content.startswith(b"%PDF")


def test_intake_accumulates_and_clears(client, plan_pdf_bytes):
    document_id = _upload(client, plan_pdf_bytes).json()["document_id"]
    client.post(f"/api/forms/{document_id}/intake", json={"text": "Client: Jane Doe"})
    r = client.post(f"/api/forms/{document_id}/intake", json={"text": "Email: jane@example.com"})
    assert r.json()["form_data"] == {"CLIENT NAME": "Jane Doe", "EMAIL ADDRESS": "jane@example.com"}

    assert client.delete(f"/api/forms/{document_id}/form-data").status_code == 200
    assert client.get(f"/api/forms/{document_id}").json()["form_data"] == {}


def test_analysis(client, plan_pdf_bytes):
    document_id = _upload(client, plan_pdf_bytes).json()["document_id"]
    r = client.get(f"/api/forms/{document_id}/analysis")
    assert r.status_code == 200
    data = r.json()
    assert data["totalFields"] == 15
    assert data["mappedFields"] == 14
    assert data["unmappedFields"] == 1


def test_intake_text_too_long(client, plan_pdf_bytes):
    document_id = _upload(client, plan_pdf_bytes).json()["document_id"]
    r = client.post(
        f"/api/forms/{document_id}/intake",
        json={"text": "x" * (settings.max_intake_chars + 1)},
    )
    assert r.status_code == 413


def test_parse_intake_endpoint(client, sample_intake):
    r = client.post("/api/intake/parse", json={"text": sample_intake})
    assert r.status_code == 200
    data = r.json()
    assert data["clientName"] == "Jane Doe"
    assert data["wordCount"] == 75000
    assert data["services"]["editing"]


def test_parse_intake_endpoint_empty(client):
    data = client.post("/api/intake/parse", json={"text": ""}).json()
    assert data["clientName"] is None
    assert data["services"] == {"editing": [], "marketing": [], "publishing": []}
