# File: tests/test_functions.py

from urllib.parse import urlsplit

import pytest

from furniture_ocr.core.errors import ExtractionError, InvalidArgumentError
from furniture_ocr.schemas.extraction import ExtractionResult
from furniture_ocr.services import extraction_service


def saved_project(client, headers, title="Kitchen Cabinet"):
    resp = client.post(
        "/api/v1/projects/",
        headers=headers,
        json={
            "title": title,
            "image_url": "http://testserver/image.jpg",
            "materials": ["Plywood", "Hinges"],
            "measurements": ["60cm x 40cm"],
            "instructions": ["Attach hinges", "Hang the door"],
        },
    )
    return resp.json()


def export_payload(project):
    keys = ("id", "title", "materials", "measurements", "instructions")
    return {"project": {k: project[k] for k in keys}}


def download(client, url):
    parts = urlsplit(url)
    return client.get(f"{parts.path}?{parts.query}")


# -----------------------------
# processOCR
# -----------------------------
def test_process_ocr_returns_sample(client, auth_headers):
    resp = client.post(
        "/api/v1/functions/processOCR",
        json={"image_url": "http://testserver/image.jpg"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "full_text": "Simulated text extracted by OCR",
        "materials": ["Wood", "Screws"],
        "measurements": ["50cm", "20cm"],
        "instructions": ["Cut the wood", "Join the pieces"],
    }


def test_process_ocr_requires_image_url(client, auth_headers):
    resp = client.post("/api/v1/functions/processOCR", json={}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"kind": "invalid-argument", "message": "Missing imageUrl"}


def test_process_ocr_requires_login(client):
    resp = client.post("/api/v1/functions/processOCR", json={"image_url": "x"})
    assert resp.status_code == 401


def test_extractor_failures_are_wrapped():
    class Broken(extraction_service.Extractor):
        def extract(self, image_url):
            raise RuntimeError("engine crashed")

    with pytest.raises(ExtractionError) as excinfo:
        extraction_service.process_image("http://x/image.jpg", extractor=Broken())
    assert excinfo.value.message == "Failed to extract text from image"
    assert excinfo.value.status_code == 500


def test_sample_result_is_not_shared():
    first = extraction_service.process_image("a")
    first.materials.append("Glue")
    assert extraction_service.process_image("b").materials == ["Wood", "Screws"]


def test_process_image_rejects_empty_url():
    with pytest.raises(InvalidArgumentError):
        extraction_service.process_image("")


def test_result_defaults_are_empty():
    assert ExtractionResult().model_dump() == {
        "full_text": "",
        "materials": [],
        "measurements": [],
        "instructions": [],
    }


# -----------------------------
# generatePDF / generateExcel
# -----------------------------
def test_generate_pdf(client, auth_headers):
    project = saved_project(client, auth_headers, title="Kitchen/Cabinet:v2")
    resp = client.post("/api/v1/functions/generatePDF", json=export_payload(project), headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["filename"] == "Kitchen-Cabinet-v2.pdf"

    pdf = download(client, body["download_url"])
    assert pdf.status_code == 200
    assert pdf.content.startswith(b"%PDF")
    assert "Kitchen-Cabinet-v2.pdf" in pdf.headers["content-disposition"]


def test_generate_excel(client, auth_headers):
    project = saved_project(client, auth_headers)
    resp = client.post("/api/v1/functions/generateExcel", json=export_payload(project), headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["filename"] == "Kitchen Cabinet.xlsx"

    xlsx = download(client, resp.json()["download_url"])
    assert xlsx.status_code == 200
    # xlsx files are zip archives
    assert xlsx.content[:2] == b"PK"


def test_exports_are_stored_per_project(client, auth_headers, storage):
    project = saved_project(client, auth_headers)
    first = client.post("/api/v1/functions/generatePDF", json=export_payload(project), headers=auth_headers)
    second = client.post("/api/v1/functions/generatePDF", json=export_payload(project), headers=auth_headers)

    first_path = storage.path_from_url(first.json()["download_url"])
    second_path = storage.path_from_url(second.json()["download_url"])
    assert first_path.startswith(f"exports/{project['id']}/")
    assert first_path.endswith(".pdf")
    assert first_path != second_path


def test_export_of_foreign_project_is_refused(client, auth_headers, other_headers):
    project = saved_project(client, auth_headers)
    resp = client.post("/api/v1/functions/generatePDF", json=export_payload(project), headers=other_headers)
    assert resp.status_code == 404


def test_export_of_unknown_project_is_refused(client, auth_headers):
    payload = {"project": {"id": "nope", "title": "Ghost"}}
    resp = client.post("/api/v1/functions/generateExcel", json=payload, headers=auth_headers)
    assert resp.status_code == 404
