import pytest
from fastapi.testclient import TestClient

from listing_pdf import main as pipeline
from listing_pdf import web
from listing_pdf.access import NonceSigner, download_action
from listing_pdf.config import Settings
from listing_pdf.web import create_app

FAKE_PDF = b"%PDF-1.7 fake"

OWNER_HEADERS = {"X-User-Id": "7"}
ADMIN_HEADERS = {"X-User-Id": "1", "X-User-Role": "editor, administrator"}
STRANGER_HEADERS = {"X-User-Id": "99"}


@pytest.fixture
def app(store, monkeypatch):
    monkeypatch.setattr(pipeline, "html_to_pdf", lambda html_content, base_url=None: FAKE_PDF)
    return create_app(store, Settings(secret_key="test-secret", embed_qr=False))


@pytest.fixture
def client(app):
    return TestClient(app)


def nonce_for(app, user_id: int, listing_id: int = 42) -> str:
    return app.state.signer.create(download_action(listing_id), user_id)


def test_owner_downloads_pdf(app, client):
    response = client.get(
        "/api/listings/42/pdf",
        params={"nonce": nonce_for(app, 7)},
        headers=OWNER_HEADERS,
    )

    assert response.status_code == 200
    assert response.content == FAKE_PDF
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="green_acres_farm_listing.pdf"'
    assert response.headers["cache-control"] == "private, max-age=0, must-revalidate"
    assert response.headers["content-length"] == str(len(FAKE_PDF))


def test_admin_downloads_pdf(app, client):
    response = client.get("/api/listings/42/pdf", params={"nonce": nonce_for(app, 1)}, headers=ADMIN_HEADERS)
    assert response.status_code == 200


def test_missing_nonce_denied(client):
    response = client.get("/api/listings/42/pdf", headers=OWNER_HEADERS)

    assert response.status_code == 403
    assert response.content != FAKE_PDF


def test_stranger_denied(app, client):
    response = client.get("/api/listings/42/pdf", params={"nonce": nonce_for(app, 99)}, headers=STRANGER_HEADERS)

    assert response.status_code == 403
    assert "permission" in response.text


def test_anonymous_denied(app, client):
    response = client.get("/api/listings/42/pdf", params={"nonce": nonce_for(app, 0)})
    assert response.status_code == 403


def test_unknown_listing(app, client):
    response = client.get("/api/listings/999/pdf", params={"nonce": nonce_for(app, 1, 999)}, headers=ADMIN_HEADERS)
    assert response.status_code == 404


def test_pipeline_failure_returns_500(app, client, monkeypatch):
    def broken(html_content, base_url=None):
        raise RuntimeError("no engine")

    monkeypatch.setattr(pipeline, "html_to_pdf", broken)
    response = client.get("/api/listings/42/pdf", params={"nonce": nonce_for(app, 7)}, headers=OWNER_HEADERS)

    assert response.status_code == 500
    assert response.text == "PDF generation failed"
    assert "application/pdf" not in response.headers["content-type"]


def test_nonce_endpoint(app, client):
    response = client.get("/api/listings/42/nonce", headers=OWNER_HEADERS)
    assert response.status_code == 200

    nonce = response.json()["nonce"]
    download = client.get("/api/listings/42/pdf", params={"nonce": nonce}, headers=OWNER_HEADERS)
    assert download.status_code == 200


def test_nonce_endpoint_denies_stranger(client):
    assert client.get("/api/listings/42/nonce", headers=STRANGER_HEADERS).status_code == 403
    assert client.get("/api/listings/999/nonce", headers=ADMIN_HEADERS).status_code == 404


def test_placeholder_secret_tokens_rejected(store, monkeypatch):
    monkeypatch.setattr(pipeline, "html_to_pdf", lambda html_content, base_url=None: FAKE_PDF)
    client = TestClient(create_app(store, Settings(embed_qr=False)))
    forged = NonceSigner("change-me").create(download_action(42), 7)

    response = client.get("/api/listings/42/pdf", params={"nonce": forged}, headers=OWNER_HEADERS)

    assert response.status_code == 403
    assert response.content != FAKE_PDF


def test_serve_runs_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(web.uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

    web.serve(["--host", "0.0.0.0", "--port", "9000"])

    assert calls == [("listing_pdf.web:app", {"host": "0.0.0.0", "port": 9000, "reload": False})]
