import pytest

from listing_pdf import main as pipeline
from listing_pdf.cli import main

from .conftest import SAMPLE_JSON


@pytest.fixture(autouse=True)
def fake_engine(monkeypatch):
    monkeypatch.setattr(pipeline, "html_to_pdf", lambda html_content, base_url=None: b"%PDF-1.7 fake")
    monkeypatch.delenv("LISTING_PDF_SOURCE", raising=False)


def test_writes_pdf(tmp_path):
    output = tmp_path / "sheet.pdf"
    main(["--listing-id", "42", "--source", str(SAMPLE_JSON), "--output", str(output), "--no-qr-embed"])

    assert output.read_bytes() == b"%PDF-1.7 fake"


def test_unknown_listing_exits_1(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["--listing-id", "999", "--source", str(SAMPLE_JSON), "--no-qr-embed"])
    assert exc.value.code == 1


def test_source_required():
    with pytest.raises(SystemExit) as exc:
        main(["--listing-id", "42"])
    assert exc.value.code == 1
