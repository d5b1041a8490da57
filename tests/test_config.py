import pytest

from listing_pdf.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LISTING_PDF_SECRET", "LISTING_PDF_WHOLESALE_MODE", "LISTING_PDF_EMBED_QR"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize("value", [None, "", "change-me"])
def test_unset_secret_gets_random_key(monkeypatch, value):
    if value is not None:
        monkeypatch.setenv("LISTING_PDF_SECRET", value)

    first = Settings.from_env().secret_key
    second = Settings.from_env().secret_key

    assert first not in ("", "change-me")
    assert len(first) == 64
    assert first != second


def test_secret_from_env(monkeypatch):
    monkeypatch.setenv("LISTING_PDF_SECRET", "s3cr3t-value")
    assert Settings.from_env().secret_key == "s3cr3t-value"


def test_default_settings_have_private_key():
    assert Settings().secret_key != Settings().secret_key


@pytest.mark.parametrize("value", ["", "change-me"])
def test_placeholder_secret_rejected(value):
    with pytest.raises(ValueError):
        Settings(secret_key=value)


def test_bad_wholesale_mode(monkeypatch):
    monkeypatch.setenv("LISTING_PDF_WHOLESALE_MODE", "sometimes")
    with pytest.raises(ValueError):
        Settings.from_env()


def test_embed_flag(monkeypatch):
    monkeypatch.setenv("LISTING_PDF_EMBED_QR", "off")
    assert Settings.from_env().embed_qr is False
