from datetime import datetime
from pathlib import Path

import httpx
import pytest

from listing_pdf.qr import QrCodeService
from listing_pdf.store import InMemoryContentStore, StoredListing

SAMPLE_JSON = Path(__file__).resolve().parent.parent / "data" / "sample_listings.json"

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-qr"


def green_acres() -> StoredListing:
    return StoredListing(
        id=42,
        title="Green Acres Farm",
        body="<p>Family farm growing <b>organic</b> vegetables.</p>",
        owner_id=7,
        permalink="https://eatlocalfirst.org/listing/green-acres-farm/",
        modified=datetime(2025, 9, 9, 10, 30),
        meta={
            "listing_location": "Mount Vernon, WA",
            "email": "hello@greenacres.example",
            "phone": "(360) 555-0142",
            "website": "https://greenacres.example",
        },
        terms={
            "listing_type": ["Farm"],
            "listing_categories": ["Organic Eggs", "Fresh Basil", "Farm Services"],
            "values_indicator": ["Certified Organic", "Family Owned"],
            "listing_features": ["Cash", "Venmo", "Delivery"],
        },
    )


@pytest.fixture
def store() -> InMemoryContentStore:
    return InMemoryContentStore([green_acres()])


def qr_transport(status: int = 200, content: bytes = PNG_BYTES) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=content, headers={"content-type": "image/png"})

    return httpx.MockTransport(handler)


@pytest.fixture
def qr_ok() -> QrCodeService:
    return QrCodeService(client=httpx.Client(transport=qr_transport()))


@pytest.fixture
def qr_down() -> QrCodeService:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    return QrCodeService(client=httpx.Client(transport=httpx.MockTransport(handler)))
