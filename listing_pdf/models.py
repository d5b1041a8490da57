"""ListingRecord dataclass and the typed results passed between pipeline stages."""

from dataclasses import dataclass


class ListingPdfError(Exception):
    """Base error for the listing PDF pipeline."""


class ListingNotFoundError(ListingPdfError):
    """The source listing (or its title) could not be read."""


class PdfRenderError(ListingPdfError):
    """The HTML could not be turned into PDF bytes."""


@dataclass(frozen=True)
class ListingRecord:
    id: int | str
    name: str
    about: str = ""
    location: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""
    business_type: str = ""
    products: str = ""  # pre-formatted markup from classify_products()
    certifications: str = ""
    growing_practices: str = ""
    retail_info: str = ""
    wholesale_info: str = ""
    csa_info: str = ""
    payment_methods: str = ""
    hero_image_url: str = ""
    qr_code_data: str = ""  # data: URI, or the plain QR service URL
    updated_at: str = ""
    canonical_url: str = ""

    @property
    def has_embedded_qr(self) -> bool:
        return self.qr_code_data.startswith("data:")


@dataclass(frozen=True)
class RenderResult:
    html: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return bool(self.html) and not self.error


@dataclass(frozen=True)
class PdfResult:
    ok: bool
    pdf: bytes = b""
    filename: str = ""
    error: str = ""
    used_fallback: bool = False

    @classmethod
    def success(cls, pdf: bytes, filename: str, used_fallback: bool = False) -> "PdfResult":
        return cls(ok=True, pdf=pdf, filename=filename, used_fallback=used_fallback)

    @classmethod
    def failure(cls, reason: str) -> "PdfResult":
        return cls(ok=False, error=reason)
