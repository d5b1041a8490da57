"""Orchestration: listing id -> extract -> HTML -> PDF."""

import re
from typing import Callable

from loguru import logger

from .config import Settings
from .extractor import ListingExtractor, http_image_checker
from .field_map import FieldMap, field_map_for
from .models import ListingNotFoundError, PdfResult
from .qr import QrCodeService
from .report import PageConfig, TemplateOptions, html_to_pdf, render_fallback, render_listing
from .store import ContentStore


def listing_filename(title: str, separator: str = "_") -> str:
    """
    Header- and filesystem-safe download name for a listing.

    >>> listing_filename("Green Acres Farm")
    'green_acres_farm_listing.pdf'
    >>> listing_filename("Green Acres Farm", separator="-")
    'green-acres-farm-listing.pdf'
    """
    slug = re.sub(r"[^a-z0-9]+", separator, title.lower()).strip(separator)
    if not slug:
        return "listing.pdf"
    return f"{slug}{separator}listing.pdf"


def build_extractor(
    store: ContentStore,
    settings: Settings,
    field_map: FieldMap | None = None,
) -> ListingExtractor:
    qr = QrCodeService(
        base_url=settings.qr_service_url,
        size=settings.qr_size,
        timeout=settings.qr_timeout,
        embed=settings.embed_qr,
    )
    checker = http_image_checker(settings.image_check_timeout) if settings.verify_images else None
    return ListingExtractor(store, field_map or field_map_for(None), qr=qr, image_checker=checker)


def generate_listing_pdf(
    listing_id,
    store: ContentStore,
    settings: Settings | None = None,
    options: TemplateOptions | None = None,
    page: PageConfig | None = None,
    extractor: ListingExtractor | None = None,
    on_progress: Callable[[str], None] | None = None,
) -> PdfResult:
    """
    Generate the PDF sheet for one listing.

    Steps:
        1. Extract a ListingRecord from the content store
        2. Render the listing template
        3. Convert to PDF; if the listing template fails at either step,
           render and convert the minimal fallback template instead

    Never raises: failures come back as PdfResult.failure(reason).
    """
    def _progress(msg: str):
        if on_progress:
            on_progress(msg)

    settings = settings or Settings()
    options = options or TemplateOptions(wholesale_mode=settings.wholesale_mode)
    page = page or PageConfig()
    extractor = extractor or build_extractor(store, settings)

    # Step 1: Extract
    _progress("Reading listing...")
    try:
        record = extractor.extract(listing_id)
    except ListingNotFoundError as e:
        logger.error("PDF generation aborted: {}", e)
        return PdfResult.failure(str(e))
    except Exception as e:
        logger.exception("PDF generation aborted while extracting listing {}", listing_id)
        return PdfResult.failure(f"Could not read listing {listing_id}: {e}")

    if not record.has_embedded_qr and record.qr_code_data:
        logger.info("Listing {}: QR code not embedded, linking to service URL", listing_id)

    filename = listing_filename(record.name)

    # Step 2 + 3: Primary template
    _progress("Rendering listing...")
    rendered = render_listing(record, options, page)
    if rendered.ok:
        try:
            pdf = html_to_pdf(rendered.html)
            logger.info("Generated PDF for listing {} ({} bytes)", listing_id, len(pdf))
            return PdfResult.success(pdf, filename)
        except Exception as e:
            logger.warning("Listing template could not be converted, trying fallback: {}", e)
    else:
        logger.warning("Listing template failed, trying fallback: {}", rendered.error)

    # Fallback template
    _progress("Rendering simplified listing...")
    fallback = render_fallback(record, page)
    if not fallback.ok:
        return PdfResult.failure(fallback.error)
    try:
        pdf = html_to_pdf(fallback.html)
    except Exception as e:
        logger.error("PDF generation failed for listing {}: {}", listing_id, e)
        return PdfResult.failure(f"PDF generation failed: {e}")

    logger.info("Generated fallback PDF for listing {} ({} bytes)", listing_id, len(pdf))
    return PdfResult.success(pdf, filename, used_fallback=True)
