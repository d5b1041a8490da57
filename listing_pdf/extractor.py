"""Build a ListingRecord from the content store using the field map."""

from datetime import datetime
from typing import Any, Callable

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from .classifier import (
    classify_products,
    filter_certifications,
    filter_payment_methods,
    join_terms,
)
from .field_map import DEFAULT_FIELD_MAP, FieldMap
from .models import ListingNotFoundError, ListingRecord
from .qr import QrCodeService
from .store import ContentStore

ImageChecker = Callable[[str], bool]

TAXONOMY_FORMATTERS: dict[str, Callable[[list[str]], str]] = {
    "products": classify_products,
    "payment_methods": filter_payment_methods,
    "certifications": filter_certifications,
}


def strip_tags(markup: str) -> str:
    """Plain text of an HTML fragment; source line breaks are kept."""
    if not markup:
        return ""
    soup = BeautifulSoup(markup, "html.parser")
    for el in soup.find_all(["script", "style"]):
        el.decompose()
    lines = [" ".join(line.split()) for line in soup.get_text().splitlines()]
    return "\n".join(line for line in lines if line)


def format_date(value: datetime | None) -> str:
    """'September 9, 2025' style date."""
    if value is None:
        return ""
    return f"{value:%B} {value.day}, {value.year}"


def _as_text(value: Any) -> str:
    if value is None or value is False:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v).strip() for v in value if v not in (None, ""))
    return str(value).strip()


def http_image_checker(timeout: float = 5.0, client: httpx.Client | None = None) -> ImageChecker:
    """Checker that accepts an image URL when a HEAD request returns 200."""

    def check(url: str) -> bool:
        try:
            if client is not None:
                response = client.head(url, timeout=timeout)
            else:
                response = httpx.head(url, timeout=timeout, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("Image check failed for {}: {}", url, e)
            return False
        return response.status_code == 200

    return check


class ListingExtractor:
    """Reads one listing from a ContentStore into a ListingRecord."""

    def __init__(
        self,
        store: ContentStore,
        field_map: FieldMap = DEFAULT_FIELD_MAP,
        qr: QrCodeService | None = None,
        image_checker: ImageChecker | None = None,
    ):
        self.store = store
        self.field_map = field_map
        self.qr = qr or QrCodeService()
        self.image_checker = image_checker

    def extract(self, listing_id) -> ListingRecord:
        try:
            title = self.store.get_title(listing_id)
        except Exception as e:
            raise ListingNotFoundError(f"Listing {listing_id}: source not found ({e})") from e
        if title is None:
            raise ListingNotFoundError(f"Listing {listing_id}: source not found")

        values: dict[str, str] = {}
        for spec in self.field_map.plain_fields():
            values[spec.key] = self._attribute(listing_id, spec.storage_key)
        for spec in self.field_map.taxonomy_fields():
            values[spec.key] = self._taxonomy(listing_id, spec.key, spec.storage_key)

        canonical_url = _as_text(self._optional(self.store.get_permalink, listing_id))
        about = strip_tags(_as_text(self._optional(self.store.get_body, listing_id)))
        updated_at = format_date(self._optional(self.store.get_modified, listing_id))

        record = ListingRecord(
            id=listing_id,
            name=_as_text(title),
            about=about,
            hero_image_url=self.hero_image(listing_id),
            qr_code_data=self.qr.qr_code_data(canonical_url) if canonical_url else "",
            updated_at=updated_at,
            canonical_url=canonical_url,
            **values,
        )
        logger.debug(
            "Extracted listing {} ({}): {} populated fields",
            listing_id,
            record.name,
            sum(1 for v in values.values() if v),
        )
        return record

    def _optional(self, getter: Callable, *args) -> Any:
        try:
            return getter(*args)
        except Exception as e:
            logger.warning("{} failed for {}: {}", getattr(getter, "__name__", getter), args, e)
            return None

    def _attribute(self, listing_id, storage_key: str) -> str:
        return _as_text(self._optional(self.store.get_attribute, listing_id, storage_key))

    def _taxonomy(self, listing_id, key: str, taxonomy: str) -> str:
        terms = self._optional(self.store.get_terms, listing_id, taxonomy)
        if not terms:
            return ""
        names = [getattr(term, "name", term) for term in terms]
        formatter = TAXONOMY_FORMATTERS.get(key, join_terms)
        return formatter(names)

    def hero_image(self, listing_id) -> str:
        """
        Best representative image URL, or "" when none resolves.

        Priority: primary image field, featured image, logo field, first
        gallery image. The first candidate that resolves (and passes the
        image checker, when one is configured) wins.
        """
        images = self.field_map.images
        candidates = (
            ("primary image", lambda: self.store.get_attribute(listing_id, images.primary_image)),
            ("featured image", lambda: self.store.get_featured_image_id(listing_id)),
            ("logo", lambda: self.store.get_attribute(listing_id, images.logo)),
            ("gallery", lambda: self._first_gallery_id(listing_id)),
        )
        for label, get_attachment_id in candidates:
            attachment_id = self._optional(get_attachment_id)
            if not attachment_id:
                continue
            url = _as_text(self._optional(self.store.get_attachment_url, attachment_id, images.size))
            if not url:
                logger.debug("Listing {}: {} {} did not resolve", listing_id, label, attachment_id)
                continue
            if self.image_checker is not None and not self.image_checker(url):
                logger.warning("Listing {}: {} not reachable at {}", listing_id, label, url)
                continue
            return url
        return ""

    def _first_gallery_id(self, listing_id) -> Any:
        gallery = self.store.get_attribute(listing_id, self.field_map.images.gallery)
        if isinstance(gallery, (list, tuple)) and gallery:
            return gallery[0]
        return None
