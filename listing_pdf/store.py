"""Read interface to the content store that owns listings, plus an in-memory store.

The pipeline only talks to ContentStore. InMemoryContentStore backs the CLI
(loaded from a JSON export) and the tests.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol


@dataclass(frozen=True)
class Term:
    name: str
    slug: str = ""


class ContentStore(Protocol):
    def get_title(self, listing_id) -> str | None: ...

    def get_body(self, listing_id) -> str | None: ...

    def get_modified(self, listing_id) -> datetime | None: ...

    def get_permalink(self, listing_id) -> str | None: ...

    def get_owner_id(self, listing_id) -> int | None: ...

    def get_attribute(self, listing_id, key: str) -> Any: ...

    def get_terms(self, listing_id, taxonomy: str) -> list[Term]: ...

    def get_featured_image_id(self, listing_id) -> Any: ...

    def get_attachment_url(self, attachment_id, size: str = "medium") -> str | None: ...


@dataclass
class StoredListing:
    id: int | str
    title: str
    body: str = ""
    owner_id: int = 0
    permalink: str = ""
    modified: datetime | None = None
    featured_image_id: Any = None
    meta: dict[str, Any] = field(default_factory=dict)
    terms: dict[str, list[str]] = field(default_factory=dict)


class InMemoryContentStore:
    """Dict-backed ContentStore."""

    def __init__(
        self,
        listings: list[StoredListing] | None = None,
        attachments: dict[Any, dict[str, str] | str] | None = None,
    ):
        self._listings = {str(listing.id): listing for listing in listings or []}
        self._attachments = {str(k): v for k, v in (attachments or {}).items()}

    @classmethod
    def from_json(cls, path: Path | str) -> "InMemoryContentStore":
        """
        Load listings from a JSON export.

        Expected shape:
            {
              "listings": [{"id": 42, "title": "...", "body": "...",
                            "owner_id": 7, "permalink": "...",
                            "modified": "2025-09-09T12:00:00",
                            "featured_image_id": 11,
                            "meta": {...}, "terms": {"listing_type": [...]}}],
              "attachments": {"11": {"medium": "https://..."} }
            }
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        listings = []
        for item in data.get("listings", []):
            modified = item.get("modified")
            listings.append(
                StoredListing(
                    id=item["id"],
                    title=item.get("title", ""),
                    body=item.get("body", ""),
                    owner_id=int(item.get("owner_id") or 0),
                    permalink=item.get("permalink", ""),
                    modified=datetime.fromisoformat(modified) if modified else None,
                    featured_image_id=item.get("featured_image_id"),
                    meta=item.get("meta", {}),
                    terms=item.get("terms", {}),
                )
            )
        return cls(listings, data.get("attachments", {}))

    def add(self, listing: StoredListing) -> None:
        self._listings[str(listing.id)] = listing

    def _listing(self, listing_id) -> StoredListing | None:
        return self._listings.get(str(listing_id))

    def get_title(self, listing_id):
        listing = self._listing(listing_id)
        return listing.title if listing else None

    def get_body(self, listing_id):
        listing = self._listing(listing_id)
        return listing.body if listing else None

    def get_modified(self, listing_id):
        listing = self._listing(listing_id)
        return listing.modified if listing else None

    def get_permalink(self, listing_id):
        listing = self._listing(listing_id)
        return listing.permalink if listing else None

    def get_owner_id(self, listing_id):
        listing = self._listing(listing_id)
        return listing.owner_id if listing else None

    def get_attribute(self, listing_id, key):
        listing = self._listing(listing_id)
        return listing.meta.get(key) if listing else None

    def get_terms(self, listing_id, taxonomy):
        listing = self._listing(listing_id)
        if not listing:
            return []
        return [Term(name=name) for name in listing.terms.get(taxonomy, [])]

    def get_featured_image_id(self, listing_id):
        listing = self._listing(listing_id)
        return listing.featured_image_id if listing else None

    def get_attachment_url(self, attachment_id, size="medium"):
        if attachment_id in (None, "", 0):
            return None
        entry = self._attachments.get(str(attachment_id))
        if isinstance(entry, dict):
            return entry.get(size) or entry.get("full")
        return entry
