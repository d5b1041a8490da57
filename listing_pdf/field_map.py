"""Declarative mapping from record fields to content-store keys.

Edit DEFAULT_FIELD_MAP (or call FieldMap.with_storage_key) to point the
extractor at a different deployment's meta keys and taxonomies.
"""

from dataclasses import dataclass, field, replace
from enum import Enum


class FieldKind(str, Enum):
    PLAIN = "plain"
    TAXONOMY = "taxonomy"


@dataclass(frozen=True)
class FieldSpec:
    key: str  # ListingRecord attribute
    storage_key: str  # meta key or taxonomy name in the content store
    kind: FieldKind = FieldKind.PLAIN


@dataclass(frozen=True)
class ImageFields:
    primary_image: str = "logo_images_primary_image"
    logo: str = "logo_images_your_logo"
    gallery: str = "logo_images_additonal_images"
    size: str = "medium"


@dataclass(frozen=True)
class FieldMap:
    fields: tuple[FieldSpec, ...]
    images: ImageFields = field(default_factory=ImageFields)

    def get(self, key: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.key == key:
                return spec
        return None

    def plain_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.kind is FieldKind.PLAIN)

    def taxonomy_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.kind is FieldKind.TAXONOMY)

    def with_storage_key(self, key: str, storage_key: str) -> "FieldMap":
        """Return a copy with one field pointed at a different storage key."""
        if self.get(key) is None:
            raise KeyError(key)
        fields = tuple(
            replace(f, storage_key=storage_key) if f.key == key else f
            for f in self.fields
        )
        return replace(self, fields=fields)


DEFAULT_FIELD_MAP = FieldMap(
    fields=(
        # Contact
        FieldSpec("location", "listing_location"),
        FieldSpec("address", "location_address"),
        FieldSpec("email", "email"),
        FieldSpec("phone", "phone"),
        FieldSpec("website", "website"),
        # Business details
        FieldSpec("growing_practices", "farms_fish_growing_methods"),
        FieldSpec("retail_info", "listing_retail_info"),
        FieldSpec("wholesale_info", "listing_wholesale_info"),
        FieldSpec("csa_info", "listing_csa_info"),
        # Taxonomies
        FieldSpec("business_type", "listing_type", FieldKind.TAXONOMY),
        FieldSpec("products", "listing_categories", FieldKind.TAXONOMY),
        FieldSpec("certifications", "values_indicator", FieldKind.TAXONOMY),
        FieldSpec("payment_methods", "listing_features", FieldKind.TAXONOMY),
    ),
)


def field_map_for(listing_id, overrides: dict[str, str] | None = None) -> FieldMap:
    """
    Field map used to extract a listing.

    Every listing currently shares DEFAULT_FIELD_MAP; overrides maps record
    keys to replacement storage keys.
    """
    field_map = DEFAULT_FIELD_MAP
    for key, storage_key in (overrides or {}).items():
        field_map = field_map.with_storage_key(key, storage_key)
    return field_map
