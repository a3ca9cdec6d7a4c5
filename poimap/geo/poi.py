"""
Point-of-interest data model.

A POI is an immutable record; the two user flags (``favorite`` and
``visited``) change only through :class:`poimap.store.poi_store.PoiStore`,
which swaps in an updated copy under the same id.

Example
-------
    poi = PointOfInterest(
        id=2, name="Vondelpark", category=Category.PARK,
        coordinate=Coordinate(52.3579, 4.8686), rating=4.6,
    )
    CATEGORY_STYLE[poi.category].label   # "Parks"
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Hashable


class Category(str, Enum):
    """Closed set of POI categories."""
    ATTRACTION = "attraction"
    RESTAURANT = "restaurant"
    ACCOMMODATION = "accommodation"
    SHOPPING = "shopping"
    PARK = "park"
    TRANSPORT = "transport"


@dataclass(frozen=True)
class CategoryStyle:
    """Display metadata for one category."""
    label: str
    color: str      # marker fill, "#rrggbb"
    glyph: str      # single character drawn inside the marker


CATEGORY_STYLE: Dict[Category, CategoryStyle] = {
    Category.ATTRACTION:    CategoryStyle("Attractions", "#e11d48", "A"),
    Category.RESTAURANT:    CategoryStyle("Restaurants", "#ea580c", "R"),
    Category.ACCOMMODATION: CategoryStyle("Hotels",      "#7c3aed", "H"),
    Category.SHOPPING:      CategoryStyle("Shopping",    "#059669", "S"),
    Category.PARK:          CategoryStyle("Parks",       "#16a34a", "P"),
    Category.TRANSPORT:     CategoryStyle("Transport",   "#2563eb", "T"),
}

if set(CATEGORY_STYLE) != set(Category):
    raise RuntimeError("every category needs a style")


def is_valid_latlng(lat: float, lng: float) -> bool:
    """True when both values are finite and inside the WGS84 ranges."""
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        return False
    return (
        math.isfinite(lat) and math.isfinite(lng)
        and -90.0 <= lat <= 90.0
        and -180.0 <= lng <= 180.0
    )


@dataclass(frozen=True)
class Coordinate:
    """WGS84 latitude / longitude in degrees."""
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not is_valid_latlng(self.lat, self.lng):
            raise ValueError(f"invalid coordinate ({self.lat!r}, {self.lng!r})")
        object.__setattr__(self, "lat", float(self.lat))
        object.__setattr__(self, "lng", float(self.lng))

    def __str__(self) -> str:
        return f"{self.lat:.4f}, {self.lng:.4f}"


@dataclass(frozen=True)
class PointOfInterest:
    """One place on the map."""

    id: Hashable
    name: str
    category: Category
    coordinate: Coordinate
    rating: float = 0.0
    description: str = ""
    image: str = ""                 # media reference (URL or path)
    favorite: bool = False
    visited: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.category, Category):
            # Accept the raw string form coming from JSON sources
            object.__setattr__(self, "category", Category(self.category))
        rating = float(self.rating)
        if not math.isfinite(rating) or not 0.0 <= rating <= 5.0:
            raise ValueError(f"rating must be within [0, 5], got {self.rating!r}")

    @property
    def style(self) -> CategoryStyle:
        return CATEGORY_STYLE[self.category]

    def share_text(self) -> str:
        return f"{self.name} - {self.description}"

    def share_link(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}?poi={self.id}"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PointOfInterest":
        """Build a POI from a JSON-style dict.

        Accepts either ``{"position": {"lat": .., "lng": ..}}`` or flat
        ``lat`` / ``lng`` keys.
        """
        pos = raw.get("position") or raw
        return cls(
            id=raw["id"],
            name=raw["name"],
            category=Category(raw["category"]),
            coordinate=Coordinate(float(pos["lat"]), float(pos["lng"])),
            rating=float(raw.get("rating", 0.0)),
            description=raw.get("description", "") or "",
            image=raw.get("image", "") or "",
            favorite=bool(raw.get("favorite", False)),
            visited=bool(raw.get("visited", False)),
        )
