"""Category visibility filter."""
from __future__ import annotations

from typing import AbstractSet, FrozenSet, Iterable, List

from ..geo.poi import Category, PointOfInterest

ALL_CATEGORIES: FrozenSet[Category] = frozenset(Category)


def visible_pois(
    pois: Iterable[PointOfInterest],
    visible_categories: AbstractSet[Category],
) -> List[PointOfInterest]:
    """POIs whose category is visible, in source order."""
    return [p for p in pois if p.category in visible_categories]


def toggle_category(
    categories: AbstractSet[Category],
    category: Category,
) -> FrozenSet[Category]:
    """Return a new set with *category* added if absent, removed if present."""
    if category in categories:
        return frozenset(c for c in categories if c != category)
    return frozenset(categories) | {category}
