"""
Lat/lng → screen-space projection for the map viewport.

The map surface is an equirectangular "world" ``TILE_SIZE * 2**zoom``
pixels wide (360° of longitude) and half as tall (180° of latitude).
Screen positions are relative to the viewport center, which always lands
on the origin ``(0, 0)``; ``x`` grows eastwards and ``y`` southwards, as
in Qt scene coordinates.

Doubling the world per zoom step makes the screen distance between two
distinct coordinates strictly increasing in zoom.

Usage
-----
    pt = project(poi.coordinate, viewport.center, viewport.zoom)
    xy = project_many([(52.37, 4.88), (52.35, 4.90)], center, 13)
"""
from __future__ import annotations

import math
from typing import NamedTuple, Sequence, Tuple

import numpy as np

from .poi import Coordinate

TILE_SIZE = 256  # pixels spanned by the whole world at zoom 0


class ScreenPoint(NamedTuple):
    """Position in pixels relative to the viewport center."""
    x: float
    y: float


ORIGIN = ScreenPoint(0.0, 0.0)


def world_size(zoom: int) -> float:
    """Width of the world in pixels at *zoom*."""
    return TILE_SIZE * (2.0 ** zoom)


def project(coordinate: Coordinate, center: Coordinate, zoom: int) -> ScreenPoint:
    """Project *coordinate* into screen space for a viewport at *center*/*zoom*."""
    px_per_deg = world_size(zoom) / 360.0
    return ScreenPoint(
        (coordinate.lng - center.lng) * px_per_deg,
        -(coordinate.lat - center.lat) * px_per_deg,
    )


def project_many(
    latlngs: Sequence[Tuple[float, float]],
    center: Coordinate,
    zoom: int,
) -> np.ndarray:
    """Vectorised :func:`project` for a batch of ``(lat, lng)`` pairs.

    Returns an ``(N, 2)`` float array of ``(x, y)`` rows.
    """
    if len(latlngs) == 0:
        return np.zeros((0, 2), dtype=np.float64)
    arr = np.asarray(latlngs, dtype=np.float64)
    px_per_deg = world_size(zoom) / 360.0
    out = np.empty_like(arr)
    out[:, 0] = (arr[:, 1] - center.lng) * px_per_deg
    out[:, 1] = -(arr[:, 0] - center.lat) * px_per_deg
    return out


def screen_distance(a: ScreenPoint, b: ScreenPoint) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def accuracy_ring_px(accuracy_m: float) -> float:
    """Radius of the accuracy ring drawn around the current location."""
    return min(accuracy_m / 5.0, 100.0)
