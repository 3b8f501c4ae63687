"""GIS data models and request parsing for parcel queries."""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Any

from pydantic import BaseModel

from cadastre.core.errors import ValidationError

DEFAULT_LIMIT = 200
MAX_LIMIT = 2000


class Projection(IntEnum):
    """Coordinate reference systems a bounding box can be expressed in (EPSG codes)."""

    LAMBERT93 = 2154
    WGS84 = 4326


_BBOX_HINTS = {
    Projection.LAMBERT93: (
        "bbox requis: minx,miny,maxx,maxy (EPSG:2154)",
        "bbox invalide. Exemple: 700000,6900000,705000,6905000",
    ),
    Projection.WGS84: (
        "bbox requis: minLon,minLat,maxLon,maxLat (EPSG:4326)",
        "bbox invalide. Exemple: 2.9,49.3,3.1,49.5",
    ),
}


class BoundingBox(BaseModel):
    """Axis-aligned rectangle in a stated projection."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float
    projection: Projection = Projection.LAMBERT93

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


class Parcel(BaseModel):
    """A cadastral parcel, geometry already reprojected to WGS84."""

    gid: int
    idu: str = ""
    numero: str | None = None
    feuille: int | None = None
    section: str | None = None
    code_dep: str | None = None
    nom_com: str | None = None
    code_com: str | None = None
    code_arr: str | None = None
    contenance: int | None = None
    geometry: dict[str, Any] | None = None

    def properties(self) -> dict[str, Any]:
        return {
            "idu": self.idu,
            "numero": self.numero,
            "feuille": self.feuille,
            "section": self.section,
            "code_dep": self.code_dep,
            "nom_com": self.nom_com,
            "code_com": self.code_com,
            "code_arr": self.code_arr,
            "contenance": self.contenance,
        }

    def to_feature(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "id": self.gid,
            "geometry": self.geometry,
            "properties": self.properties(),
        }


def feature_collection(parcels: list[Parcel]) -> dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [p.to_feature() for p in parcels],
    }


def parse_bbox(raw: str | None, projection: Projection = Projection.LAMBERT93) -> BoundingBox:
    """Parse ``minx,miny,maxx,maxy`` into a BoundingBox.

    Raises:
        ValidationError: if the value is missing, does not have exactly four
            components, or any component is not a finite number.
    """
    missing_msg, invalid_msg = _BBOX_HINTS[projection]
    if raw is None or not raw.strip():
        raise ValidationError(missing_msg)

    parts = raw.split(",")
    if len(parts) != 4:
        raise ValidationError(invalid_msg)
    try:
        values = [float(p) for p in parts]
    except ValueError:
        raise ValidationError(invalid_msg) from None
    if not all(math.isfinite(v) for v in values):
        raise ValidationError(invalid_msg)

    min_x, min_y, max_x, max_y = values
    return BoundingBox(
        min_x=min_x,
        min_y=min_y,
        max_x=max_x,
        max_y=max_y,
        projection=projection,
    )


def clamp_limit(raw: str | int | None) -> int:
    """Resolve a requested page size to ``[1, MAX_LIMIT]``.

    Missing, non-numeric or non-positive values fall back to DEFAULT_LIMIT.
    """
    try:
        value = int(raw) if raw is not None else DEFAULT_LIMIT
    except (TypeError, ValueError):
        value = DEFAULT_LIMIT
    if value <= 0:
        value = DEFAULT_LIMIT
    return min(value, MAX_LIMIT)
