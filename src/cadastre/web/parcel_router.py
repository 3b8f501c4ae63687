"""FastAPI router for parcel geometry endpoints."""

from __future__ import annotations

import re
from typing import Any

from fastapi import APIRouter, Request

from cadastre.core.errors import ValidationError
from cadastre.gis.models import Projection, feature_collection, parse_bbox

router = APIRouter()

_GID_RE = re.compile(r"[0-9]+")


def parse_gid(raw: str) -> int:
    """Parse a numeric parcel id from a path segment."""
    raw = (raw or "").strip()
    if _GID_RE.fullmatch(raw) is None:
        raise ValidationError("gid invalide")
    return int(raw)


@router.get("/parcelles")
async def parcels_in_bbox(
    request: Request,
    bbox: str | None = None,
    limit: str | None = None,
    commune: str | None = None,
) -> dict[str, Any]:
    """Parcels intersecting a Lambert-93 (EPSG:2154) bounding box."""
    box = parse_bbox(bbox, Projection.LAMBERT93)
    store = request.app.state.parcel_store
    parcels = await store.query_by_bbox(box, limit=limit, commune=commune)
    return feature_collection(parcels)


@router.get("/parcelles-view")
async def parcels_in_view(
    request: Request,
    bbox: str | None = None,
    limit: str | None = None,
    commune: str | None = None,
) -> dict[str, Any]:
    """Parcels intersecting a lon/lat (EPSG:4326) bounding box."""
    box = parse_bbox(bbox, Projection.WGS84)
    store = request.app.state.parcel_store
    parcels = await store.query_by_bbox(box, limit=limit, commune=commune)
    return feature_collection(parcels)


@router.get("/parcelles-by-idu/{idu}")
async def parcel_by_idu(idu: str, request: Request) -> dict[str, Any]:
    if not idu.strip():
        raise ValidationError("idu requis")
    parcel = await request.app.state.parcel_store.query_by_idu(idu)
    return parcel.to_feature()


@router.get("/parcelles/{gid}")
async def parcel_by_id(gid: str, request: Request) -> dict[str, Any]:
    parcel = await request.app.state.parcel_store.query_by_id(parse_gid(gid))
    return parcel.to_feature()
