"""Parcel store protocol and the PostGIS-backed implementation."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol, Sequence

from sqlalchemy import Select, func, literal_column, select
from sqlalchemy.exc import SQLAlchemyError

from cadastre.core.errors import InternalStoreError, NotFoundError, ValidationError
from cadastre.db.engine import DatabaseManager
from cadastre.db.models import GEOGRAPHIC_SRID, NATIVE_SRID, ParcelRow
from cadastre.gis.models import BoundingBox, Parcel, clamp_limit

logger = logging.getLogger(__name__)


class ParcelStore(Protocol):
    """Protocol for read-only parcel lookups."""

    async def query_by_bbox(
        self,
        bbox: BoundingBox,
        limit: int | str | None = None,
        commune: str | None = None,
    ) -> list[Parcel]: ...

    async def query_by_id(self, gid: int) -> Parcel: ...

    async def query_by_idu(self, idu: str) -> Parcel: ...

    async def ping(self) -> Any: ...


def _srid(code: int) -> Any:
    # Inline literal, not a bind parameter: ST_Transform is overloaded.
    return literal_column(str(int(code)))


def _parcel_select() -> Select:
    geometry = func.ST_AsGeoJSON(func.ST_Transform(ParcelRow.geom, _srid(GEOGRAPHIC_SRID)))
    return select(
        ParcelRow.gid,
        ParcelRow.idu,
        ParcelRow.numero,
        ParcelRow.feuille,
        ParcelRow.section,
        ParcelRow.code_dep,
        ParcelRow.nom_com,
        ParcelRow.code_com,
        ParcelRow.code_arr,
        ParcelRow.contenance,
        geometry.label("geometry"),
    )


def bbox_statement(
    bbox: BoundingBox,
    limit: int | str | None = None,
    commune: str | None = None,
) -> Select:
    """Build the two-stage bbox query.

    The envelope is reprojected into the native projection when the caller
    used another one. ``&&`` filters on bounding boxes through the spatial
    index, then ``ST_Intersects`` keeps only true intersections.
    """
    envelope = func.ST_MakeEnvelope(
        bbox.min_x, bbox.min_y, bbox.max_x, bbox.max_y, _srid(bbox.projection)
    )
    if int(bbox.projection) != NATIVE_SRID:
        envelope = func.ST_Transform(envelope, _srid(NATIVE_SRID))

    stmt = _parcel_select().where(
        ParcelRow.geom.intersects(envelope),
        func.ST_Intersects(ParcelRow.geom, envelope),
    )
    if commune is not None and commune.strip():
        stmt = stmt.where(ParcelRow.nom_com.icontains(commune.strip(), autoescape=True))
    return stmt.limit(clamp_limit(limit))


def _row_to_parcel(row: Any) -> Parcel:
    geometry = row["geometry"]
    if isinstance(geometry, str):
        geometry = json.loads(geometry)
    return Parcel(
        gid=row["gid"],
        idu=row["idu"] or "",
        numero=row["numero"],
        feuille=row["feuille"],
        section=row["section"],
        code_dep=row["code_dep"],
        nom_com=row["nom_com"],
        code_com=row["code_com"],
        code_arr=row["code_arr"],
        contenance=row["contenance"],
        geometry=geometry,
    )


class PostgisParcelStore:
    """Reads parcels from the PostGIS ``parcelles`` table.

    Each query checks a connection out of the pool for its own duration.
    Driver and connection failures surface as InternalStoreError.
    """

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def query_by_bbox(
        self,
        bbox: BoundingBox,
        limit: int | str | None = None,
        commune: str | None = None,
    ) -> list[Parcel]:
        rows = await self._fetch(bbox_statement(bbox, limit, commune))
        return [_row_to_parcel(r) for r in rows]

    async def query_by_id(self, gid: int) -> Parcel:
        rows = await self._fetch(_parcel_select().where(ParcelRow.gid == gid).limit(1))
        if not rows:
            raise NotFoundError("Not found")
        return _row_to_parcel(rows[0])

    async def query_by_idu(self, idu: str) -> Parcel:
        idu = (idu or "").strip()
        if not idu:
            raise ValidationError("idu requis")
        rows = await self._fetch(_parcel_select().where(ParcelRow.idu == idu).limit(1))
        if not rows:
            raise NotFoundError("Not found")
        return _row_to_parcel(rows[0])

    async def ping(self) -> Any:
        try:
            return await self._db.ping()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            raise InternalStoreError(str(exc)) from exc

    async def _fetch(self, stmt: Select) -> Sequence[Any]:
        try:
            async with self._db.session() as session:
                result = await session.execute(stmt)
                return result.mappings().all()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            logger.error("Parcel store query failed: %s", exc)
            raise InternalStoreError(str(exc)) from exc
