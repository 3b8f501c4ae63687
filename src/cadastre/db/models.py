"""SQLAlchemy ORM mapping of the externally imported ``parcelles`` table.

The table is loaded by the cadastral bulk import; this service only reads it.
"""

from __future__ import annotations

from geoalchemy2 import Geometry
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cadastre.db.base import Base

# Lambert-93, the planar projection parcels are stored in.
NATIVE_SRID = 2154
# WGS84 longitude/latitude, the projection geometries are served in.
GEOGRAPHIC_SRID = 4326


class ParcelRow(Base):
    __tablename__ = "parcelles"

    gid: Mapped[int] = mapped_column(Integer, primary_key=True)
    idu: Mapped[str | None] = mapped_column(String(32), index=True, nullable=True)
    numero: Mapped[str | None] = mapped_column(String(8), nullable=True)
    feuille: Mapped[int | None] = mapped_column(Integer, nullable=True)
    section: Mapped[str | None] = mapped_column(String(4), nullable=True)
    code_dep: Mapped[str | None] = mapped_column(String(4), nullable=True)
    nom_com: Mapped[str | None] = mapped_column(String(128), nullable=True)
    code_com: Mapped[str | None] = mapped_column(String(8), nullable=True)
    code_arr: Mapped[str | None] = mapped_column(String(8), nullable=True)
    contenance: Mapped[int | None] = mapped_column(Integer, nullable=True)
    geom = mapped_column(Geometry(geometry_type="MULTIPOLYGON", srid=NATIVE_SRID))
