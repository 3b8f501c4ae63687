"""Database layer for the cadastre API: SQLAlchemy 2.0 async over PostGIS."""

from __future__ import annotations

from cadastre.db.base import Base
from cadastre.db.engine import DatabaseManager

__all__ = ["Base", "DatabaseManager"]
