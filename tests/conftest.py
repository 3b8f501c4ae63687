"""Shared test fixtures and in-memory fakes for the store and upstream clients."""

from __future__ import annotations

from typing import Any

import pytest

from cadastre.core.errors import InternalStoreError, NotFoundError, UpstreamGatewayError, ValidationError
from cadastre.gis.models import BoundingBox, Parcel, clamp_limit

DEFAULT_DATASET = "fichiers-des-parcelles-des-personnes-morales-majic"


def make_parcel(gid: int, idu: str, nom_com: str = "Compiègne", **overrides: Any) -> Parcel:
    fields: dict[str, Any] = {
        "gid": gid,
        "idu": idu,
        "numero": "0042",
        "feuille": 1,
        "section": "AB",
        "code_dep": "60",
        "nom_com": nom_com,
        "code_com": "159",
        "code_arr": "000",
        "contenance": 1250,
        "geometry": {
            "type": "MultiPolygon",
            "coordinates": [[[[2.82, 49.41], [2.83, 49.41], [2.83, 49.42], [2.82, 49.41]]]],
        },
    }
    fields.update(overrides)
    return Parcel(**fields)


class FakeParcelStore:
    """In-memory ParcelStore. Records the boxes it was queried with."""

    def __init__(self, parcels: list[Parcel] | None = None, fail: bool = False) -> None:
        self._parcels = {p.gid: p for p in parcels or []}
        self.fail = fail
        self.bbox_calls: list[tuple[BoundingBox, int]] = []

    def _check(self) -> None:
        if self.fail:
            raise InternalStoreError("connection refused")

    async def query_by_bbox(
        self,
        bbox: BoundingBox,
        limit: int | str | None = None,
        commune: str | None = None,
    ) -> list[Parcel]:
        self._check()
        lim = clamp_limit(limit)
        self.bbox_calls.append((bbox, lim))
        parcels = list(self._parcels.values())
        if commune and commune.strip():
            needle = commune.strip().lower()
            parcels = [p for p in parcels if needle in (p.nom_com or "").lower()]
        return parcels[:lim]

    async def query_by_id(self, gid: int) -> Parcel:
        self._check()
        if gid not in self._parcels:
            raise NotFoundError("Not found")
        return self._parcels[gid]

    async def query_by_idu(self, idu: str) -> Parcel:
        if not idu.strip():
            raise ValidationError("idu requis")
        self._check()
        for parcel in self._parcels.values():
            if parcel.idu == idu:
                return parcel
        raise NotFoundError("Not found")

    async def ping(self) -> Any:
        self._check()
        return 1


class FakeMajicClient:
    """In-memory MajicClient keyed by (dataset id, where clause)."""

    def __init__(
        self,
        records: dict[tuple[str, str], dict[str, Any]] | None = None,
        catalog: list[dict[str, Any]] | None = None,
        catalog_error: bool = False,
        records_error: bool = False,
    ) -> None:
        self.records = records or {}
        self.catalog = catalog or []
        self.catalog_error = catalog_error
        self.records_error = records_error
        self.record_calls: list[tuple[str, str]] = []
        self.catalog_calls: list[tuple[str, int]] = []

    async def fetch_first_record(self, dataset_id: str, where: str) -> dict[str, Any] | None:
        self.record_calls.append((dataset_id, where))
        if self.records_error:
            raise UpstreamGatewayError("Erreur MAJIC (HTTP 503)")
        return self.records.get((dataset_id, where))

    async def search_datasets(self, where: str, limit: int = 20) -> list[dict[str, Any]]:
        self.catalog_calls.append((where, limit))
        if self.catalog_error:
            raise UpstreamGatewayError("Catalogue MAJIC HTTP 500")
        return list(self.catalog)

    async def close(self) -> None:
        return None


class FakeRegistryClient:
    def __init__(self, companies: dict[str, dict[str, Any]] | None = None, fail_status: int | None = None) -> None:
        self.companies = companies or {}
        self.fail_status = fail_status

    async def lookup(self, siren: str) -> dict[str, Any]:
        if self.fail_status is not None:
            raise UpstreamGatewayError(f"API siren HTTP {self.fail_status}")
        if siren not in self.companies:
            raise NotFoundError("Entreprise non trouvée")
        return self.companies[siren]

    async def close(self) -> None:
        return None


@pytest.fixture
def parcels() -> list[Parcel]:
    return [
        make_parcel(1, "60159000AB0042"),
        make_parcel(2, "60159000AB0043", numero="0043"),
        make_parcel(3, "75056000CD0001", nom_com="Paris", code_dep="75", code_com="056"),
    ]


@pytest.fixture
def store(parcels: list[Parcel]) -> FakeParcelStore:
    return FakeParcelStore(parcels)
