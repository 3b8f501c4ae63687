"""Resolve the legal-entity owner of a parcel across PostGIS and MAJIC.

Flow for one request::

    parcel id --store--> IDU
    IDU --records query, one predicate at a time--> record?
        (none under the default dataset) --catalog discovery, once--> dataset id
        (different id) --records query again, once--> record?
    record --extract_owner--> siren / owner

The dataset id in use is a local of ``resolve``; concurrent requests that
discover different datasets never see each other's choice.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from pydantic import BaseModel

from cadastre.core.errors import NotFoundError
from cadastre.gis.store import ParcelStore
from cadastre.majic.client import ExternalRecord, MajicClient
from cadastre.majic.discovery import discover_dataset
from cadastre.majic.extract import extract_owner

logger = logging.getLogger(__name__)

PredicateBuilder = Callable[[str], str]

NO_LEGAL_ENTITY_NOTE = (
    "Aucun propriétaire personne morale trouvé via MAJIC "
    "(les personnes physiques ne sont généralement pas couvertes)."
)


def field_equals(field: str) -> PredicateBuilder:
    """Build ``<field>='<idu>'`` where clauses, quoting the IDU."""

    def build(idu: str) -> str:
        return "{}='{}'".format(field, idu.replace("'", "''"))

    build.__name__ = f"{field}_equals"
    return build


DEFAULT_PREDICATES: tuple[PredicateBuilder, ...] = (
    field_equals("idu"),
    field_equals("parcelle_idu"),
    field_equals("idu_parcelle"),
)


class RecordMatch(BaseModel):
    """A MAJIC record and the where clause that produced it."""

    record: ExternalRecord
    where: str


class ResolvedOwnership(BaseModel):
    """Outcome of an owner lookup. Built per request, never stored."""

    gid: int
    idu: str
    siren: Any = None
    owner: Any = None
    dataset_id: str
    where: str | None = None
    note: str | None = None

    @property
    def source(self) -> str:
        return f"MAJIC (dataset: {self.dataset_id})"

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "gid": self.gid,
            "idu": self.idu,
            "siren": self.siren,
            "owner": self.owner,
        }
        if self.note is not None:
            body["note"] = self.note
        else:
            body["where"] = self.where
        body["source"] = self.source
        return body


async def query_records(
    client: MajicClient,
    dataset_id: str,
    idu: str,
    predicates: Sequence[PredicateBuilder] = DEFAULT_PREDICATES,
) -> RecordMatch | None:
    """Try each predicate in order; the first one returning a record wins."""
    for build in predicates:
        where = build(idu)
        record = await client.fetch_first_record(dataset_id, where)
        if record is not None:
            return RecordMatch(record=record, where=where)
    return None


class OwnershipResolver:
    """Orchestrates the parcel store, MAJIC queries and dataset discovery."""

    def __init__(
        self,
        store: ParcelStore,
        client: MajicClient,
        default_dataset_id: str,
        discovery_pattern: str = "majic%parcell%",
        discovery_limit: int = 20,
        predicates: Sequence[PredicateBuilder] = DEFAULT_PREDICATES,
    ) -> None:
        self._store = store
        self._client = client
        self._default_dataset_id = default_dataset_id
        self._discovery_pattern = discovery_pattern
        self._discovery_limit = discovery_limit
        self._predicates = tuple(predicates)

    async def resolve(self, gid: int) -> ResolvedOwnership:
        """Find the legal-entity owner of parcel ``gid``.

        Raises:
            NotFoundError: the parcel does not exist.
            UpstreamGatewayError: a MAJIC records query failed.
            InternalStoreError: the parcel store failed.
        """
        try:
            parcel = await self._store.query_by_id(gid)
        except NotFoundError:
            raise NotFoundError("Parcelle introuvable") from None
        idu = parcel.idu

        dataset_id = self._default_dataset_id
        match = await query_records(self._client, dataset_id, idu, self._predicates)

        if match is None:
            discovered = await discover_dataset(
                self._client, self._discovery_pattern, self._discovery_limit
            )
            if discovered and discovered != dataset_id:
                logger.info("Retrying parcel %s with discovered dataset %s", gid, discovered)
                dataset_id = discovered
                match = await query_records(self._client, dataset_id, idu, self._predicates)

        if match is None:
            return ResolvedOwnership(
                gid=gid,
                idu=idu,
                dataset_id=dataset_id,
                note=NO_LEGAL_ENTITY_NOTE,
            )

        fields = extract_owner(match.record)
        return ResolvedOwnership(
            gid=gid,
            idu=idu,
            siren=fields.siren,
            owner=fields.owner,
            dataset_id=dataset_id,
            where=match.where,
        )
