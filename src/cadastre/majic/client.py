"""HTTP client for the Opendatasoft Explore API hosting the MAJIC datasets."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cadastre.core.config import MajicConfig
from cadastre.core.errors import UpstreamGatewayError

logger = logging.getLogger(__name__)

ExternalRecord = dict[str, Any]

# Unknown field (ODSQL error) or unknown dataset.
NO_RECORD_STATUSES = frozenset({400, 404})


class MajicClient:
    """Talks to the records and catalog endpoints of an Opendatasoft portal.

    A 400 or 404 on a records query means the field or dataset referenced by
    the ``where`` clause does not exist there; it is reported as "no record",
    not as a failure. Any other non-success status (throttling, auth, 5xx),
    transport errors and unreadable bodies raise UpstreamGatewayError.
    """

    def __init__(self, config: MajicConfig, http: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._http = http or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
        )

    # -- public API ----------------------------------------------------------

    async def fetch_first_record(self, dataset_id: str, where: str) -> ExternalRecord | None:
        """Return the first record of ``dataset_id`` matching ``where``, if any."""
        path = f"/catalog/datasets/{dataset_id}/records"
        resp = await self._get(path, params={"where": where, "limit": 1})
        if resp.status_code in NO_RECORD_STATUSES:
            logger.info(
                "MAJIC %s rejected where=%r (HTTP %d)", dataset_id, where, resp.status_code
            )
            return None
        if not resp.is_success:
            raise UpstreamGatewayError(f"Erreur MAJIC (HTTP {resp.status_code})")

        results = self._results(resp)
        first = results[0] if results else None
        return first if isinstance(first, dict) else None

    async def search_datasets(self, where: str, limit: int = 20) -> list[dict[str, Any]]:
        """Query the dataset catalog; returns the raw ``results`` entries."""
        resp = await self._get("/catalog/datasets", params={"where": where, "limit": limit})
        if not resp.is_success:
            raise UpstreamGatewayError(f"Catalogue MAJIC HTTP {resp.status_code}")
        return [r for r in self._results(resp) if isinstance(r, dict)]

    async def close(self) -> None:
        await self._http.aclose()

    # -- internal ------------------------------------------------------------

    async def _get(self, path: str, params: dict[str, Any]) -> httpx.Response:
        try:
            return await self._http.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("MAJIC request %s failed: %s", path, exc)
            raise UpstreamGatewayError(f"Erreur MAJIC: {exc}") from exc

    @staticmethod
    def _results(resp: httpx.Response) -> list[Any]:
        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamGatewayError("Erreur MAJIC: réponse illisible") from exc
        results = body.get("results") if isinstance(body, dict) else None
        return results if isinstance(results, list) else []
