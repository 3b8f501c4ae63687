"""Best-effort discovery of a MAJIC dataset id through the portal catalog."""

from __future__ import annotations

import logging

from cadastre.core.errors import UpstreamGatewayError
from cadastre.majic.client import MajicClient

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 20


async def discover_dataset(
    client: MajicClient,
    pattern: str = "majic%parcell%",
    limit: int = MAX_CANDIDATES,
) -> str | None:
    """Return the id of the first catalog dataset whose id is ``like`` pattern.

    The catalog ``like`` operator is case-insensitive and ``%`` matches any
    run of characters. The first candidate is taken as is, so the result may
    be an unrelated dataset; callers must treat it as a hint. Any failure
    yields None.
    """
    where = "dataset_id like '{}'".format(pattern.replace("'", "''"))
    limit = max(1, min(limit, MAX_CANDIDATES))
    try:
        candidates = await client.search_datasets(where, limit=limit)
    except UpstreamGatewayError as exc:
        logger.warning("Dataset discovery failed: %s", exc)
        return None

    for candidate in candidates[:1]:
        dataset_id = candidate.get("dataset_id")
        if isinstance(dataset_id, str) and dataset_id:
            return dataset_id
    return None
