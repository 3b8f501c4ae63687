"""Client for the company registry search (recherche-entreprises.api.gouv.fr)."""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from cadastre.core.config import RegistryConfig
from cadastre.core.errors import NotFoundError, UpstreamGatewayError, ValidationError

logger = logging.getLogger(__name__)

_SIREN_RE = re.compile(r"[0-9]{9}")


def is_valid_siren(value: Any) -> bool:
    """True when ``value`` is exactly nine ASCII digits."""
    return _SIREN_RE.fullmatch(str(value or "")) is not None


class CompanyRegistryClient:
    """Looks up a legal entity by SIREN and returns the registry's first hit."""

    def __init__(self, config: RegistryConfig, http: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._http = http or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
        )

    async def lookup(self, siren: str) -> dict[str, Any]:
        """Return the first search result for ``siren`` verbatim.

        Raises:
            ValidationError: ``siren`` is not nine digits.
            NotFoundError: the registry has no match.
            UpstreamGatewayError: the registry could not be reached or
                answered with a non-success status.
        """
        siren = (siren or "").strip()
        if not is_valid_siren(siren):
            raise ValidationError("SIREN invalide (9 chiffres)")

        try:
            resp = await self._http.get(
                "/search", params={"q": siren, "page": 1, "per_page": 1}
            )
        except httpx.HTTPError as exc:
            logger.warning("Company registry request failed: %s", exc)
            raise UpstreamGatewayError(f"API siren: {exc}") from exc

        if not resp.is_success:
            raise UpstreamGatewayError(f"API siren HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamGatewayError("API siren: réponse illisible") from exc

        results = body.get("results") if isinstance(body, dict) else None
        if results is not None and not isinstance(results, list):
            raise UpstreamGatewayError("API siren: réponse inattendue")
        if not results:
            raise NotFoundError("Entreprise non trouvée")
        return results[0]

    async def close(self) -> None:
        await self._http.aclose()
