"""FastAPI router for ownership and company registry endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from cadastre.core.errors import ValidationError
from cadastre.registry.client import is_valid_siren
from cadastre.web.parcel_router import parse_gid

router = APIRouter()


@router.get("/parcelles/{gid}/owner")
async def parcel_owner(gid: str, request: Request) -> dict[str, Any]:
    """Legal-entity owner of a parcel, from the MAJIC dataset.

    A parcel without a MAJIC record is a normal answer (natural persons are
    not published) and comes back with a ``note`` instead of ``where``.
    """
    resolver = request.app.state.ownership_resolver
    ownership = await resolver.resolve(parse_gid(gid))
    return ownership.to_response()


@router.get("/siren/{siren}")
async def company_by_siren(siren: str, request: Request) -> dict[str, Any]:
    """First company registry result for a SIREN, returned verbatim."""
    siren = siren.strip()
    if not is_valid_siren(siren):
        raise ValidationError("SIREN invalide (9 chiffres)")
    return await request.app.state.registry_client.lookup(siren)
