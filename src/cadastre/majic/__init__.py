"""MAJIC legal-entity ownership lookup.

Public API::

    from cadastre.majic import OwnershipResolver, extract_owner, discover_dataset
"""

from __future__ import annotations

from cadastre.majic.client import MajicClient
from cadastre.majic.discovery import discover_dataset
from cadastre.majic.extract import OwnerFields, extract_owner
from cadastre.majic.resolver import OwnershipResolver, ResolvedOwnership

__all__ = [
    "MajicClient",
    "OwnerFields",
    "OwnershipResolver",
    "ResolvedOwnership",
    "discover_dataset",
    "extract_owner",
]
