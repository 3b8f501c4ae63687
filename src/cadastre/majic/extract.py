"""Locate owner identification fields in a MAJIC record of unknown schema.

Field names in the published datasets change between revisions, so the
lookup is by lower-cased substring rather than by exact column name. This is
approximate by nature: a column such as ``nom_commune`` would also be taken
for an owner name if it came first in the record.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple

SIREN_MARKER = "siren"

OWNER_MARKERS: tuple[str, ...] = (
    "denomination",
    "denom",
    "raison",
    "rs",
    "nom",
    "propriet",
    "owner",
    "titulaire",
)


class OwnerFields(NamedTuple):
    siren: Any
    owner: Any


def _first_matching(record: Mapping[str, Any], markers: tuple[str, ...]) -> Any:
    # Record order decides precedence, not marker order.
    for key, value in record.items():
        name = str(key).lower()
        if any(marker in name for marker in markers):
            return value
    return None


def extract_owner(record: Any) -> OwnerFields:
    """Return the SIREN and owner-name values found in ``record``.

    Values are returned untouched; a SIREN that is not 9 digits is not
    rejected here.
    """
    if not isinstance(record, Mapping):
        return OwnerFields(siren=None, owner=None)
    return OwnerFields(
        siren=_first_matching(record, (SIREN_MARKER,)),
        owner=_first_matching(record, OWNER_MARKERS),
    )
