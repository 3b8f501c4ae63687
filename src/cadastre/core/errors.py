"""Error taxonomy shared by the store, the upstream clients and the HTTP layer.

Each error carries the HTTP status it maps to; the web layer renders any
``CadastreError`` as ``{"error": message}`` with that status.
"""

from __future__ import annotations


class CadastreError(Exception):
    """Base class for errors that are reported to API callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CadastreError):
    """Malformed or missing caller input. Raised before any store/network call."""

    status_code = 400


class NotFoundError(CadastreError):
    """No entity matches the request."""

    status_code = 404


class UpstreamGatewayError(CadastreError):
    """An external HTTP dependency failed or answered with a non-success status."""

    status_code = 502


class InternalStoreError(CadastreError):
    """The spatial store is unavailable or a query failed."""

    status_code = 500
