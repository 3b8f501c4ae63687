"""Cadastre API: French cadastral parcels and legal-entity ownership over HTTP."""

__version__ = "0.1.0"
