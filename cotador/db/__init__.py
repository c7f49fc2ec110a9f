"""Backing store module exports."""

from cotador.db.client import BackingStoreClient
from cotador.db.models import CatalogItem, CatalogPage, VendorRecord

__all__ = [
    # Models
    "CatalogItem",
    "CatalogPage",
    "VendorRecord",
    # Client
    "BackingStoreClient",
]
