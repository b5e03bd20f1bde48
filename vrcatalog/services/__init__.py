"""
Business logic services for the VR Asset Catalog.
The query, format-graph and update engines are pure; the catalog and element
services apply them to the database.
"""

from vrcatalog.services.catalog_service import CatalogService
from vrcatalog.services.element_service import ElementService, compute_checksum

__all__ = [
    "CatalogService",
    "ElementService",
    "compute_checksum",
]
