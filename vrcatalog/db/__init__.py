"""Database module for the VR Asset Catalog."""

from vrcatalog.db.base import Base
from vrcatalog.db.session import get_db, engine, AsyncSessionLocal

__all__ = ["Base", "get_db", "engine", "AsyncSessionLocal"]
