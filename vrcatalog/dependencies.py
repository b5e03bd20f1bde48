"""
FastAPI dependency injection aliases shared by the endpoints.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vrcatalog.db.session import get_db
from vrcatalog.storage import StorageBackend, get_storage

# Type aliases for cleaner endpoint signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
Storage = Annotated[StorageBackend, Depends(get_storage)]
