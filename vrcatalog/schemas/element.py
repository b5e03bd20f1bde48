"""
Pydantic schemas for content elements.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from vrcatalog.models.element import ElementType


class ElementResponse(BaseModel):
    """An uploaded content element. Assets reference it by ``elementId``."""

    element_id: str = Field(alias="elementId")
    owner_id: str = Field(alias="ownerId")
    element_type: ElementType = Field(alias="elementType")
    file_name: str = Field(alias="fileName")
    file_size: int = Field(alias="fileSize")
    checksum: str = Field(description="SHA-256 of the content")
    create_time: datetime = Field(alias="createTime")

    model_config = ConfigDict(populate_by_name=True)
