"""
Pydantic schemas for accounts.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vrcatalog.schemas.field_mask import parse_field_mask


class AccountPatch(BaseModel):
    """Account fields carried by an update; unmasked fields are ignored."""

    account_id: str | None = Field(default=None, alias="accountId")
    description: str = Field(default="", max_length=5000)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AccountUpdateRequest(BaseModel):
    """Schema for PATCH /accounts/{id}."""

    account: AccountPatch = Field(default_factory=AccountPatch)
    update_mask: list[str] = Field(
        default=[],
        alias="updateMask",
        description="Fields to update: description, or *",
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("update_mask", mode="before")
    @classmethod
    def split_mask(cls, v: Any) -> Any:
        return parse_field_mask(v)


class AccountResponse(BaseModel):
    """Public account profile."""

    account_id: str = Field(alias="accountId")
    display_name: str = Field(alias="displayName")
    description: str
    create_time: datetime = Field(alias="createTime")

    model_config = ConfigDict(populate_by_name=True)
