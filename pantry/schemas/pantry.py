"""Pydantic schemas for Pantry metadata payloads."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class BasketInfo(BaseModel):
    """A basket listed in the pantry details."""

    name: str = Field(default="", description="Basket name.")
    ttl: str = Field(
        default="",
        description="Time-to-live descriptor reported by the service.",
    )


class PantryInfo(BaseModel):
    """Pantry-level metadata as returned by the service.

    Every field has a zero-value default so that partial or malformed
    responses still decode.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", description="Pantry name.")
    description: str = Field(default="", description="Pantry description.")
    errors: List[str] = Field(
        default_factory=list,
        description="Error strings reported by the service for this pantry.",
    )
    notifications: bool = Field(
        default=False,
        description="Whether email notifications are enabled.",
    )
    percent_full: int = Field(
        default=0,
        alias="percentFull",
        ge=0,
        le=100,
        description="Storage usage in percent (0-100).",
    )
    baskets: List[BasketInfo] = Field(
        default_factory=list,
        description="Baskets in the order reported by the service.",
    )

    def basket_names(self) -> list[str]:
        return [basket.name for basket in self.baskets]


class UpdatedInfo(BaseModel):
    """Payload for updating pantry metadata."""

    name: str = Field(..., description="New pantry name.")
    description: str = Field(..., description="New pantry description.")
