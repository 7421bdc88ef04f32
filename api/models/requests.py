"""
Module 09D - API Request Models

Pydantic models for API request validation.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from core.schemas import Assignment


class OnDemandRequest(BaseModel):
    """Request body for POST /on-demand."""

    model_config = ConfigDict(populate_by_name=True)

    content_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("contentId", "content_id", "cid"),
        description="CID to retrieve",
    )
    provider_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("providerId", "provider_id", "minerId"),
        description="Storage provider id, e.g. f0142637",
    )

    def to_assignment(self) -> Assignment:
        return Assignment(content_id=self.content_id, provider_id=self.provider_id)
