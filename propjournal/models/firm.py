"""Firm data model."""

from pydantic import BaseModel, Field


class Firm(BaseModel):
    """Represents a prop-trading firm that holds accounts."""

    id: str = Field(..., min_length=1, description="Unique firm ID")
    name: str = Field(default="", description="Display name")

    model_config = {"frozen": True}
