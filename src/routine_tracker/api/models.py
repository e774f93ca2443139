"""Pydantic models for routine version API payloads."""

from pydantic import BaseModel, Field


class SaveVersionRequest(BaseModel):
    """Body of a request to save the current routine."""

    reason: str | None = Field(default=None, max_length=500)
