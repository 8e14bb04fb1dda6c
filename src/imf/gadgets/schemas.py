"""Pydantic schemas for gadget endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UpdateGadgetStatusRequest(BaseModel):
    status: str = Field(..., min_length=1, max_length=32)


class SelfDestructRequest(BaseModel):
    """Omit the code to start the sequence; send it back to confirm."""

    confirmation_code: str | None = Field(None, min_length=1, max_length=16)


class GadgetResponse(BaseModel):
    """A gadget as returned to its owner. Never includes the confirmation code."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    decommissioned_at: datetime | None = None
    destroyed_at: datetime | None = None


class GadgetSummary(BaseModel):
    id: str
    name: str
    status: str
    display: str


class GadgetListResponse(BaseModel):
    message: str
    gadgets: list[GadgetSummary]


class SelfDestructInitiatedResponse(BaseModel):
    id: str
    name: str
    confirmation_code: str
    message: str = "Send this confirmation code back to complete the self-destruct."
