"""Pydantic schemas for Message."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Schema for sending a message.

    Ids are kept as plain strings so malformed values are reported as 400 by
    the endpoint after authentication and rate limiting, in that order.
    ``sender_id`` defaults to the authenticated caller when omitted.
    """
    sender_id: Optional[str] = Field(None, description="Defaults to the authenticated caller")
    receiver_id: str = Field("", description="UUID of the receiving user")
    message: str = Field("", description="Message content, trimmed and capped at 1000 characters")


class MessageResponse(BaseModel):
    """Schema for Message response."""
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageEvent(BaseModel):
    """Live-feed event pushed for every stored message."""
    type: Literal["INSERT"] = "INSERT"
    record: MessageResponse
