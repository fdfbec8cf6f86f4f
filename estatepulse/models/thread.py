"""Messaging models."""

from typing import Optional, Literal
from pydantic import BaseModel, Field


class Message(BaseModel):
    id: str = Field(..., description="Message ID (text)")
    sender_id: str = Field(..., description="Sending user ID")
    text: str = Field(..., description="Message body")
    timestamp: str = Field(..., description="ISO timestamp")


class Thread(BaseModel):
    """Team conversation, optionally tied to a listing or offer."""
    id: str = Field(..., description="Thread ID (text)")
    agency_id: str = Field(..., description="Agency ID (text FK)")
    title: str = Field(..., description="Thread title")
    type: Literal["general", "listing", "offer"] = Field(default="general")
    related_id: Optional[str] = Field(None, description="Listing or offer ID for non-general threads")
    messages: list[Message] = Field(default_factory=list)
