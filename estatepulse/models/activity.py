"""Activity feed and notification models."""

from typing import Literal
from pydantic import BaseModel, Field


class Activity(BaseModel):
    """Activity model - one entry of the agency activity feed / audit trail."""
    id: str = Field(..., description="Activity ID (text)")
    agency_id: str = Field(..., description="Agency ID (text FK)")
    user_id: str = Field(..., description="Acting user ID")
    action: str = Field(..., description="What happened, e.g. 'changed listing status from New to Active'")
    target: str = Field(..., description="What it happened to, e.g. an address or buyer name")
    type: Literal["event", "audit", "ai"] = Field(default="event")
    timestamp: str = Field(..., description="ISO timestamp")

    @property
    def is_audit(self) -> bool:
        return self.type == "audit" or "status" in self.action


class Notification(BaseModel):
    id: str = Field(..., description="Notification ID (text)")
    agency_id: str = Field(..., description="Agency ID (text FK)")
    user_id: str = Field(..., description="Recipient user ID")
    title: str
    message: str
    read: bool = False
    timestamp: str = Field(..., description="ISO timestamp")
