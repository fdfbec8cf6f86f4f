"""Dashboard aggregate models."""

from typing import Optional
from pydantic import BaseModel, Field


class AgentPerformance(BaseModel):
    user_id: str
    name: str
    avatar: Optional[str] = None
    closed: int = Field(default=0, description="Sold listings assigned to the agent")
    closed_volume: float = Field(default=0, description="Sum of sold listing prices")


class DashboardStats(BaseModel):
    """Headline numbers for an agency (or one agent's slice of it)."""
    active_listings: int = 0
    closed_listings: int = 0
    pending_tasks: int = 0
    total_contacts: int = 0
    sales_volume: float = 0
    listing_status_breakdown: dict[str, int] = Field(default_factory=dict)
    leaderboard: list[AgentPerformance] = Field(default_factory=list)
