"""Listing models."""

from enum import Enum
from typing import Optional, Literal
from pydantic import BaseModel, Field


class ListingStatus(str, Enum):
    """Pipeline stages for a listing."""
    NEW = "New"
    ACTIVE = "Active"
    UNDER_CONTRACT = "Under Contract"
    SOLD = "Sold"


class AIScore(BaseModel):
    """LLM deal evaluation attached to a listing."""
    score: float = Field(..., ge=0, le=100, description="Deal score (0-100)")
    explanation: str = Field(..., description="Short analysis")
    risks: list[str] = Field(default_factory=list, description="Identified risks")
    urgency: Literal["Low", "Medium", "High"] = Field(..., description="Urgency: Low, Medium, High")
    last_updated: Optional[str] = None


class ListingDraft(BaseModel):
    """Listing fields produced by the CSV import before hydration."""
    address: str = Field(..., min_length=1, description="Property address")
    seller_name: str = Field(..., description="Seller name")
    price: float = Field(default=0, ge=0, description="Asking or sale price")
    status: ListingStatus = Field(default=ListingStatus.NEW, description="Pipeline stage")
    notes: Optional[str] = Field(None, description="Listing notes")
    metadata: dict[str, str] = Field(default_factory=dict, description="Original import row, verbatim")


class Listing(ListingDraft):
    """Real estate listing scoped to an agency."""
    id: str = Field(..., description="Listing ID (text)")
    agency_id: str = Field(..., description="Agency ID (text FK)")
    assigned_agent: str = Field(..., description="Assigned agent user ID (text FK)")
    created_at: Optional[str] = None
    ai_score: Optional[AIScore] = Field(None, description="Latest AI deal score")
