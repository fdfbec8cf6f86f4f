"""Offer models - purchase offers moving through the negotiation pipeline."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class OfferStatus(str, Enum):
    """Negotiation pipeline stages."""
    DRAFT = "Draft"
    OFFER_SENT = "Offer Sent"
    IN_TALKS = "In Talks"
    OFFER_ACCEPTED = "Offer Accepted"
    OFFER_DECLINED = "Offer Declined"


class Financing(str, Enum):
    """Buyer financing type."""
    CASH = "Cash"
    CONVENTIONAL = "Conventional"
    FHA = "FHA"
    VA = "VA"


class OfferDraft(BaseModel):
    """Offer fields produced by the CSV import before hydration."""
    buyer_name: str = Field(..., min_length=1, description="Buyer name")
    property_address: str = Field(default="", description="Address used to link a listing")
    listing_id: Optional[str] = Field(None, description="Linked listing ID, set at hydration")
    price: float = Field(default=0, ge=0, description="Offer amount")
    down_payment: float = Field(default=0, ge=0, description="Down payment")
    earnest_money: float = Field(default=0, ge=0, description="Earnest money deposit")
    financing: Financing = Field(default=Financing.CONVENTIONAL, description="Financing type")
    inspection_period: int = Field(default=0, ge=0, description="Inspection period in days")
    contingencies: list[str] = Field(default_factory=list, description="Unique contingency labels")
    closing_date: str = Field(default="", description="Closing date (yyyy-MM-dd) or empty")
    status: OfferStatus = Field(default=OfferStatus.DRAFT, description="Negotiation stage")
    metadata: dict[str, str] = Field(default_factory=dict, description="Original import row, verbatim")


class Offer(OfferDraft):
    """Offer on a listing scoped to an agency."""
    id: str = Field(..., description="Offer ID (text)")
    agency_id: str = Field(..., description="Agency ID (text FK)")
    listing_id: str = Field(..., description="Listing ID (text FK)")
    assigned_to: str = Field(..., description="Owning user ID (text FK)")
    created_at: Optional[str] = None
    ai_summary: Optional[str] = Field(None, description="LLM summary of the deal")
