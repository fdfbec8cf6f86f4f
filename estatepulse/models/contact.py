"""Contact models."""

from typing import Optional
from pydantic import BaseModel, Field


class ContactDraft(BaseModel):
    """Contact fields produced by the CSV import before hydration."""
    name: str = Field(..., min_length=1, description="Full name")
    email: str = Field(default="", description="Email address")
    phone: str = Field(default="", description="Phone number")
    tags: list[str] = Field(default_factory=list, description="Unique tag labels")
    notes: str = Field(default="", description="Free-form notes")
    metadata: dict[str, str] = Field(default_factory=dict, description="Original import row, verbatim")


class Contact(ContactDraft):
    """CRM contact (lead) scoped to an agency."""
    id: str = Field(..., description="Contact ID (text)")
    agency_id: str = Field(..., description="Agency ID (text FK)")
    assigned_to: str = Field(..., description="Owning user ID (text FK)")
    created_at: Optional[str] = None
