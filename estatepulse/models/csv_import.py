"""CSV import pipeline models (ephemeral, never persisted)."""

from enum import Enum
from typing import Callable, Optional, Union
from datetime import datetime, timezone
from pydantic import BaseModel, Field, model_validator

from estatepulse.models.contact import ContactDraft
from estatepulse.models.listing import ListingDraft
from estatepulse.models.offer import OfferDraft
from estatepulse.models.task import TaskDraft

# lower-cased column label -> raw cell
ParsedRow = dict[str, str]

Draft = Union[ContactDraft, ListingDraft, OfferDraft, TaskDraft]


class EntityType(str, Enum):
    CONTACTS = "contacts"
    LISTINGS = "listings"
    OFFERS = "offers"
    TASKS = "tasks"


DRAFT_MODELS = {
    EntityType.CONTACTS: ContactDraft,
    EntityType.LISTINGS: ListingDraft,
    EntityType.OFFERS: OfferDraft,
    EntityType.TASKS: TaskDraft,
}


class FieldCoverageStatus(str, Enum):
    FOUND = "FOUND"
    EMPTY = "EMPTY"
    MISSING = "MISSING"


class FieldCoverage(BaseModel):
    field: str = Field(..., description="Expected header as configured, e.g. 'Phone'")
    status: FieldCoverageStatus
    filled_rows: int = Field(default=0, ge=0, description="Rows with a non-empty value")


class HeaderResolution(BaseModel):
    """Unique header list plus the column each canonical field resolved to."""
    headers: list[str]
    field_columns: dict[str, Optional[int]] = Field(default_factory=dict)

    def column_for(self, field: str) -> Optional[str]:
        """Header name resolved for a canonical field, or None."""
        index = self.field_columns.get(field.lower())
        if index is None:
            return None
        return self.headers[index]

    @property
    def resolved_fields(self) -> list[str]:
        return [f for f, idx in self.field_columns.items() if idx is not None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ImportContext(BaseModel):
    """Who is importing, for which agency, and when."""
    agency_id: str = Field(..., description="Agency receiving the records")
    actor_user_id: str = Field(..., description="User the records are attributed to")
    timestamp_source: Callable[[], datetime] = Field(default=_utc_now, exclude=True)

    def now_iso(self) -> str:
        return self.timestamp_source().isoformat()


class ImportPreview(BaseModel):
    """Everything the operator reviews before committing an import."""
    entity_type: EntityType
    headers: list[str] = Field(default_factory=list)
    drafts: list[Draft] = Field(default_factory=list)
    coverage: list[FieldCoverage] = Field(default_factory=list)
    total_rows: int = Field(default=0, ge=0, description="Data rows in the file")
    discarded_rows: int = Field(default=0, ge=0, description="Blank rows dropped")
    ai_mapped: bool = Field(default=False, description="Whether the AI pre-pass changed any rows")

    @model_validator(mode="before")
    @classmethod
    def _drafts_for_entity_type(cls, data):
        """Drafts posted back as JSON are parsed as the preview's entity type."""
        if isinstance(data, dict) and "entity_type" in data and data.get("drafts"):
            draft_model = DRAFT_MODELS[EntityType(data["entity_type"])]
            data = {
                **data,
                "drafts": [
                    draft if isinstance(draft, BaseModel) else draft_model(**draft)
                    for draft in data["drafts"]
                ],
            }
        return data


class CommitReport(BaseModel):
    """Outcome of persisting an import, one entry per draft."""
    succeeded: int = 0
    failed: int = 0
    created_ids: list[str] = Field(default_factory=list)
    failed_rows: list[int] = Field(default_factory=list, description="Zero-based draft indexes that failed")
    shell_listing_ids: list[str] = Field(default_factory=list, description="Listings synthesized for offers")
