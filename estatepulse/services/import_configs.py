"""Per-entity CSV import configuration: expected headers, aliases and draft builders."""

from typing import Callable

from pydantic import BaseModel, Field

from estatepulse.models.contact import Contact, ContactDraft
from estatepulse.models.csv_import import Draft, EntityType
from estatepulse.models.listing import Listing, ListingDraft
from estatepulse.models.offer import Offer, OfferDraft
from estatepulse.models.task import Task, TaskDraft
from estatepulse.services.field_normalizer import (
    RowView,
    bucket_financing,
    bucket_offer_status,
    bucket_task_priority,
    bucket_task_status,
    coerce_amount,
    iso_date,
    parse_days,
    resolve_email,
    resolve_listing_status,
    resolve_phone,
    resolve_price,
    resolve_text,
    split_list,
)
from estatepulse.utils.errors import UnknownEntityTypeError

UNKNOWN_CONTACT = "Unknown Contact"
UNKNOWN_ADDRESS = "Unknown Address"
UNKNOWN_SELLER = "Unknown Seller"
UNKNOWN_BUYER = "Unknown Buyer"
UNTITLED_TASK = "Untitled Task"


class EntityImportConfig(BaseModel):
    """How one entity type is imported from a spreadsheet."""
    entity_type: EntityType
    table: str = Field(..., description="Supabase table the records are upserted into")
    owner_field: str = Field(..., description="Column holding the owning user ID")
    title: str = Field(..., description="Human label used in activity entries")
    expected_headers: list[str] = Field(..., description="Headers reported in the coverage report")
    aliases: dict[str, list[str]] = Field(default_factory=dict, description="Canonical field -> header synonyms")
    ai_target_keys: list[str] = Field(default_factory=list, description="Keys the AI remap is asked to produce")
    build_draft: Callable[[RowView], Draft] = Field(..., exclude=True)
    record_model: type[BaseModel] = Field(..., exclude=True, description="Persisted model a draft hydrates into")


def build_contact_draft(view: RowView) -> ContactDraft:
    return ContactDraft(
        name=resolve_text(view, "name", ("full_name", "fullname", "contact"), UNKNOWN_CONTACT),
        email=resolve_email(view),
        phone=resolve_phone(view),
        tags=split_list(view.value("tags")),
        notes=resolve_text(view, "notes", ("comment",), ""),
        metadata=view.metadata,
    )


def build_listing_draft(view: RowView) -> ListingDraft:
    # status first: it consumes the cells the price scan must not read
    status = resolve_listing_status(view)
    return ListingDraft(
        address=resolve_text(view, "address", ("property_address", "street_address", "location"), UNKNOWN_ADDRESS),
        seller_name=resolve_text(view, "seller", ("seller_name", "owner_name", "owner"), UNKNOWN_SELLER),
        price=resolve_price(view),
        status=status,
        notes=resolve_text(view, "notes", ("comment", "description"), "") or None,
        metadata=view.metadata,
    )


def build_offer_draft(view: RowView) -> OfferDraft:
    return OfferDraft(
        buyer_name=resolve_text(view, "buyer", ("buyer_name", "purchaser"), UNKNOWN_BUYER),
        property_address=resolve_text(view, "address", ("property_address", "listing"), ""),
        price=resolve_price(view),
        down_payment=coerce_amount(view.value("down payment")),
        earnest_money=coerce_amount(view.value("earnest money")),
        financing=bucket_financing(view.value("financing")),
        inspection_period=parse_days(view.value("inspection period")),
        contingencies=split_list(view.value("contingencies")),
        closing_date=iso_date(view.value("closing date")),
        status=bucket_offer_status(view.value("status")),
        metadata=view.metadata,
    )


def build_task_draft(view: RowView) -> TaskDraft:
    return TaskDraft(
        title=resolve_text(view, "title", ("task_name", "description"), UNTITLED_TASK),
        due_date=iso_date(view.value("due date")),
        status=bucket_task_status(view.value("status")),
        priority=bucket_task_priority(view.value("priority")),
        metadata=view.metadata,
    )


IMPORT_CONFIGS: dict[EntityType, EntityImportConfig] = {
    EntityType.CONTACTS: EntityImportConfig(
        entity_type=EntityType.CONTACTS,
        table="contacts",
        owner_field="assigned_to",
        title="contacts",
        expected_headers=["Name", "Email", "Phone"],
        aliases={
            "name": ["full name", "client", "customer", "contact name", "lead"],
            "email": ["e-mail", "email address"],
            "phone": ["mobile", "cell", "tel"],
            "tags": ["tag", "labels"],
            "notes": ["note", "comments", "remarks"],
        },
        ai_target_keys=["name", "email", "phone", "tags", "notes"],
        build_draft=build_contact_draft,
        record_model=Contact,
    ),
    EntityType.LISTINGS: EntityImportConfig(
        entity_type=EntityType.LISTINGS,
        table="listings",
        owner_field="assigned_agent",
        title="listings",
        expected_headers=["Address", "Seller", "Price", "Status"],
        aliases={
            "address": ["street", "property", "location", "addr"],
            "seller": ["owner", "vendor", "client"],
            "price": ["amount", "amt", "list price", "asking", "value", "cost"],
            "status": ["stage"],
            "settlement date": ["settle", "settlement", "closing date", "close date", "closed date", "sold date"],
            "notes": ["note", "comments", "remarks", "description"],
        },
        ai_target_keys=["address", "seller", "price", "status", "settlement date", "notes"],
        build_draft=build_listing_draft,
        record_model=Listing,
    ),
    EntityType.OFFERS: EntityImportConfig(
        entity_type=EntityType.OFFERS,
        table="offers",
        owner_field="assigned_to",
        title="offers",
        expected_headers=["Buyer", "Price"],
        aliases={
            "buyer": ["purchaser", "client"],
            "address": ["property", "street", "addr"],
            "price": ["offer price", "offer amount", "amount", "amt"],
            "down payment": ["down"],
            "earnest money": ["earnest", "emd", "deposit"],
            "financing": ["finance", "loan", "funding"],
            "inspection period": ["inspection"],
            "contingencies": ["contingenc", "condition"],
            "closing date": ["closing", "close date", "settle"],
            "status": ["stage"],
        },
        ai_target_keys=[
            "buyer", "address", "price", "down payment", "earnest money", "financing",
            "inspection period", "contingencies", "closing date", "status",
        ],
        build_draft=build_offer_draft,
        record_model=Offer,
    ),
    EntityType.TASKS: EntityImportConfig(
        entity_type=EntityType.TASKS,
        table="tasks",
        owner_field="assigned_to",
        title="tasks",
        expected_headers=["Title", "Due Date"],
        aliases={
            "title": ["task", "name", "subject", "summary"],
            "due date": ["due", "deadline", "date"],
            "status": ["done", "complete"],
            "priority": ["importance", "urgency"],
        },
        ai_target_keys=["title", "due date", "status", "priority"],
        build_draft=build_task_draft,
        record_model=Task,
    ),
}


def get_import_config(entity_type) -> EntityImportConfig:
    """Look up the import configuration for an entity type (enum or its string value)."""
    try:
        return IMPORT_CONFIGS[EntityType(entity_type)]
    except (ValueError, KeyError):
        raise UnknownEntityTypeError(f"No import configuration for entity type: {entity_type}")
