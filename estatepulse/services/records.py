"""Agency-scoped CRUD for contacts, listings, offers, tasks and message threads."""

from typing import Optional

from estatepulse.models.agency import UserRole
from estatepulse.models.contact import Contact
from estatepulse.models.listing import Listing, ListingStatus
from estatepulse.models.offer import Offer, OfferStatus
from estatepulse.models.task import Task, TaskStatus
from estatepulse.models.thread import Message, Thread
from estatepulse.services.activity_log import log_activity, push_notification
from estatepulse.services.supabase_client import (
    delete_records,
    fetch_record,
    fetch_records,
    update_record,
    upsert_record,
)
from estatepulse.utils.errors import SupabaseError
from estatepulse.utils.ids import generate_record_id, utc_now_iso
from estatepulse.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


def _owner_filter(role, user_id: str, owner_field: str) -> Optional[dict]:
    """Admins see the whole agency; everyone else only what they own."""
    if UserRole(role) == UserRole.ADMIN:
        return None
    return {owner_field: user_id}


async def get_contacts(agency_id: str, role, user_id: str) -> list[Contact]:
    rows = await fetch_records("contacts", agency_id, filters=_owner_filter(role, user_id, "assigned_to"))
    return [Contact(**row) for row in rows]


async def get_listings(agency_id: str, role, user_id: str) -> list[Listing]:
    rows = await fetch_records("listings", agency_id, filters=_owner_filter(role, user_id, "assigned_agent"))
    return [Listing(**row) for row in rows]


async def get_offers(agency_id: str, role, user_id: str) -> list[Offer]:
    rows = await fetch_records("offers", agency_id, filters=_owner_filter(role, user_id, "assigned_to"))
    return [Offer(**row) for row in rows]


async def get_tasks(agency_id: str, role, user_id: str) -> list[Task]:
    rows = await fetch_records("tasks", agency_id, filters=_owner_filter(role, user_id, "assigned_to"))
    return [Task(**row) for row in rows]


async def save_contact(contact: Contact) -> Contact:
    return Contact(**await upsert_record("contacts", contact.model_dump(mode="json")))


async def save_listing(listing: Listing) -> Listing:
    return Listing(**await upsert_record("listings", listing.model_dump(mode="json")))


async def save_task(task: Task) -> Task:
    return Task(**await upsert_record("tasks", task.model_dump(mode="json")))


async def save_offer(offer: Offer, user_id: str) -> Offer:
    """Upsert an offer; a brand-new offer is announced in the activity feed."""
    existing = await fetch_record("offers", offer.id, offer.agency_id)
    saved = Offer(**await upsert_record("offers", offer.model_dump(mode="json")))
    if existing is None:
        await log_activity(offer.agency_id, user_id, "received new offer for", offer.buyer_name)
    return saved


async def update_listing_status(
    listing_id: str,
    agency_id: str,
    status: ListingStatus,
    user_id: str,
) -> Optional[Listing]:
    """
    Move a listing to another pipeline stage.

    Logs the transition and notifies the assigned agent. Returns None when the
    listing does not exist in this agency.
    """
    row = await fetch_record("listings", listing_id, agency_id)
    if row is None:
        logger.warning("Listing not found for status update", listing_id=listing_id, agency_id=agency_id)
        return None

    listing = Listing(**row)
    old_status = listing.status
    updated = Listing(**await update_record("listings", listing_id, agency_id, {"status": ListingStatus(status).value}))

    await log_activity(
        agency_id,
        user_id,
        f"changed listing status from {old_status.value} to {updated.status.value}",
        listing.address,
    )
    await push_notification(
        agency_id,
        listing.assigned_agent,
        "Listing Update",
        f"The status for {listing.address} is now {updated.status.value}",
    )
    logger.info(
        "Listing status updated",
        listing_id=listing_id,
        old_status=old_status.value,
        new_status=updated.status.value,
        user_id=mask_user_id(user_id),
    )
    return updated


async def update_offer_status(
    offer_id: str,
    agency_id: str,
    status: OfferStatus,
    user_id: str,
) -> Optional[Offer]:
    row = await fetch_record("offers", offer_id, agency_id)
    if row is None:
        logger.warning("Offer not found for status update", offer_id=offer_id, agency_id=agency_id)
        return None

    offer = Offer(**row)
    updated = Offer(**await update_record("offers", offer_id, agency_id, {"status": OfferStatus(status).value}))
    await log_activity(agency_id, user_id, f"updated offer for {offer.buyer_name} to", updated.status.value)
    return updated


async def toggle_task_status(task_id: str, agency_id: str) -> Optional[Task]:
    """Pending <-> Done."""
    row = await fetch_record("tasks", task_id, agency_id)
    if row is None:
        return None
    task = Task(**row)
    new_status = TaskStatus.DONE if task.status == TaskStatus.PENDING else TaskStatus.PENDING
    return Task(**await update_record("tasks", task_id, agency_id, {"status": new_status.value}))


async def delete_contacts(ids: list[str], agency_id: str) -> int:
    return await delete_records("contacts", ids, agency_id)


async def delete_tasks(ids: list[str], agency_id: str) -> int:
    return await delete_records("tasks", ids, agency_id)


# Messaging
async def get_threads(agency_id: str) -> list[Thread]:
    rows = await fetch_records("threads", agency_id)
    return [Thread(**row) for row in rows]


async def save_thread(thread: Thread) -> Thread:
    return Thread(**await upsert_record("threads", thread.model_dump(mode="json")))


async def post_message(thread_id: str, agency_id: str, sender_id: str, text: str) -> Thread:
    """Append a message to a thread."""
    row = await fetch_record("threads", thread_id, agency_id)
    if row is None:
        raise SupabaseError(f"Thread not found: {thread_id}")

    thread = Thread(**row)
    thread.messages.append(
        Message(id=generate_record_id(), sender_id=sender_id, text=text, timestamp=utc_now_iso())
    )
    return await save_thread(thread)
