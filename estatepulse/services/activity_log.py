"""Agency activity feed, audit trail and user notifications."""

from typing import Literal, Optional

from estatepulse.models.activity import Activity, Notification
from estatepulse.services.supabase_client import (
    fetch_records,
    insert_record,
    update_record,
)
from estatepulse.utils.ids import generate_record_id, utc_now_iso
from estatepulse.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)

ACTIVITY_TABLE = "activities"
NOTIFICATION_TABLE = "notifications"


async def log_activity(
    agency_id: str,
    user_id: str,
    action: str,
    target: str,
    type: Literal["event", "audit", "ai"] = "event",
    timestamp: Optional[str] = None,
) -> Activity:
    """Append one entry to the agency activity feed."""
    activity = Activity(
        id=generate_record_id(),
        agency_id=agency_id,
        user_id=user_id,
        action=action,
        target=target,
        type=type,
        timestamp=timestamp or utc_now_iso(),
    )
    await insert_record(ACTIVITY_TABLE, activity.model_dump())
    logger.debug(
        "Activity logged",
        agency_id=agency_id,
        user_id=mask_user_id(user_id),
        action=action,
        activity_type=type,
    )
    return activity


async def get_activity(agency_id: str, limit: int = 200) -> list[Activity]:
    """Most recent activity first."""
    rows = await fetch_records(ACTIVITY_TABLE, agency_id, order_by="timestamp", limit=limit)
    return [Activity(**row) for row in rows]


async def get_audit_log(agency_id: str, limit: int = 200) -> list[Activity]:
    """Audit entries plus every status change from the feed."""
    return [a for a in await get_activity(agency_id, limit=limit) if a.is_audit]


async def push_notification(agency_id: str, user_id: str, title: str, message: str) -> Notification:
    notification = Notification(
        id=generate_record_id(),
        agency_id=agency_id,
        user_id=user_id,
        title=title,
        message=message,
        timestamp=utc_now_iso(),
    )
    await insert_record(NOTIFICATION_TABLE, notification.model_dump())
    return notification


async def get_notifications(agency_id: str, user_id: str, limit: int = 100) -> list[Notification]:
    rows = await fetch_records(
        NOTIFICATION_TABLE,
        agency_id,
        filters={"user_id": user_id},
        order_by="timestamp",
        limit=limit,
    )
    return [Notification(**row) for row in rows]


async def mark_notification_read(notification_id: str, agency_id: str) -> Notification:
    row = await update_record(NOTIFICATION_TABLE, notification_id, agency_id, {"read": True})
    return Notification(**row)
