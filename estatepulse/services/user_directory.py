"""User resolution for login - map an email address to a users row."""

import logging
import os
import re
from typing import Optional

from estatepulse.models.agency import User, UserRole
from estatepulse.services.supabase_client import SupabaseClient
from estatepulse.utils.errors import SupabaseError
from estatepulse.utils.ids import generate_record_id

logger = logging.getLogger(__name__)


def default_agency_id() -> str:
    return os.environ.get("DEFAULT_AGENCY_ID", "a1")


def name_from_email(email: str) -> str:
    """'jane.doe@x.com' -> 'Jane Doe'."""
    local_part = email.split("@")[0]
    words = [word for word in re.split(r"[._\-+]+", local_part) if word]
    return " ".join(word.capitalize() for word in words) or email


async def resolve_user_by_email(email: str) -> Optional[User]:
    """
    Resolve an email address to a User.

    Emails are stored lower-cased and matched exactly. Auto-creates an agent
    in the default agency if nobody has that email yet.
    Returns None for a blank email.
    """
    email = (email or "").strip().lower()
    if not email:
        return None

    async with SupabaseClient() as client:
        try:
            result = client.table("users").select("*").eq("email", email).execute()

            if result.data and len(result.data) > 0:
                user = User(**result.data[0])
                logger.info(
                    "Resolved email to existing user",
                    extra={"user_id": user.id, "agency_id": user.agency_id, "role": user.role.value}
                )
                return user

            new_user = User(
                id=generate_record_id(),
                agency_id=default_agency_id(),
                name=name_from_email(email),
                email=email,
                role=UserRole.AGENT,
            )
            result = client.table("users").insert(new_user.model_dump(mode="json")).execute()

            if result.data and len(result.data) > 0:
                user = User(**result.data[0])
                logger.info(
                    "Provisioned new user from login",
                    extra={"user_id": user.id, "agency_id": user.agency_id}
                )
                return user

            logger.warning("Failed to provision user for login")
            return None

        except Exception as e:
            logger.error(
                f"Error resolving user by email: {e}",
                extra={"error": str(e)}
            )
            raise SupabaseError(f"Failed to resolve user: {e}")
