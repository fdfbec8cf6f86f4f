"""Record ID generation."""

from datetime import datetime, timezone

from ulid import ULID


def generate_record_id() -> str:
    """Generate a text-based record ID (ULID format)."""
    return str(ULID())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
