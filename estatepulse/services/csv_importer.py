"""
CSV import pipeline.

build_preview() turns raw CSV text into typed drafts and a coverage report
without touching storage. commit_import() hydrates the drafts for an agency
and upserts them one by one; a failed record is logged and counted, never
rolled back.
"""

import re
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from estatepulse.models.csv_import import (
    CommitReport,
    Draft,
    EntityType,
    FieldCoverageStatus,
    HeaderResolution,
    ImportContext,
    ImportPreview,
    ParsedRow,
)
from estatepulse.models.listing import Listing, ListingStatus
from estatepulse.services import ai_service
from estatepulse.services.activity_log import log_activity
from estatepulse.services.csv_parser import parse_csv, split_header
from estatepulse.services.field_normalizer import RowView
from estatepulse.services.header_resolver import (
    is_blank_row,
    resolve_headers,
    rows_to_records,
)
from estatepulse.services.import_configs import (
    UNKNOWN_ADDRESS,
    UNKNOWN_SELLER,
    EntityImportConfig,
    get_import_config,
)
from estatepulse.services.import_reporter import build_coverage_report, project_rows
from estatepulse.services.supabase_client import fetch_records, upsert_record
from estatepulse.utils.errors import SupabaseError
from estatepulse.utils.ids import generate_record_id
from estatepulse.utils.import_config import ImportConfig
from estatepulse.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

RowMapper = Callable[[list[ParsedRow], EntityType], Awaitable[list[dict]]]

SHELL_LISTING_NOTES = "Created from offer import"


def merge_aliases(
    base: dict[str, list[str]],
    overrides: Optional[dict[str, list[str]]] = None,
) -> dict[str, list[str]]:
    """Caller aliases extend the configured ones; field names are case-insensitive."""
    merged = {key.lower(): list(terms) for key, terms in base.items()}
    for key, terms in (overrides or {}).items():
        bucket = merged.setdefault(key.strip().lower(), [])
        bucket.extend(term for term in terms if term not in bucket)
    return merged


def merge_mapped_row(raw: ParsedRow, mapped: dict) -> ParsedRow:
    """Mapped canonical keys first, then every raw column the mapping did not fill."""
    merged: ParsedRow = {}
    for key, value in mapped.items():
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(item) for item in value)
        value = "" if value is None else str(value).strip()
        key = str(key).strip().lower()
        if key and value:
            merged[key] = value
    for key, value in raw.items():
        merged.setdefault(key, value)
    return merged


async def apply_ai_mapping(
    rows: list[ParsedRow],
    entity_type: EntityType,
    row_mapper: Optional[RowMapper] = None,
    batch_size: Optional[int] = None,
) -> tuple[list[ParsedRow], bool]:
    """
    Re-key rows through the AI mapper, batch by batch, in order.

    A batch that raises or comes back with the wrong number of rows keeps its
    raw rows. Returns (rows, whether any batch was mapped).
    """
    row_mapper = row_mapper or ai_service.map_rows
    batch_size = batch_size or ImportConfig.AI_MAPPING_BATCH_SIZE
    result: list[ParsedRow] = []
    applied = False

    for start in range(0, len(rows), batch_size):
        batch = rows[start:start + batch_size]
        try:
            mapped = await row_mapper(batch, entity_type)
        except Exception as e:
            logger.warning(
                "AI field mapping failed, keeping raw rows",
                entity_type=entity_type.value,
                batch_start=start,
                batch_size=len(batch),
                error=str(e),
            )
            result.extend(batch)
            continue

        if len(mapped) != len(batch):
            logger.warning(
                "AI field mapping returned wrong row count, keeping raw rows",
                entity_type=entity_type.value,
                batch_start=start,
                expected_rows=len(batch),
                returned_rows=len(mapped),
            )
            result.extend(batch)
            continue

        result.extend(merge_mapped_row(raw, item) for raw, item in zip(batch, mapped))
        applied = True

    return result, applied


def _union_keys(rows: list[ParsedRow]) -> list[str]:
    keys: list[str] = []
    seen: set[str] = set()
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                keys.append(key)
    return keys


def build_drafts(
    rows: list[ParsedRow],
    originals: list[ParsedRow],
    resolution: HeaderResolution,
    config: EntityImportConfig,
    fallback: Optional[HeaderResolution] = None,
) -> list[Draft]:
    drafts: list[Draft] = []
    for index, (row, original) in enumerate(zip(rows, originals)):
        view = RowView(row, resolution, original=original, fallback=fallback)
        try:
            drafts.append(config.build_draft(view))
        except ValidationError as e:
            logger.warning(
                "Skipping row that does not form a valid draft",
                entity_type=config.entity_type.value,
                row_index=index,
                error=str(e),
            )
    return drafts


async def build_preview(
    csv_text: str,
    entity_type,
    *,
    aliases: Optional[dict[str, list[str]]] = None,
    use_ai: Optional[bool] = None,
    row_mapper: Optional[RowMapper] = None,
) -> ImportPreview:
    """
    Parse, resolve and normalize a CSV file into drafts for review.

    Raises ImportStructureError (no data rows, no expected column, unknown
    entity type) before anything else happens. Row-level problems never raise.
    """
    config = get_import_config(entity_type)
    if use_ai is None:
        use_ai = ImportConfig.USE_AI_FIELD_MAPPING

    with log_timing("csv_preview", logger=logger, entity_type=config.entity_type.value) as timing:
        rows = parse_csv(csv_text)
        raw_headers, data_rows = split_header(rows)

        resolution = resolve_headers(
            raw_headers,
            config.expected_headers,
            merge_aliases(config.aliases, aliases),
            width=max(len(row) for row in rows),
        )
        records = rows_to_records(resolution.headers, data_rows)
        kept = [record for record in records if not is_blank_row(record)]

        working = kept
        working_resolution = resolution
        fallback = None
        ai_mapped = False
        if use_ai and kept:
            working, ai_mapped = await apply_ai_mapping(kept, config.entity_type, row_mapper)
            if ai_mapped:
                working_resolution = resolve_headers(
                    _union_keys(working),
                    config.expected_headers,
                    merge_aliases(config.aliases, aliases),
                    require_expected=False,
                )
                fallback = resolution

        drafts = build_drafts(working, kept, working_resolution, config, fallback)
        coverage = build_coverage_report(
            project_rows(working, working_resolution, fallback),
            config.expected_headers,
        )
        timing.update(
            total_rows=len(records),
            discarded_rows=len(records) - len(kept),
            drafts=len(drafts),
            ai_mapped=ai_mapped,
            missing_fields=[c.field for c in coverage if c.status == FieldCoverageStatus.MISSING],
        )

    return ImportPreview(
        entity_type=config.entity_type,
        headers=resolution.headers,
        drafts=drafts,
        coverage=coverage,
        total_rows=len(records),
        discarded_rows=len(records) - len(kept),
        ai_mapped=ai_mapped,
    )


def address_key(address: str) -> str:
    return re.sub(r"[^a-z0-9]", "", (address or "").lower())


def hydrate_draft(draft: Draft, config: EntityImportConfig, context: ImportContext, **overrides) -> dict:
    """Stamp a draft with id, agency, owner and creation time; returns the storage row."""
    data = draft.model_dump(mode="json")
    data.update(
        id=generate_record_id(),
        agency_id=context.agency_id,
        created_at=context.now_iso(),
    )
    data[config.owner_field] = context.actor_user_id
    data.update(overrides)
    return config.record_model(**data).model_dump(mode="json")


def build_shell_listing(address: str, context: ImportContext) -> Listing:
    """Minimal listing that anchors offers on a property not tracked yet."""
    return Listing(
        id=generate_record_id(),
        agency_id=context.agency_id,
        assigned_agent=context.actor_user_id,
        created_at=context.now_iso(),
        address=address or UNKNOWN_ADDRESS,
        seller_name=UNKNOWN_SELLER,
        price=0,
        status=ListingStatus.NEW,
        notes=SHELL_LISTING_NOTES,
    )


async def _load_listing_index(context: ImportContext, existing_listings: Optional[list[Listing]]) -> dict[str, str]:
    """Address key -> listing id; empty when the listings cannot be read, so every offer gets a shell."""
    if existing_listings is None:
        try:
            rows = await fetch_records("listings", context.agency_id)
        except SupabaseError as e:
            logger.warning(
                "Could not load listings for offer linking, creating shells",
                agency_id=context.agency_id,
                error=str(e),
            )
            rows = []
        existing_listings = [Listing(**row) for row in rows]
    return {address_key(listing.address): listing.id for listing in existing_listings}


async def commit_import(
    preview: ImportPreview,
    context: ImportContext,
    *,
    existing_listings: Optional[list[Listing]] = None,
) -> CommitReport:
    """
    Persist every draft of a preview, one upsert per record.

    Offers are linked to an existing listing by address; unknown properties
    get one shell listing each, written before the offers that use it.
    """
    config = get_import_config(preview.entity_type)
    report = CommitReport()
    records: list[tuple[int, Optional[dict]]] = []

    with log_timing("csv_commit", logger=logger, entity_type=config.entity_type.value, agency_id=context.agency_id) as timing:
        if config.entity_type == EntityType.OFFERS:
            listing_index = await _load_listing_index(context, existing_listings)
            shells: dict[str, Listing] = {}
            failed_shells: set[str] = set()

            for index, draft in enumerate(preview.drafts):
                key = address_key(draft.property_address)
                listing_id = draft.listing_id or listing_index.get(key)
                if listing_id is None:
                    if key not in shells:
                        shells[key] = build_shell_listing(draft.property_address, context)
                    listing_id = shells[key].id
                records.append((index, hydrate_draft(draft, config, context, listing_id=listing_id)))

            for key, shell in shells.items():
                try:
                    await upsert_record("listings", shell.model_dump(mode="json"))
                    report.shell_listing_ids.append(shell.id)
                except SupabaseError as e:
                    logger.error("Shell listing upsert failed", address=shell.address, error=str(e))
                    failed_shells.add(shell.id)

            records = [
                (index, None if record["listing_id"] in failed_shells else record)
                for index, record in records
            ]
        else:
            records = [
                (index, hydrate_draft(draft, config, context))
                for index, draft in enumerate(preview.drafts)
            ]

        for index, record in records:
            if record is None:
                report.failed += 1
                report.failed_rows.append(index)
                continue
            try:
                await upsert_record(config.table, record)
                report.succeeded += 1
                report.created_ids.append(record["id"])
            except SupabaseError as e:
                logger.error(
                    "Import record upsert failed",
                    entity_type=config.entity_type.value,
                    row_index=index,
                    error=str(e),
                )
                report.failed += 1
                report.failed_rows.append(index)

        timing.update(
            succeeded=report.succeeded,
            failed=report.failed,
            shell_listings=len(report.shell_listing_ids),
        )

    try:
        await log_activity(
            context.agency_id,
            context.actor_user_id,
            f"imported {report.succeeded} {config.title}",
            "CSV import",
            type="audit",
            timestamp=context.now_iso(),
        )
    except SupabaseError as e:
        logger.warning("Could not record import activity", error=str(e))

    return report


async def import_csv(
    csv_text: str,
    entity_type,
    context: ImportContext,
    **preview_options,
) -> tuple[ImportPreview, CommitReport]:
    """Preview and commit in one go, for callers that skip the review step."""
    preview = await build_preview(csv_text, entity_type, **preview_options)
    report = await commit_import(preview, context)
    return preview, report
