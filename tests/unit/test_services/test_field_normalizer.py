"""Tests for field resolver strategies."""

import pytest
from estatepulse.models.listing import ListingStatus
from estatepulse.models.offer import Financing, OfferStatus
from estatepulse.models.task import TaskPriority, TaskStatus
from estatepulse.services.field_normalizer import (
    RowView,
    bucket_financing,
    bucket_listing_status,
    bucket_offer_status,
    bucket_task_priority,
    bucket_task_status,
    extract_phone,
    first_resolved,
    iso_date,
    parse_amount,
    parse_days,
    resolve_email,
    resolve_listing_status,
    resolve_phone,
    resolve_price,
    split_list,
    status_from_settlement_date,
    status_from_status_column,
)
from estatepulse.services.header_resolver import resolve_headers, rows_to_records
from estatepulse.services.import_configs import get_import_config


def make_view(headers, values, entity_type="listings", expected=None, aliases=None):
    if expected is None:
        config = get_import_config(entity_type)
        expected, aliases = config.expected_headers, config.aliases
    resolution = resolve_headers(headers, expected, aliases, width=len(values), require_expected=False)
    row = rows_to_records(resolution.headers, [values])[0]
    return RowView(row, resolution)


# Amounts

@pytest.mark.unit
@pytest.mark.parametrize("raw,expected", [
    ("$450,000", 450000.0),
    ("  310000 ", 310000.0),
    ("€1,250.50", 1250.5),
    ("-500", 0.0),
    ("", None),
    ("call agent", None),
    ("nan", None),
    ("inf", None),
])
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.unit
def test_mapped_price_column_is_authoritative():
    view = make_view(["Address", "Price", "Other"], ["1 Rd", "call", "450000"])

    assert resolve_price(view) == 0.0


@pytest.mark.unit
def test_price_narrow_scan_skips_zip_columns():
    view = make_view(["Address", "Zip", "Misc"], ["1 Rd", "90210", "350,000"])

    assert resolve_price(view) == 350000.0


@pytest.mark.unit
def test_price_wide_scan_when_nothing_in_narrow_range():
    view = make_view(["Address", "Misc"], ["1 Rd", "900"])

    assert resolve_price(view) == 900.0


@pytest.mark.unit
def test_price_defaults_to_zero_without_numeric_cell_in_range():
    view = make_view(["Address", "Misc", "Other"], ["1 Rd", "12", "n/a"])

    assert resolve_price(view) == 0.0


@pytest.mark.unit
def test_price_scan_ignores_settlement_date_cells():
    view = make_view(["Address", "Settlement Date", "Misc"], ["5 Oak Ln", "20230115", "310000"])

    status = resolve_listing_status(view)

    assert status == ListingStatus.SOLD
    assert resolve_price(view) == 310000.0


@pytest.mark.unit
def test_price_scan_respects_configured_ranges(monkeypatch):
    from estatepulse.utils.import_config import ImportConfig

    view = make_view(["Address", "Misc", "Other"], ["1 Rd", "700", "2500"])
    assert resolve_price(view) == 700.0

    monkeypatch.setattr(ImportConfig, "PRICE_SCAN_NARROW_MIN", 1000.0)
    view = make_view(["Address", "Misc", "Other"], ["1 Rd", "700", "2500"])
    assert resolve_price(view) == 2500.0


# Listing status

@pytest.mark.unit
@pytest.mark.parametrize("text,expected", [
    ("SOLD", ListingStatus.SOLD),
    ("sold - settled", ListingStatus.SOLD),
    ("Archived", ListingStatus.SOLD),
    ("Pending", ListingStatus.UNDER_CONTRACT),
    ("Under Offer", ListingStatus.UNDER_CONTRACT),
    ("For Sale", ListingStatus.ACTIVE),
    ("On Market", ListingStatus.ACTIVE),
    ("Draft", ListingStatus.NEW),
    ("something else", ListingStatus.NEW),
])
def test_bucket_listing_status(text, expected):
    assert bucket_listing_status(text) == expected


@pytest.mark.unit
@pytest.mark.parametrize("status_text", ["sold", "Sold", "SOLD", "sold 2021"])
def test_status_column_containing_sold_is_sold(status_text):
    view = make_view(["Address", "Status"], ["1 Rd", status_text])

    assert resolve_listing_status(view) == ListingStatus.SOLD


@pytest.mark.unit
@pytest.mark.parametrize("status_text", ["Active", "Pending", "New", ""])
def test_settlement_date_overrides_status_column(status_text):
    view = make_view(["Address", "Status", "Settlement Date"], ["1 Rd", status_text, "2023-01-15"])

    assert resolve_listing_status(view) == ListingStatus.SOLD


@pytest.mark.unit
def test_unparseable_settlement_date_falls_through_to_status_column():
    view = make_view(["Address", "Status", "Settlement Date"], ["1 Rd", "Active", "TBD"])

    assert status_from_settlement_date(view) is None
    assert resolve_listing_status(view) == ListingStatus.ACTIVE


@pytest.mark.unit
def test_status_strategies_mark_cells_consumed():
    view = make_view(["Address", "Status"], ["1 Rd", "Active"])

    status_from_status_column(view)

    assert "status" in view.consumed


@pytest.mark.unit
def test_keyword_scan_over_unmapped_cells():
    view = make_view(["Address", "", "Price"], ["1 Rd", "Under contract since May", "500000"])

    assert resolve_listing_status(view) == ListingStatus.UNDER_CONTRACT
    assert "column_1" in view.consumed


@pytest.mark.unit
def test_keyword_scan_matches_whole_words_only():
    view = make_view(["Address", ""], ["1 Rd", "Newton Crescent"])

    assert resolve_listing_status(view) == ListingStatus.NEW
    assert not view.consumed


@pytest.mark.unit
def test_status_defaults_to_new():
    view = make_view(["Address", "Seller"], ["1 Rd", "Ann"])

    assert resolve_listing_status(view) == ListingStatus.NEW


# Contact details

@pytest.mark.unit
@pytest.mark.parametrize("cell,expected", [
    ("555-0199 mobile", "555-0199"),
    ("Tel: +61 400 123 456", "+61 400 123 456"),
    ("(555) 123-4567", "555 123-4567"),
    ("555 0199", "555 0199"),
    ("2023-01-15", None),
    ("Springfield 5550199", None),
    ("12-34", None),
    ("", None),
])
def test_extract_phone(cell, expected):
    assert extract_phone(cell) == expected


@pytest.mark.unit
def test_phone_from_explicit_column():
    view = make_view(["Name", "Phone"], ["Alice", "555-0100"], entity_type="contacts")

    assert resolve_phone(view) == "555-0100"


@pytest.mark.unit
def test_phone_from_header_scan_when_field_not_configured():
    view = make_view(["Name", "Cell No"], ["Alice", "0400 111 222"], expected=["Name"])

    assert resolve_phone(view) == "0400 111 222"


@pytest.mark.unit
def test_phone_from_row_scan_in_unlabelled_column():
    view = make_view(["Name", "Email"], ["Alice Johnson", "alice@x.com", "555-0199 mobile"], entity_type="contacts")

    assert resolve_phone(view) == "555-0199"


@pytest.mark.unit
def test_phone_row_scan_ignores_columns_mapped_to_other_fields():
    view = make_view(["Name", "Notes"], ["555 0199", "555 0123"], entity_type="contacts")

    assert resolve_phone(view) == ""


@pytest.mark.unit
def test_email_from_row_scan():
    view = make_view(["Name", ""], ["Alice", "alice@x.com"], entity_type="contacts")

    assert resolve_email(view) == "alice@x.com"


# Small parsers

@pytest.mark.unit
def test_split_list_trims_and_dedupes_in_order():
    assert split_list("vip, buyer;vip, ,first home") == ["vip", "buyer", "first home"]
    assert split_list("") == []


@pytest.mark.unit
@pytest.mark.parametrize("text,expected", [
    ("Cash buyer", Financing.CASH),
    ("FHA loan", Financing.FHA),
    ("VA", Financing.VA),
    ("Nova Scotia Bank", Financing.CONVENTIONAL),
    ("", Financing.CONVENTIONAL),
])
def test_bucket_financing(text, expected):
    assert bucket_financing(text) == expected


@pytest.mark.unit
@pytest.mark.parametrize("text,expected", [
    ("Accepted", OfferStatus.OFFER_ACCEPTED),
    ("Rejected by seller", OfferStatus.OFFER_DECLINED),
    ("Counter offer", OfferStatus.IN_TALKS),
    ("Submitted", OfferStatus.OFFER_SENT),
    ("", OfferStatus.DRAFT),
])
def test_bucket_offer_status(text, expected):
    assert bucket_offer_status(text) == expected


@pytest.mark.unit
def test_parse_days():
    assert parse_days("10 days") == 10
    assert parse_days("none") == 0


@pytest.mark.unit
def test_iso_date():
    assert iso_date("Jan 5, 2025") == "2025-01-05"
    assert iso_date("2023-01-15") == "2023-01-15"
    assert iso_date("soon") == ""


@pytest.mark.unit
@pytest.mark.parametrize("text,expected", [
    ("Done", TaskStatus.DONE),
    ("Completed", TaskStatus.DONE),
    ("yes", TaskStatus.DONE),
    ("in progress", TaskStatus.PENDING),
    ("", TaskStatus.PENDING),
])
def test_bucket_task_status(text, expected):
    assert bucket_task_status(text) == expected


@pytest.mark.unit
@pytest.mark.parametrize("text,expected", [
    ("URGENT", TaskPriority.HIGH),
    ("low", TaskPriority.LOW),
    ("", TaskPriority.MEDIUM),
])
def test_bucket_task_priority(text, expected):
    assert bucket_task_priority(text) == expected


@pytest.mark.unit
def test_first_resolved_takes_first_non_none():
    view = make_view(["Address"], ["1 Rd"])
    calls = []

    def never(v):
        calls.append("never")
        return None

    def zero(v):
        calls.append("zero")
        return 0

    def late(v):
        calls.append("late")
        return 5

    assert first_resolved(view, [never, zero, late], default=99) == 0
    assert calls == ["never", "zero"]


@pytest.mark.unit
def test_row_view_metadata_is_original_row():
    view = make_view(["Address", "Custom Field"], ["1 Rd", "x"])

    assert view.metadata == {"address": "1 Rd", "custom field": "x"}
