"""
Field normalizer - typed values from loosely labelled CSV rows.

Each field is produced by an ordered list of resolver strategies. A strategy
takes a RowView and returns a value or None; first_resolved() runs them in
priority order and takes the first non-None result. Strategies that read a
cell to decide something (status, settlement date) mark its column consumed
so later full-row scans (price) skip it.
"""

import math
import re
from datetime import date, datetime
from functools import partial
from typing import Callable, Iterable, Optional, TypeVar

from dateutil import parser as date_parser

from estatepulse.models.csv_import import HeaderResolution, ParsedRow
from estatepulse.models.listing import ListingStatus
from estatepulse.models.offer import Financing, OfferStatus
from estatepulse.models.task import TaskPriority, TaskStatus
from estatepulse.utils.import_config import ImportConfig

T = TypeVar("T")

PRICE_FIELD = "price"
STATUS_FIELD = "status"
SETTLEMENT_FIELD = "settlement date"
PHONE_FIELD = "phone"
EMAIL_FIELD = "email"

_CURRENCY_NOISE = re.compile(r"[\s,$€£¥]")
_NUMERIC_CELL = re.compile(r"^\d+(\.\d+)?$")
_STATUS_SCAN = re.compile(
    r"\b(sold|closed|settled|contract|pending|escrow|active|market|listed|new|draft)\b"
)
_PHONE_PATTERN = re.compile(r"^(\+?[\d\s-]{7,})$")
_PHONE_LABEL_WORDS = {
    "mobile", "mob", "cell", "phone", "tel", "telephone", "home", "work",
    "office", "main", "ext", "x", "m", "c", "h", "w", "o",
}
_PHONE_HEADER_TERMS = ("phone", "mobile", "cell")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_LISTING_STATUS_BUCKETS = [
    (ListingStatus.SOLD, ("sold", "closed", "settled", "archived", "done", "complete")),
    (ListingStatus.UNDER_CONTRACT, ("contract", "pending", "option", "escrow", "offer", "accepted")),
    (ListingStatus.ACTIVE, ("active", "sale", "available", "market", "listed", "open")),
    (ListingStatus.NEW, ("new", "draft", "incoming", "fresh")),
]

_OFFER_STATUS_BUCKETS = [
    (OfferStatus.OFFER_DECLINED, ("declin", "reject", "dead", "lost", "withdrawn", "expired")),
    (OfferStatus.OFFER_ACCEPTED, ("accept", "approved", "ratified", "won")),
    (OfferStatus.IN_TALKS, ("talk", "negotiat", "counter")),
    (OfferStatus.OFFER_SENT, ("sent", "submit", "pending", "presented")),
]


class RowView:
    """
    One row as seen by the resolvers.

    After an AI pre-pass, `resolution` points at the mapped keys and
    `fallback` at the raw columns; a field the mapper left out of this row is
    read from its raw column instead.
    """

    def __init__(
        self,
        row: ParsedRow,
        resolution: HeaderResolution,
        original: Optional[ParsedRow] = None,
        fallback: Optional[HeaderResolution] = None,
    ):
        self.row = row
        self.resolution = resolution
        self.original = original if original is not None else row
        self.fallback = fallback
        self.consumed: set[str] = set()

    def header_for(self, field: str) -> Optional[str]:
        header = self.resolution.column_for(field)
        if self.fallback is not None and (header is None or header not in self.row):
            return self.fallback.column_for(field) or header
        return header

    def has_column(self, field: str) -> bool:
        return self.header_for(field) is not None

    def value(self, field: str) -> str:
        header = self.header_for(field)
        if header is None:
            return ""
        return (self.row.get(header) or "").strip()

    def consume(self, field: str) -> None:
        header = self.header_for(field)
        if header is not None:
            self.consumed.add(header)

    def lookup(self, keys: Iterable[str]) -> str:
        """First non-empty value among exact row keys."""
        for key in keys:
            value = (self.row.get(key) or "").strip()
            if value:
                return value
        return ""

    def cells(self) -> list[tuple[str, str]]:
        return [(header, (self.row.get(header) or "").strip()) for header in self.resolution.headers]

    def free_cells(self, field: Optional[str] = None) -> list[tuple[str, str]]:
        """Cells not consumed and not mapped to a canonical field other than `field`."""
        mapped = set()
        for resolution in (self.resolution, self.fallback):
            if resolution is None:
                continue
            mapped.update(
                resolution.headers[index]
                for name, index in resolution.field_columns.items()
                if index is not None and name != field
            )
        return [
            (header, value) for header, value in self.cells()
            if header not in self.consumed and header not in mapped
        ]

    @property
    def metadata(self) -> dict[str, str]:
        return {str(key): str(value) for key, value in self.original.items()}


def first_resolved(view: RowView, strategies: list[Callable[[RowView], Optional[T]]], default: T) -> T:
    for strategy in strategies:
        value = strategy(view)
        if value is not None:
            return value
    return default


# Numbers

def parse_amount(raw: Optional[str]) -> Optional[float]:
    """'$450,000' -> 450000.0; None when nothing numeric is left. Negatives clamp to 0."""
    cleaned = _CURRENCY_NOISE.sub("", raw or "")
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return max(value, 0.0)


def coerce_amount(raw: Optional[str]) -> float:
    value = parse_amount(raw)
    return value if value is not None else 0.0


def amount_from_column(view: RowView, field: str = PRICE_FIELD) -> Optional[float]:
    """A mapped column is authoritative: unparseable means 0, not a fallback."""
    if not view.has_column(field):
        return None
    return coerce_amount(view.value(field))


def amount_from_row_scan(view: RowView, bounds: tuple[float, float], field: str = PRICE_FIELD) -> Optional[float]:
    low, high = bounds
    for header, cell in view.free_cells(field):
        if "zip" in header:
            continue
        cleaned = _CURRENCY_NOISE.sub("", cell)
        if not _NUMERIC_CELL.match(cleaned):
            continue
        value = float(cleaned)
        if low <= value <= high:
            return value
    return None


def price_from_narrow_scan(view: RowView) -> Optional[float]:
    return amount_from_row_scan(view, ImportConfig.narrow_price_range())


def price_from_wide_scan(view: RowView) -> Optional[float]:
    return amount_from_row_scan(view, ImportConfig.wide_price_range())


PRICE_RESOLVERS = [amount_from_column, price_from_narrow_scan, price_from_wide_scan]


def resolve_price(view: RowView) -> float:
    return first_resolved(view, PRICE_RESOLVERS, 0.0)


# Dates

def parse_date(raw: Optional[str]) -> Optional[date]:
    raw = (raw or "").strip()
    if not raw or not re.search(r"\d", raw):
        return None
    try:
        return date_parser.parse(raw, default=datetime(2000, 1, 1)).date()
    except (ValueError, OverflowError):
        return None


def iso_date(raw: Optional[str]) -> str:
    parsed = parse_date(raw)
    return parsed.isoformat() if parsed else ""


# Listing status

def bucket_listing_status(text: str) -> ListingStatus:
    lowered = text.lower()
    for status, keywords in _LISTING_STATUS_BUCKETS:
        if any(keyword in lowered for keyword in keywords):
            return status
    return ListingStatus.NEW


def status_from_settlement_date(view: RowView) -> Optional[ListingStatus]:
    """A recorded settlement date means the sale closed, whatever the status column says."""
    if parse_date(view.value(SETTLEMENT_FIELD)) is None:
        return None
    view.consume(SETTLEMENT_FIELD)
    return ListingStatus.SOLD


def status_from_status_column(view: RowView) -> Optional[ListingStatus]:
    value = view.value(STATUS_FIELD)
    if not value:
        return None
    view.consume(STATUS_FIELD)
    return bucket_listing_status(value)


def status_from_keyword_scan(view: RowView) -> Optional[ListingStatus]:
    for header, cell in view.free_cells(STATUS_FIELD):
        if _STATUS_SCAN.search(cell.lower()):
            view.consumed.add(header)
            return bucket_listing_status(cell)
    return None


LISTING_STATUS_RESOLVERS = [
    status_from_settlement_date,
    status_from_status_column,
    status_from_keyword_scan,
]


def resolve_listing_status(view: RowView) -> ListingStatus:
    return first_resolved(view, LISTING_STATUS_RESOLVERS, ListingStatus.NEW)


# Free text

def text_from_column(view: RowView, field: str) -> Optional[str]:
    return view.value(field) or None


def text_from_keys(view: RowView, keys: Iterable[str]) -> Optional[str]:
    return view.lookup(keys) or None


def resolve_text(view: RowView, field: str, synonyms: Iterable[str], placeholder: str) -> str:
    return first_resolved(
        view,
        [partial(text_from_column, field=field), partial(text_from_keys, keys=tuple(synonyms))],
        placeholder,
    )


# Contact details

def extract_phone(cell: str) -> Optional[str]:
    """'555-0199 mobile' -> '555-0199'. Letters other than phone labels disqualify the cell."""
    if not cell or _ISO_DATE.match(cell):
        return None
    words = re.findall(r"[A-Za-z]+", cell)
    if any(word.lower() not in _PHONE_LABEL_WORDS for word in words):
        return None
    remainder = re.sub(r"[A-Za-z]+\.?|[():]", " ", cell)
    remainder = " ".join(remainder.split())
    if not _PHONE_PATTERN.match(remainder):
        return None
    if sum(ch.isdigit() for ch in remainder) < 5:
        return None
    return remainder


def phone_from_column(view: RowView) -> Optional[str]:
    return view.value(PHONE_FIELD) or None


def phone_from_header_scan(view: RowView) -> Optional[str]:
    for header, cell in view.cells():
        if cell and any(term in header for term in _PHONE_HEADER_TERMS):
            return cell
    return None


def phone_from_row_scan(view: RowView) -> Optional[str]:
    for _, cell in view.free_cells(PHONE_FIELD):
        phone = extract_phone(cell)
        if phone:
            return phone
    return None


PHONE_RESOLVERS = [phone_from_column, phone_from_header_scan, phone_from_row_scan]


def resolve_phone(view: RowView) -> str:
    return first_resolved(view, PHONE_RESOLVERS, "")


def email_from_column(view: RowView) -> Optional[str]:
    return view.value(EMAIL_FIELD) or None


def email_from_row_scan(view: RowView) -> Optional[str]:
    for _, cell in view.free_cells(EMAIL_FIELD):
        if _EMAIL.match(cell):
            return cell
    return None


def resolve_email(view: RowView) -> str:
    return first_resolved(view, [email_from_column, email_from_row_scan], "")


# Lists and small enums

def split_list(raw: Optional[str]) -> list[str]:
    """'vip, buyer;vip' -> ['vip', 'buyer'] (order kept, duplicates dropped)."""
    items: list[str] = []
    for part in re.split(r"[,;]", raw or ""):
        part = part.strip()
        if part and part not in items:
            items.append(part)
    return items


def bucket_financing(text: str) -> Financing:
    lowered = text.lower()
    if "cash" in lowered:
        return Financing.CASH
    if "fha" in lowered:
        return Financing.FHA
    if re.search(r"\bva\b", lowered):
        return Financing.VA
    return Financing.CONVENTIONAL


def bucket_offer_status(text: str) -> OfferStatus:
    lowered = text.lower()
    for status, keywords in _OFFER_STATUS_BUCKETS:
        if any(keyword in lowered for keyword in keywords):
            return status
    return OfferStatus.DRAFT


def parse_days(raw: Optional[str]) -> int:
    match = re.search(r"\d+", raw or "")
    return int(match.group()) if match else 0


def bucket_task_status(text: str) -> TaskStatus:
    lowered = text.strip().lower()
    if lowered in {"yes", "y", "true", "1", "x", "closed"}:
        return TaskStatus.DONE
    if any(keyword in lowered for keyword in ("done", "complete", "finished")):
        return TaskStatus.DONE
    return TaskStatus.PENDING


def bucket_task_priority(text: str) -> TaskPriority:
    lowered = text.lower()
    if any(keyword in lowered for keyword in ("high", "urgent", "critical", "asap")):
        return TaskPriority.HIGH
    if any(keyword in lowered for keyword in ("low", "minor")):
        return TaskPriority.LOW
    return TaskPriority.MEDIUM
