"""CSV import tuning knobs with environment variable support."""

import os


class ImportConfig:
    """Centralized CSV import configuration."""

    # Full-row price scan ranges (used only when no price column is mapped)
    PRICE_SCAN_NARROW_MIN = float(os.environ.get("PRICE_SCAN_NARROW_MIN", "10000"))
    PRICE_SCAN_NARROW_MAX = float(os.environ.get("PRICE_SCAN_NARROW_MAX", "99999999"))
    PRICE_SCAN_WIDE_MIN = float(os.environ.get("PRICE_SCAN_WIDE_MIN", "500"))
    PRICE_SCAN_WIDE_MAX = float(os.environ.get("PRICE_SCAN_WIDE_MAX", "999999999"))

    # "" inside a quoted field is a literal quote (RFC 4180)
    CSV_RFC4180_QUOTES = os.environ.get("CSV_RFC4180_QUOTES", "true").lower() == "true"

    USE_AI_FIELD_MAPPING = os.environ.get("USE_AI_FIELD_MAPPING", "false").lower() == "true"
    AI_MAPPING_BATCH_SIZE = int(os.environ.get("AI_MAPPING_BATCH_SIZE", "20"))

    @classmethod
    def narrow_price_range(cls) -> tuple[float, float]:
        return cls.PRICE_SCAN_NARROW_MIN, cls.PRICE_SCAN_NARROW_MAX

    @classmethod
    def wide_price_range(cls) -> tuple[float, float]:
        return cls.PRICE_SCAN_WIDE_MIN, cls.PRICE_SCAN_WIDE_MAX
