"""Error handling utilities."""


class EstatePulseError(Exception):
    """Base exception for EstatePulse backend."""
    pass


class ImportStructureError(EstatePulseError):
    """CSV file cannot be imported at all (blocks the preview)."""
    pass


class NoDataError(ImportStructureError):
    """File is empty or has no data rows."""
    pass


class MissingColumnsError(ImportStructureError):
    """None of the expected columns could be found."""

    def __init__(self, expected: list[str], headers: list[str]):
        self.expected = expected
        self.headers = headers
        super().__init__(
            f"Could not find required columns: {', '.join(expected)}"
        )


class UnknownEntityTypeError(ImportStructureError):
    """Entity type has no import configuration."""
    pass


class AIServiceError(EstatePulseError):
    """LLM call or response parsing error."""
    pass


class SupabaseError(EstatePulseError):
    """Supabase operation error."""
    pass
