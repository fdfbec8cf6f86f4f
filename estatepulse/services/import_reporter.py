"""Coverage report for an import batch: which expected fields were found."""

from typing import Optional

from estatepulse.models.csv_import import (
    FieldCoverage,
    FieldCoverageStatus,
    HeaderResolution,
    ParsedRow,
)


def project_rows(
    rows: list[ParsedRow],
    resolution: HeaderResolution,
    fallback: Optional[HeaderResolution] = None,
) -> list[ParsedRow]:
    """
    Re-key rows by canonical field name, keeping only resolved fields.

    With a fallback resolution, a field whose resolved key is absent from a
    row is read from the fallback column instead.
    """
    fields = list(resolution.resolved_fields)
    if fallback is not None:
        fields += [field for field in fallback.resolved_fields if field not in fields]

    projected = []
    for row in rows:
        entry = {}
        for field in fields:
            header = resolution.column_for(field)
            if fallback is not None and (header is None or header not in row):
                header = fallback.column_for(field) or header
            entry[field] = row.get(header, "")
        projected.append(entry)
    return projected


def build_coverage_report(projected_rows: list[ParsedRow], expected_headers: list[str]) -> list[FieldCoverage]:
    """
    Classify each expected header across the batch.

    FOUND: the key is present and at least one row has a value.
    EMPTY: the key is present but every value is blank.
    MISSING: no row carries the key.
    """
    report = []
    for label in expected_headers:
        key = label.strip().lower()
        present = False
        filled = 0
        for row in projected_rows:
            if key in row:
                present = True
                if (row[key] or "").strip():
                    filled += 1

        if not present:
            status = FieldCoverageStatus.MISSING
        elif filled:
            status = FieldCoverageStatus.FOUND
        else:
            status = FieldCoverageStatus.EMPTY
        report.append(FieldCoverage(field=label, status=status, filled_rows=filled))
    return report
