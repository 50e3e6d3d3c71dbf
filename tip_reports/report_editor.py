"""Review step: edits applied to a parsed report before calculating tips.

Every function takes a Report and returns a new one. The parsed report is
never modified in place.
"""
import math
from dataclasses import replace
from typing import Any, Iterable, Tuple

from .models import HEADER_FIELDS, ROW_FIELDS, Report, ReportRow, TIPPABLE_HOURS


def coerce_hours(value: Any) -> float:
    """Read an hours value typed by a person, 0.0 unless it is a finite non-negative number."""
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(hours) or hours < 0:
        return 0.0
    return hours


def update_header(report: Report, field_name: str, value: str) -> Report:
    """Set one header field (store number, period, executed by/on)."""
    if field_name not in HEADER_FIELDS:
        raise ValueError(f"Unknown header field: {field_name}")
    return replace(report, **{field_name: value})


def update_total_reported(report: Report, value: Any) -> Report:
    return replace(report, total_tippable_hours_reported=coerce_hours(value))


def update_row(report: Report, index: int, field_name: str, value: Any) -> Report:
    """
    Set one field of one row.

    Hours are coerced to float (unreadable input becomes 0.0). The edited
    field is no longer flagged as uncertain.
    """
    if field_name not in ROW_FIELDS:
        raise ValueError(f"Unknown row field: {field_name}")
    if not 0 <= index < len(report.rows):
        raise IndexError(f"Row {index} out of range")

    if field_name == TIPPABLE_HOURS:
        value = coerce_hours(value)

    row = report.rows[index]
    edited = replace(
        row,
        uncertain_fields=row.uncertain_fields - {field_name},
        **{field_name: value}
    )
    rows = report.rows[:index] + (edited,) + report.rows[index + 1:]
    return replace(report, rows=rows)


def add_row(report: Report) -> Report:
    """Append a blank row assigned to the report's store."""
    blank = ReportRow(
        home_store=report.store_number,
        partner_name='',
        partner_number='',
        tippable_hours=0.0
    )
    return replace(report, rows=report.rows + (blank,))


def delete_row(report: Report, index: int) -> Report:
    if not 0 <= index < len(report.rows):
        raise IndexError(f"Row {index} out of range")
    return replace(report, rows=report.rows[:index] + report.rows[index + 1:])


def replace_rows(report: Report, rows: Iterable[ReportRow]) -> Report:
    return replace(report, rows=tuple(rows))


def carry_review_flags(original: Report, rows: Iterable[ReportRow]) -> Tuple[ReportRow, ...]:
    """
    Re-attach uncertainty flags to rows rebuilt from an edited table.

    Rows are matched to the original by partner number, so deleting or
    reordering rows does not move a flag to another partner. A row keeps
    its flags only while its hours are unchanged.
    """
    before = {}
    for row in original.rows:
        if row.partner_number:
            before.setdefault(row.partner_number, row)

    carried = []
    for row in rows:
        match = before.get(row.partner_number) if row.partner_number else None
        flags = frozenset()
        if match is not None and match.tippable_hours == row.tippable_hours:
            flags = match.uncertain_fields
        carried.append(replace(row, uncertain_fields=flags))
    return tuple(carried)
