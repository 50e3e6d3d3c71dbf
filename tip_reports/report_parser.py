"""Parser for extracting report data from Tip Distribution Report text"""
import logging
import re
from typing import List, Optional, Tuple

from .models import Report, ReportRow, TIPPABLE_HOURS
from config import (
    STORE_NUMBER_LABEL,
    TIME_PERIOD_LABEL,
    EXECUTED_BY_LABEL,
    EXECUTED_ON_LABEL,
    TOTAL_HOURS_LABEL,
    TABLE_HEADER_MARKERS,
)

logger = logging.getLogger(__name__)


class ReportParser:
    """
    Parses the text extracted from a Tip Distribution Report image.

    Text format example:

    Store Number: 69600
    Time Period: 2025-01-13 - 2025-01-19
    Executed By: SM12345
    Executed On: 2025-01-20 08:15:23

    Home Store    Partner Name              Partner Number    Total Tippable Hours
    69600         Ailuogwemhe, Jodie O      US37008498       18.48
    69600         Anderson, Sarah M         US36955947       22.75

    Total Tippable Hours: 107.98

    Parsing never fails. Anything that cannot be located is left empty (or
    zero) so the report can be corrected by hand before calculating tips.
    """

    HEADER_LABELS = {
        STORE_NUMBER_LABEL: 'store_number',
        EXECUTED_BY_LABEL: 'executed_by',
        EXECUTED_ON_LABEL: 'executed_on',
    }

    # Columns are separated by two or more whitespace characters
    COLUMN_SEPARATOR = re.compile(r'\s{2,}')

    # "2025-01-13 - 2025-01-19" style separator, dates may contain hyphens themselves
    SPACED_HYPHEN = re.compile(r'\s+-\s+')

    HOURS_PATTERN = re.compile(r'^(?:\d+(?:\.\d*)?|\.\d+)$')
    LEADING_NUMBER_PATTERN = re.compile(r'^[+-]?(?:\d+(?:\.\d*)?|\.\d+)')

    # Two-decimal hours ending in one of these digits are flagged for review
    UNCERTAIN_LAST_DIGITS = ('3', '8')

    def parse(self, text: str) -> Report:
        """
        Parse report text into a Report.

        Args:
            text: Raw text produced by the extraction service

        Returns:
            Report with every field that could be located
        """
        lines = [line.strip() for line in (text or '').split('\n')]
        lines = [line for line in lines if line]

        header = self._extract_header(lines)
        period_start, period_end = self._extract_period(lines)
        table_start, table_end, total_reported = self._locate_table(lines)

        rows = []
        if table_start is not None and table_end is not None:
            for line in lines[table_start:table_end]:
                row = self.parse_row(line)
                if row is not None:
                    rows.append(row)

        report = Report(
            store_number=header['store_number'],
            period_start=period_start,
            period_end=period_end,
            executed_by=header['executed_by'],
            executed_on=header['executed_on'],
            rows=tuple(rows),
            total_tippable_hours_reported=total_reported,
        )

        logger.info(
            "Parsed report for store %r: %d rows, %.2f hours reported",
            report.store_number, len(report.rows), report.total_tippable_hours_reported
        )
        if report.rows and report.has_hours_mismatch:
            logger.warning(
                "Row hours (%.2f) do not match reported total (%.2f)",
                report.sum_of_row_hours, report.total_tippable_hours_reported
            )
        return report

    def parse_row(self, line: str) -> Optional[ReportRow]:
        """
        Parse a single table line.

        Args:
            line: One line from the table region

        Returns:
            ReportRow, or None when the line does not hold four columns
            or its hours value is not a number
        """
        parts = [p.strip() for p in self.COLUMN_SEPARATOR.split(line.strip())]
        parts = [p for p in parts if p]

        if len(parts) < 4:
            logger.debug("Skipping table line with %d columns: %r", len(parts), line)
            return None

        home_store, partner_name, partner_number, hours_text = parts[:4]

        hours = self._parse_number(hours_text)
        if hours is None:
            logger.debug("Skipping table line with non-numeric hours: %r", line)
            return None

        uncertain = frozenset()
        if self._is_uncertain_hours(hours_text):
            uncertain = frozenset({TIPPABLE_HOURS})

        return ReportRow(
            home_store=home_store,
            partner_name=partner_name,
            partner_number=partner_number,
            tippable_hours=hours,
            uncertain_fields=uncertain,
        )

    def _extract_header(self, lines: List[str]) -> dict:
        """Extract labeled header fields. The first occurrence of a label wins."""
        header = {name: '' for name in self.HEADER_LABELS.values()}
        seen = set()

        for line in lines:
            for label, name in self.HEADER_LABELS.items():
                if line.startswith(label) and name not in seen:
                    header[name] = line[len(label):].strip()
                    seen.add(name)
                    break

        return header

    def _extract_period(self, lines: List[str]) -> Tuple[str, str]:
        """Extract the start and end of the time period."""
        for line in lines:
            if line.startswith(TIME_PERIOD_LABEL):
                return self.split_period(line[len(TIME_PERIOD_LABEL):].strip())
        return '', ''

    def split_period(self, period_text: str) -> Tuple[str, str]:
        """
        Split "start - end" into its two tokens.

        A hyphen with whitespace around it is the separator. When there is
        none, a bare hyphen is tried. Anything other than exactly two
        non-empty tokens leaves both sides empty.
        """
        parts = self.SPACED_HYPHEN.split(period_text)
        if len(parts) == 1:
            parts = period_text.split('-')

        parts = [p.strip() for p in parts]
        if len(parts) == 2 and all(parts):
            return parts[0], parts[1]
        return '', ''

    def _locate_table(self, lines: List[str]) -> Tuple[Optional[int], Optional[int], float]:
        """
        Find the data region of the table and the reported hour total.

        Returns:
            (start index, end index, reported total). Start/end are None
            when the table header or its terminator is missing.
        """
        header_index = None
        for i, line in enumerate(lines):
            if all(marker in line for marker in TABLE_HEADER_MARKERS):
                header_index = i
                break

        search_from = header_index if header_index is not None else 0
        for i in range(search_from, len(lines)):
            line = lines[i]
            if line.startswith(TOTAL_HOURS_LABEL):
                total = self._parse_total(line[len(TOTAL_HOURS_LABEL):])
                if header_index is None:
                    return None, None, total
                return header_index + 1, i, total

        return None, None, 0.0

    def _parse_total(self, text: str) -> float:
        """Parse the leading number of the footer total, 0.0 if there is none."""
        match = self.LEADING_NUMBER_PATTERN.match(text.strip().replace(',', ''))
        if not match:
            return 0.0
        return float(match.group(0))

    def _parse_number(self, text: str) -> Optional[float]:
        if not self.HOURS_PATTERN.match(text):
            return None
        return float(text)

    def _is_uncertain_hours(self, hours_text: str) -> bool:
        if '.' not in hours_text:
            return False
        decimals = hours_text.split('.')[1]
        return len(decimals) == 2 and hours_text[-1] in self.UNCERTAIN_LAST_DIGITS


def parse_report(text: str) -> Report:
    """
    Convenience function to parse report text.

    Args:
        text: Raw text of a Tip Distribution Report

    Returns:
        Parsed Report
    """
    parser = ReportParser()
    return parser.parse(text)
