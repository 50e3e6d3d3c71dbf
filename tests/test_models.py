"""Tests for report totals and the hours mismatch check"""
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tip_reports.models import DistributionResult, Payout, Report, ReportRow, TIPPABLE_HOURS


def report_with_hours(hours, reported):
    rows = tuple(
        ReportRow(home_store="69600", partner_name=f"P{i}", partner_number=f"US{i}", tippable_hours=h)
        for i, h in enumerate(hours)
    )
    return Report(store_number="69600", rows=rows, total_tippable_hours_reported=reported)


class TestHoursMismatch:

    def test_mismatch_beyond_tolerance_is_flagged(self):
        report = report_with_hours([50.0, 57.9], reported=107.98)

        assert report.sum_of_row_hours == pytest.approx(107.90)
        assert report.hours_difference == pytest.approx(-0.08)
        assert report.has_hours_mismatch is True

    def test_small_difference_is_not_flagged(self):
        report = report_with_hours([50.0, 57.95], reported=107.98)

        assert report.hours_difference == pytest.approx(-0.03)
        assert report.has_hours_mismatch is False

    def test_exact_match(self):
        report = report_with_hours([10.25, 20.5], reported=30.75)

        assert report.has_hours_mismatch is False

    def test_rows_above_reported_total(self):
        report = report_with_hours([60.0, 50.0], reported=100.0)

        assert report.hours_difference == pytest.approx(10.0)
        assert report.has_hours_mismatch is True

    def test_empty_report_has_no_mismatch(self):
        report = Report()

        assert report.sum_of_row_hours == 0
        assert report.has_hours_mismatch is False


class TestUncertainRows:

    def test_uncertain_row_indices(self):
        rows = (
            ReportRow("69600", "A", "US1", 18.48, frozenset({TIPPABLE_HOURS})),
            ReportRow("69600", "B", "US2", 22.75),
            ReportRow("69600", "C", "US3", 7.13, frozenset({TIPPABLE_HOURS})),
        )

        assert Report(rows=rows).uncertain_row_indices == [0, 2]


class TestDistributionResult:

    def test_totals(self):
        result = DistributionResult(
            hourly_rate=2.0,
            payouts=(
                Payout("A", "US1", 10.0, 20.0),
                Payout("B", "US2", 5.5, 11.0),
            )
        )

        assert result.total_hours == 15.5
        assert result.total_paid == 31.0
