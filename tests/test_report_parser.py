"""Regression tests for report text parsing behavior."""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tip_reports.models import TIPPABLE_HOURS
from tip_reports.report_parser import ReportParser, parse_report
from tip_reports.vision_client import SAMPLE_REPORT_TEXT

TABLE_HEADER = "Home Store    Partner Name              Partner Number    Total Tippable Hours"


def table(*lines, footer="Total Tippable Hours: 107.98"):
    return "\n".join([TABLE_HEADER, *lines, footer])


class TestHeaderFields:
    """Labeled fields above the table."""

    def setup_method(self):
        self.parser = ReportParser()

    def test_parse_header_fields(self):
        text = """
Store Number: 69600
Time Period: 2025-01-13 - 2025-01-19
Executed By: SM12345
Executed On: 2025-01-20 08:15:23
"""
        report = self.parser.parse(text)

        assert report.store_number == "69600"
        assert report.period_start == "2025-01-13"
        assert report.period_end == "2025-01-19"
        assert report.executed_by == "SM12345"
        assert report.executed_on == "2025-01-20 08:15:23"

    def test_values_are_trimmed(self):
        report = self.parser.parse("   Store Number:    69600   \nExecuted By:\tSM1  ")

        assert report.store_number == "69600"
        assert report.executed_by == "SM1"

    def test_labels_are_case_sensitive(self):
        report = self.parser.parse("store number: 69600")

        assert report.store_number == ""

    def test_first_occurrence_of_label_wins(self):
        text = "Store Number: 69600\nStore Number: 12345\nTime Period: 01/01 - 01/07\nTime Period: 02/01 - 02/07"
        report = self.parser.parse(text)

        assert report.store_number == "69600"
        assert report.period_start == "01/01"
        assert report.period_end == "01/07"

    def test_period_with_bare_hyphen(self):
        report = self.parser.parse("Time Period: 01/13/2025-01/19/2025")

        assert report.period_start == "01/13/2025"
        assert report.period_end == "01/19/2025"

    def test_period_without_two_parts_is_left_empty(self):
        for period in ("Week 3", "2025-01-13", "2025-01-13 - 2025-01-19 - 2025-01-26", "2025-01-13 - "):
            report = self.parser.parse(f"Time Period: {period}")
            assert report.period_start == "", period
            assert report.period_end == "", period

    def test_empty_text_gives_empty_report(self):
        for text in ("", "   \n\n  ", None):
            report = self.parser.parse(text)
            assert report.store_number == ""
            assert report.rows == ()
            assert report.total_tippable_hours_reported == 0.0


class TestTableRows:
    """Row extraction between the table header and the footer."""

    def setup_method(self):
        self.parser = ReportParser()

    def test_parse_single_row(self):
        text = table("69600         Ailuogwemhe, Jodie O      US37008498       18.48")
        report = self.parser.parse(text)

        assert len(report.rows) == 1
        row = report.rows[0]
        assert row.home_store == "69600"
        assert row.partner_name == "Ailuogwemhe, Jodie O"
        assert row.partner_number == "US37008498"
        assert row.tippable_hours == 18.48
        assert report.total_tippable_hours_reported == 107.98

    def test_parse_sample_report(self):
        report = parse_report(SAMPLE_REPORT_TEXT)

        assert report.store_number == "69600"
        assert [r.partner_name for r in report.rows] == [
            "Ailuogwemhe, Jodie O",
            "Anderson, Sarah M",
            "Chen, Michael K",
            "Davis, Jennifer L",
            "Martinez, Carlos R",
        ]
        assert [r.tippable_hours for r in report.rows] == [18.48, 22.75, 15.25, 31.50, 19.00]
        assert report.total_tippable_hours_reported == 107.98

    def test_line_with_too_few_columns_is_dropped(self):
        text = table(
            "69600         Anderson, Sarah M         US36955947       22.75",
            "69600 Chen, Michael K US37012334 15.25",
            "continued from previous page",
        )
        report = self.parser.parse(text)

        assert len(report.rows) == 1
        assert report.rows[0].partner_name == "Anderson, Sarah M"

    def test_non_numeric_hours_drops_row(self):
        text = table(
            "69600         Anderson, Sarah M         US36955947       22.7S",
            "69600         Chen, Michael K           US37012334       15.25",
        )
        report = self.parser.parse(text)

        assert [r.partner_name for r in report.rows] == ["Chen, Michael K"]

    def test_extra_columns_are_ignored(self):
        text = table("69600    Chen, Michael K    US37012334    15.25    extra")
        report = self.parser.parse(text)

        assert len(report.rows) == 1
        assert report.rows[0].tippable_hours == 15.25

    def test_tabs_separate_columns(self):
        text = table("69600\t\tDavis, Jennifer L\t\tUS36998765 \t31.50")
        report = self.parser.parse(text)

        assert len(report.rows) == 1
        assert report.rows[0].partner_name == "Davis, Jennifer L"

    def test_missing_footer_gives_no_rows(self):
        text = "\n".join([TABLE_HEADER, "69600         Chen, Michael K           US37012334       15.25"])
        report = self.parser.parse(text)

        assert report.rows == ()
        assert report.total_tippable_hours_reported == 0.0

    def test_missing_table_header_gives_no_rows(self):
        text = "69600         Chen, Michael K           US37012334       15.25\nTotal Tippable Hours: 15.25"
        report = self.parser.parse(text)

        assert report.rows == ()
        assert report.total_tippable_hours_reported == 15.25

    def test_lines_after_footer_are_not_rows(self):
        text = table(
            "69600         Chen, Michael K           US37012334       15.25",
        ) + "\n69600         Davis, Jennifer L         US36998765       31.50"
        report = self.parser.parse(text)

        assert [r.partner_name for r in report.rows] == ["Chen, Michael K"]

    def test_unreadable_footer_total_is_zero(self):
        report = self.parser.parse(table("69600    Chen, Michael K    US37012334    15.25",
                                         footer="Total Tippable Hours: n/a"))

        assert len(report.rows) == 1
        assert report.total_tippable_hours_reported == 0.0

    def test_footer_total_with_thousands_separator(self):
        report = self.parser.parse(table(footer="Total Tippable Hours: 1,207.50"))

        assert report.total_tippable_hours_reported == 1207.50

    def test_row_order_is_preserved(self):
        text = table(
            "69600    Zed, Z    US3    1.00",
            "69600    Amy, A    US1    2.00",
            "69600    Mid, M    US2    3.00",
        )
        report = self.parser.parse(text)

        assert [r.partner_number for r in report.rows] == ["US3", "US1", "US2"]


class TestUncertaintyFlag:
    """Two-decimal hours ending in 3 or 8 are flagged for review."""

    def setup_method(self):
        self.parser = ReportParser()

    def _row(self, hours_text):
        return self.parser.parse_row(f"69600    Chen, Michael K    US37012334    {hours_text}")

    def test_hours_ending_in_3_or_8_are_uncertain(self):
        for hours_text in ("18.48", "7.13", "10.03", "0.98"):
            row = self._row(hours_text)
            assert row.is_uncertain(TIPPABLE_HOURS), hours_text
            assert row.uncertain_fields == frozenset({TIPPABLE_HOURS})

    def test_other_hours_are_certain(self):
        for hours_text in ("22.75", "15.25", "19.00", "18.4", "18.3", "18", "13", "18.483"):
            row = self._row(hours_text)
            assert row is not None, hours_text
            assert row.uncertain_fields == frozenset(), hours_text

    def test_uncertainty_is_an_empty_set_by_default(self):
        row = self._row("22.75")

        assert not row.is_uncertain(TIPPABLE_HOURS)
        assert len(row.uncertain_fields) == 0
