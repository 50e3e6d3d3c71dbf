"""Tests for the tip distribution calculator"""
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tip_reports.models import DistributionInputs, Report, ReportRow
from tip_reports.calculator import TipDistributionCalculator, calculate_distribution


def make_rows(*hours):
    return tuple(
        ReportRow(
            home_store="69600",
            partner_name=f"Partner {i}",
            partner_number=f"US{i:08d}",
            tippable_hours=h
        )
        for i, h in enumerate(hours, 1)
    )


class TestTipDistributionCalculator:
    """Test cases for TipDistributionCalculator"""

    def setup_method(self):
        self.calc = TipDistributionCalculator()

    def test_proportional_distribution(self):
        """
        Test: Three partners, $120 pool
        Hours: 10, 20, 30 (60 total)
        Expected:
        - Hourly rate: $2.00
        - Payouts: $20, $40, $60
        """
        result = self.calc.calculate(make_rows(10, 20, 30), total_tips=120)

        assert result.hourly_rate == 2.0
        assert [p.tip_amount for p in result.payouts] == [20.0, 40.0, 60.0]

    def test_adjustments_are_added_to_pool(self):
        """
        Test: $100 pool plus $20 cash tips
        Hours: 40 total
        Expected:
        - Hourly rate: $3.00
        """
        result = self.calc.calculate(make_rows(15, 25), total_tips=100, adjustments=20)

        assert result.hourly_rate == pytest.approx(3.0)
        assert result.payouts[0].tip_amount == pytest.approx(45.0)
        assert result.payouts[1].tip_amount == pytest.approx(75.0)

    def test_negative_adjustment_reduces_pool(self):
        result = self.calc.calculate(make_rows(10, 10), total_tips=100, adjustments=-20)

        assert result.hourly_rate == pytest.approx(4.0)
        assert result.total_paid == pytest.approx(80.0)

    def test_payouts_sum_to_effective_total(self):
        """
        Test: Real week of hours with a correction
        Expected:
        - Unrounded payouts add back up to tips + adjustments
        """
        rows = make_rows(18.48, 22.75, 15.25, 31.50, 19.00)
        result = self.calc.calculate(rows, total_tips=1234.56, adjustments=-10.0)

        assert result.total_paid == pytest.approx(1224.56, abs=1e-9)
        assert result.hourly_rate == pytest.approx(1224.56 / 106.98)

    def test_amounts_are_not_rounded(self):
        result = self.calc.calculate(make_rows(1, 2), total_tips=10)

        assert result.hourly_rate == pytest.approx(10 / 3)
        assert result.payouts[0].tip_amount != round(result.payouts[0].tip_amount, 2)

    def test_payouts_follow_row_order(self):
        rows = make_rows(5, 1, 3)
        result = self.calc.calculate(rows, total_tips=90)

        assert [p.partner_number for p in result.payouts] == [r.partner_number for r in rows]
        assert [p.tippable_hours for p in result.payouts] == [5, 1, 3]
        assert [p.partner_name for p in result.payouts] == ["Partner 1", "Partner 2", "Partner 3"]

    def test_zero_hours_row_gets_zero(self):
        result = self.calc.calculate(make_rows(0, 8), total_tips=40)

        assert result.payouts[0].tip_amount == 0
        assert result.payouts[1].tip_amount == 40

    def test_no_hours_gives_no_payouts(self):
        """
        Test: Rows present but every row at 0 hours
        Expected:
        - Hourly rate: 0 (no division by zero)
        - No payouts
        """
        result = self.calc.calculate(make_rows(0, 0), total_tips=500)

        assert result.hourly_rate == 0
        assert result.payouts == ()

    def test_no_rows_gives_no_payouts(self):
        result = self.calc.calculate((), total_tips=500, adjustments=25)

        assert result.hourly_rate == 0
        assert result.payouts == ()
        assert result.total_paid == 0

    def test_calculation_is_deterministic(self):
        rows = make_rows(18.48, 22.75, 15.25)

        first = self.calc.calculate(rows, total_tips=321.09, adjustments=4.5)
        second = self.calc.calculate(rows, total_tips=321.09, adjustments=4.5)

        assert first == second

    def test_calculate_for_report(self):
        report = Report(store_number="69600", rows=make_rows(10, 30))
        result = self.calc.calculate_for_report(report, DistributionInputs(total_tips=80, adjustments=0))

        assert result.hourly_rate == 2.0
        assert [p.tip_amount for p in result.payouts] == [20.0, 60.0]

    def test_build_calculation(self):
        report = Report(store_number="69600", rows=make_rows(10))
        inputs = DistributionInputs(total_tips=50)

        calculation = self.calc.build_calculation(report, inputs, report_id="abc")

        assert calculation.report_id == "abc"
        assert calculation.inputs == inputs
        assert calculation.result.hourly_rate == 5.0
        assert calculation.created_at is not None

    def test_build_calculation_without_report_id(self):
        calculation = self.calc.build_calculation(Report(), DistributionInputs(total_tips=50))

        assert calculation.report_id is None
        assert calculation.result.payouts == ()

    def test_calculate_summary(self):
        result = self.calc.calculate(make_rows(10, 20, 30), total_tips=120)

        summary = self.calc.calculate_summary(result)

        assert summary['partner_count'] == 3
        assert summary['total_hours'] == 60
        assert summary['total_paid'] == pytest.approx(120)
        assert summary['hourly_rate'] == 2.0


class TestDistributionInputs:
    """Test cases for the tip pool inputs"""

    def test_negative_tips_rejected(self):
        with pytest.raises(ValueError):
            DistributionInputs(total_tips=-1)

    def test_zero_tips_allowed(self):
        inputs = DistributionInputs(total_tips=0, adjustments=-5)

        assert inputs.effective_total == -5


class TestCalculateDistribution:
    """Test the convenience function"""

    def test_calculate_distribution(self):
        result = calculate_distribution(make_rows(4, 4), total_tips=16)

        assert result.hourly_rate == 2.0
        assert len(result.payouts) == 2
