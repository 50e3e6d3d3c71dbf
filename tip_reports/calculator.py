"""Tip distribution logic for Tip Distribution Reports"""
from datetime import datetime
from typing import Optional, Sequence

from .models import (
    Calculation,
    DistributionInputs,
    DistributionResult,
    Payout,
    Report,
    ReportRow,
)


class TipDistributionCalculator:
    """
    Distributes a weekly tip pool across partners by tippable hours.

    Business Logic:
    ===============

    Effective total = reported tips + adjustments (cash tips, corrections).
    Hourly rate     = effective total / sum of all tippable hours.
    Each partner    = their tippable hours * hourly rate.

    Amounts are not rounded here. Rounding to cents happens only when
    payouts are displayed or exported, so the payouts add back up to the
    effective total.

    A report with no hours (no rows, or every row at zero) has nothing to
    distribute: the hourly rate is 0 and there are no payouts.
    """

    def calculate(self, rows: Sequence[ReportRow], total_tips: float,
                  adjustments: float = 0.0) -> DistributionResult:
        """
        Calculate the hourly rate and one payout per row.

        Args:
            rows: Report rows, in display order
            total_tips: Reported tip pool
            adjustments: Signed correction added to the pool

        Returns:
            DistributionResult with payouts in the same order as rows
        """
        total_hours = sum(row.tippable_hours for row in rows)

        if total_hours == 0:
            return DistributionResult(hourly_rate=0.0, payouts=())

        effective_total = total_tips + adjustments
        hourly_rate = effective_total / total_hours

        payouts = tuple(
            Payout(
                partner_name=row.partner_name,
                partner_number=row.partner_number,
                tippable_hours=row.tippable_hours,
                tip_amount=row.tippable_hours * hourly_rate
            )
            for row in rows
        )

        return DistributionResult(hourly_rate=hourly_rate, payouts=payouts)

    def calculate_for_report(self, report: Report, inputs: DistributionInputs) -> DistributionResult:
        """Calculate the distribution for every row of a (reviewed) report."""
        return self.calculate(report.rows, inputs.total_tips, inputs.adjustments)

    def build_calculation(self, report: Report, inputs: DistributionInputs,
                          report_id: Optional[str] = None) -> Calculation:
        """
        Calculate and wrap the result as a Calculation ready for storage.

        Args:
            report: The reviewed report
            inputs: Tip pool and adjustments
            report_id: Identifier of the stored report, if it was saved

        Returns:
            Calculation stamped with the current time
        """
        return Calculation(
            report_id=report_id,
            inputs=inputs,
            result=self.calculate_for_report(report, inputs),
            created_at=datetime.now()
        )

    def calculate_summary(self, result: DistributionResult) -> dict:
        """
        Calculate summary totals for a distribution.

        Args:
            result: DistributionResult to summarize

        Returns:
            Dictionary with summary totals
        """
        return {
            'partner_count': len(result.payouts),
            'total_hours': result.total_hours,
            'total_paid': result.total_paid,
            'hourly_rate': result.hourly_rate
        }


def calculate_distribution(rows: Sequence[ReportRow], total_tips: float,
                           adjustments: float = 0.0) -> DistributionResult:
    """Convenience function to distribute tips across rows."""
    return TipDistributionCalculator().calculate(rows, total_tips, adjustments)
