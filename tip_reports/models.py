"""Data models for Tip Distribution Reports"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Optional, Tuple

from config import HOURS_MISMATCH_TOLERANCE

TIPPABLE_HOURS = 'tippable_hours'

HEADER_FIELDS = ('store_number', 'period_start', 'period_end', 'executed_by', 'executed_on')
ROW_FIELDS = ('home_store', 'partner_name', 'partner_number', 'tippable_hours')


@dataclass(frozen=True)
class ReportRow:
    """One partner's entry in the source report"""
    home_store: str
    partner_name: str
    partner_number: str
    tippable_hours: float
    uncertain_fields: FrozenSet[str] = field(default_factory=frozenset)

    def is_uncertain(self, field_name: str) -> bool:
        return field_name in self.uncertain_fields


@dataclass(frozen=True)
class Report:
    """A parsed weekly Tip Distribution Report"""
    store_number: str = ""
    period_start: str = ""
    period_end: str = ""
    executed_by: str = ""
    executed_on: str = ""
    rows: Tuple[ReportRow, ...] = ()
    total_tippable_hours_reported: float = 0.0

    @property
    def sum_of_row_hours(self) -> float:
        return sum(row.tippable_hours for row in self.rows)

    @property
    def hours_difference(self) -> float:
        """Summed row hours minus the footer total (positive = rows exceed footer)"""
        return self.sum_of_row_hours - self.total_tippable_hours_reported

    @property
    def has_hours_mismatch(self) -> bool:
        """
        True when the row hours and the footer total disagree beyond tolerance.

        The two figures come from different places on the printed report, so a
        mismatch points at a misread value. It is reported, never corrected.
        """
        return abs(self.hours_difference) > HOURS_MISMATCH_TOLERANCE

    @property
    def uncertain_row_indices(self) -> List[int]:
        return [i for i, row in enumerate(self.rows) if row.uncertain_fields]


@dataclass(frozen=True)
class DistributionInputs:
    """Tip pool entered by the manager, plus a signed correction"""
    total_tips: float
    adjustments: float = 0.0

    def __post_init__(self):
        if self.total_tips < 0:
            raise ValueError("Total tips cannot be negative")

    @property
    def effective_total(self) -> float:
        return self.total_tips + self.adjustments


@dataclass(frozen=True)
class Payout:
    """Computed tip allocation for one partner"""
    partner_name: str
    partner_number: str
    tippable_hours: float
    tip_amount: float


@dataclass(frozen=True)
class DistributionResult:
    """Result of distributing a tip pool across report rows"""
    hourly_rate: float
    payouts: Tuple[Payout, ...] = ()

    @property
    def total_hours(self) -> float:
        return sum(p.tippable_hours for p in self.payouts)

    @property
    def total_paid(self) -> float:
        return sum(p.tip_amount for p in self.payouts)


@dataclass(frozen=True)
class Calculation:
    """A distribution run against a stored report"""
    report_id: Optional[str]
    inputs: DistributionInputs
    result: DistributionResult
    created_at: datetime
