"""Report storage system for saved reports and calculations - Google Sheets Backend"""
import json
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Dict, Any
from dataclasses import dataclass, asdict, field

from .exceptions import PersistenceError
from .models import (
    Calculation,
    DistributionInputs,
    DistributionResult,
    Payout,
    Report,
    ReportRow,
)
from config import DATA_DIR, SHEET_ID

logger = logging.getLogger(__name__)


def _row_to_dict(row: ReportRow) -> Dict[str, Any]:
    return {
        'home_store': row.home_store,
        'partner_name': row.partner_name,
        'partner_number': row.partner_number,
        'tippable_hours': row.tippable_hours,
        'uncertain_fields': sorted(row.uncertain_fields),
    }


def _row_from_dict(data: Dict[str, Any]) -> ReportRow:
    return ReportRow(
        home_store=str(data.get('home_store', '')),
        partner_name=str(data.get('partner_name', '')),
        partner_number=str(data.get('partner_number', '')),
        tippable_hours=float(data.get('tippable_hours') or 0.0),
        uncertain_fields=frozenset(data.get('uncertain_fields') or ()),
    )


@dataclass
class StoredReport:
    """Represents a stored report with all metadata"""
    id: str
    store_number: str
    period_start: str
    period_end: str
    executed_by: str
    executed_on: str
    total_tippable_hours_reported: float
    created_at: str  # ISO format datetime
    rows: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoredReport':
        data = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        # Sheets keep the row list as a JSON string in a single cell
        if isinstance(data.get('rows'), str):
            data['rows'] = json.loads(data['rows']) if data['rows'] else []
        data.setdefault('rows', [])
        data.setdefault('created_at', '')
        data['total_tippable_hours_reported'] = float(data.get('total_tippable_hours_reported') or 0.0)
        for key in ('store_number', 'period_start', 'period_end', 'executed_by', 'executed_on'):
            data[key] = str(data.get(key, ''))
        return cls(**data)

    @classmethod
    def from_report(cls, report: Report, report_id: str = "", created_at: str = "") -> 'StoredReport':
        return cls(
            id=report_id,
            store_number=report.store_number,
            period_start=report.period_start,
            period_end=report.period_end,
            executed_by=report.executed_by,
            executed_on=report.executed_on,
            total_tippable_hours_reported=report.total_tippable_hours_reported,
            created_at=created_at,
            rows=[_row_to_dict(row) for row in report.rows]
        )

    def to_report(self) -> Report:
        return Report(
            store_number=self.store_number,
            period_start=self.period_start,
            period_end=self.period_end,
            executed_by=self.executed_by,
            executed_on=self.executed_on,
            rows=tuple(_row_from_dict(row) for row in self.rows),
            total_tippable_hours_reported=self.total_tippable_hours_reported
        )


@dataclass
class StoredCalculation:
    """Represents a stored tip calculation for a report"""
    id: str
    report_id: str
    total_tips: float
    adjustments: float
    hourly_tip_rate: float
    created_at: str  # ISO format datetime
    payouts: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoredCalculation':
        data = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if isinstance(data.get('payouts'), str):
            data['payouts'] = json.loads(data['payouts']) if data['payouts'] else []
        data.setdefault('payouts', [])
        for key in ('total_tips', 'adjustments', 'hourly_tip_rate'):
            data[key] = float(data.get(key) or 0.0)
        data['report_id'] = str(data.get('report_id', ''))
        data.setdefault('created_at', '')
        return cls(**data)

    @classmethod
    def from_calculation(cls, calculation: Calculation, calculation_id: str = "") -> 'StoredCalculation':
        return cls(
            id=calculation_id,
            report_id=calculation.report_id or "",
            total_tips=calculation.inputs.total_tips,
            adjustments=calculation.inputs.adjustments,
            hourly_tip_rate=calculation.result.hourly_rate,
            created_at=calculation.created_at.isoformat(),
            payouts=[asdict(p) for p in calculation.result.payouts]
        )

    def to_calculation(self) -> Calculation:
        payouts = tuple(
            Payout(
                partner_name=str(p.get('partner_name', '')),
                partner_number=str(p.get('partner_number', '')),
                tippable_hours=float(p.get('tippable_hours') or 0.0),
                tip_amount=float(p.get('tip_amount') or 0.0)
            )
            for p in self.payouts
        )
        return Calculation(
            report_id=self.report_id,
            inputs=DistributionInputs(total_tips=self.total_tips, adjustments=self.adjustments),
            result=DistributionResult(hourly_rate=self.hourly_tip_rate, payouts=payouts),
            created_at=datetime.fromisoformat(self.created_at)
        )


@dataclass
class ReportHistoryEntry:
    """A stored report together with its calculations (newest first)"""
    report: StoredReport
    calculations: List[StoredCalculation] = field(default_factory=list)


def _use_google_sheets() -> bool:
    """Determine if we should use Google Sheets or local storage"""
    # Check for environment variable to force local storage
    if os.environ.get('USE_LOCAL_STORAGE', '').lower() == 'true':
        return False

    if not SHEET_ID:
        return False

    # Check Streamlit secrets
    try:
        import streamlit as st
        if 'gcp_service_account' in st.secrets:
            return True
    except Exception as e:
        # st.secrets raises when no secrets file exists
        logger.debug("Streamlit secrets unavailable: %s", e)

    # Check environment variables
    if os.environ.get('GOOGLE_CREDENTIALS_JSON') or os.environ.get('GOOGLE_CREDENTIALS_FILE'):
        return True

    # Check local secrets file
    secrets_path = Path(__file__).parent.parent / "secrets" / "google_credentials.json"
    return secrets_path.exists()


class ReportStorage:
    """Manages persistent storage of reports and calculations

    Automatically uses Google Sheets when credentials are available,
    falls back to local JSON files for development.
    """

    def __init__(self, data_dir: str = DATA_DIR, sheets_client=None):
        self.data_dir = Path(data_dir)
        self.reports_file = self.data_dir / "tip_reports.json"
        self.calculations_file = self.data_dir / "tip_calculations.json"

        self._sheets_client = sheets_client
        self._use_sheets = sheets_client is not None

        if not self._use_sheets and _use_google_sheets():
            try:
                from .sheets_storage import get_sheets_client
                self._sheets_client = get_sheets_client()
                self._use_sheets = True
                logger.info("Using Google Sheets storage")
            except Exception as e:
                logger.warning("Failed to connect to Google Sheets, falling back to local storage: %s", e)

        # Ensure local data directory exists (for fallback)
        if not self._use_sheets:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            if not self.reports_file.exists():
                self._save_local(self.reports_file, [])
            if not self.calculations_file.exists():
                self._save_local(self.calculations_file, [])

    @property
    def uses_sheets(self) -> bool:
        return self._use_sheets

    # ============ REPORTS ============

    def add_report(self, report: Report) -> str:
        """
        Store a parsed report.

        Returns:
            The generated report id

        Raises:
            PersistenceError: If the backend rejects the write
        """
        stored = StoredReport.from_report(
            report,
            report_id=str(uuid.uuid4()),
            created_at=datetime.now().isoformat()
        )

        try:
            if self._use_sheets:
                self._sheets_client.add_report(stored.to_dict())
            else:
                records = self._load_local(self.reports_file, for_update=True)
                records.append(stored.to_dict())
                self._save_local(self.reports_file, records)
        except Exception as e:
            logger.error("Error saving report: %s", e)
            raise PersistenceError("Failed to save report", {'store_number': report.store_number}) from e

        logger.info("Saved report %s for store %r", stored.id, stored.store_number)
        return stored.id

    def get_all_reports(self) -> List[StoredReport]:
        """Get all stored reports, newest first"""
        records = self._read('reports')
        reports = [StoredReport.from_dict(r) for r in records if r.get('id')]
        return sorted(reports, key=lambda r: r.created_at, reverse=True)

    def get_report(self, report_id: str) -> Optional[StoredReport]:
        """Get a specific report by ID"""
        for report in self.get_all_reports():
            if report.id == report_id:
                return report
        return None

    # ============ CALCULATIONS ============

    def add_calculation(self, calculation: Calculation) -> str:
        """
        Store a calculation for a saved report.

        Returns:
            The generated calculation id

        Raises:
            PersistenceError: If the calculation has no report id or the write fails
        """
        if not calculation.report_id:
            raise PersistenceError("Report ID missing")

        stored = StoredCalculation.from_calculation(calculation, calculation_id=str(uuid.uuid4()))

        try:
            if self._use_sheets:
                self._sheets_client.add_calculation(stored.to_dict())
            else:
                records = self._load_local(self.calculations_file, for_update=True)
                records.append(stored.to_dict())
                self._save_local(self.calculations_file, records)
        except Exception as e:
            logger.error("Error saving calculation: %s", e)
            raise PersistenceError("Failed to save calculation", {'report_id': calculation.report_id}) from e

        logger.info("Saved calculation %s for report %s", stored.id, stored.report_id)
        return stored.id

    def get_calculations(self, report_id: str) -> List[StoredCalculation]:
        """Get calculations for a report, newest first"""
        return [c for c in self._all_calculations() if c.report_id == report_id]

    def _all_calculations(self) -> List[StoredCalculation]:
        records = self._read('calculations')
        calculations = [StoredCalculation.from_dict(c) for c in records if c.get('id')]
        return sorted(calculations, key=lambda c: c.created_at, reverse=True)

    # ============ HISTORY ============

    def get_history(self) -> List[ReportHistoryEntry]:
        """Get every report with its calculations, newest first"""
        by_report: Dict[str, List[StoredCalculation]] = {}
        for calc in self._all_calculations():
            by_report.setdefault(calc.report_id, []).append(calc)

        return [
            ReportHistoryEntry(report=report, calculations=by_report.get(report.id, []))
            for report in self.get_all_reports()
        ]

    # ============ BACKENDS ============

    def _read(self, kind: str) -> List[Dict[str, Any]]:
        try:
            if self._use_sheets:
                if kind == 'reports':
                    return self._sheets_client.get_all_reports()
                return self._sheets_client.get_all_calculations()
        except Exception as e:
            logger.error("Error reading %s from sheets: %s", kind, e)
            raise PersistenceError(f"Failed to load {kind}") from e

        path = self.reports_file if kind == 'reports' else self.calculations_file
        return self._load_local(path)

    def _load_local(self, path: Path, for_update: bool = False) -> List[Dict[str, Any]]:
        """
        Load records from a local file.

        An unreadable file lists as empty, but refuses to be loaded for an
        update so the next save cannot overwrite the records it holds.
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return []
        except json.JSONDecodeError as e:
            if for_update:
                raise PersistenceError(f"Storage file is unreadable: {path.name}", {'path': str(path)}) from e
            logger.warning("Ignoring unreadable storage file %s: %s", path, e)
            return []

    def _save_local(self, path: Path, records: List[Dict[str, Any]]):
        """Save records to a local file"""
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
