"""Google Sheets storage backend for persistent data storage"""
import json
import logging
import os
from typing import List, Optional, Dict, Any
from pathlib import Path

import gspread
import streamlit as st
from google.oauth2.service_account import Credentials

from config import SHEET_ID

logger = logging.getLogger(__name__)

# Google Sheets configuration
SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
    'https://www.googleapis.com/auth/drive'
]

REPORT_COLUMNS = ['id', 'store_number', 'period_start', 'period_end', 'executed_by',
                  'executed_on', 'total_tippable_hours_reported', 'created_at', 'rows']

CALCULATION_COLUMNS = ['id', 'report_id', 'total_tips', 'adjustments', 'hourly_tip_rate',
                       'created_at', 'payouts']

# Columns holding nested lists, stored as JSON text in one cell
JSON_COLUMNS = {'rows', 'payouts'}


def _to_cell(header: str, value: Any) -> Any:
    if header in JSON_COLUMNS:
        return json.dumps(value or [], ensure_ascii=False)
    if value is None:
        return ''
    # Numbers read back as displayed, so floats go in as exact text
    if isinstance(value, float):
        return repr(value)
    return value


class GoogleSheetsClient:
    """Client for interacting with Google Sheets"""

    def __init__(self, sheet_id: str = SHEET_ID):
        self.sheet_id = sheet_id
        self.client = None
        self.spreadsheet = None
        self._connect()

    def _get_credentials(self) -> Optional[Credentials]:
        """Get Google credentials from various sources"""

        # Option 1: Streamlit secrets (for deployed app)
        try:
            if 'gcp_service_account' in st.secrets:
                creds_dict = dict(st.secrets['gcp_service_account'])
                return Credentials.from_service_account_info(creds_dict, scopes=SCOPES)
        except Exception as e:
            logger.debug("No usable Streamlit secrets: %s", e)

        # Option 2: Environment variable with JSON content
        creds_json = os.environ.get('GOOGLE_CREDENTIALS_JSON')
        if creds_json:
            creds_dict = json.loads(creds_json)
            return Credentials.from_service_account_info(creds_dict, scopes=SCOPES)

        # Option 3: Local file in secrets folder
        secrets_path = Path(__file__).parent.parent / "secrets" / "google_credentials.json"
        if secrets_path.exists():
            return Credentials.from_service_account_file(str(secrets_path), scopes=SCOPES)

        # Option 4: File path from environment variable
        creds_file = os.environ.get('GOOGLE_CREDENTIALS_FILE')
        if creds_file and Path(creds_file).exists():
            return Credentials.from_service_account_file(creds_file, scopes=SCOPES)

        return None

    def _connect(self):
        """Connect to Google Sheets"""
        creds = self._get_credentials()
        if not creds:
            raise ValueError(
                "Google credentials not found. Please provide credentials via:\n"
                "1. Streamlit secrets (gcp_service_account)\n"
                "2. GOOGLE_CREDENTIALS_JSON environment variable\n"
                "3. secrets/google_credentials.json file\n"
                "4. GOOGLE_CREDENTIALS_FILE environment variable"
            )

        self.client = gspread.authorize(creds)
        self.spreadsheet = self.client.open_by_key(self.sheet_id)

    def get_worksheet(self, name: str):
        """Get or create a worksheet by name"""
        try:
            return self.spreadsheet.worksheet(name)
        except gspread.WorksheetNotFound:
            return self.spreadsheet.add_worksheet(title=name, rows=1000, cols=20)

    def _append(self, sheet_name: str, default_headers: List[str], data: Dict[str, Any]) -> Dict[str, Any]:
        worksheet = self.get_worksheet(sheet_name)

        # Get headers
        headers = worksheet.row_values(1)
        if not headers:
            headers = default_headers
            worksheet.update('A1', [headers])

        row = [_to_cell(header, data.get(header)) for header in headers]
        # RAW keeps store and partner numbers as text
        worksheet.append_row(row, value_input_option='RAW')
        return data

    def _records(self, sheet_name: str) -> List[Dict[str, Any]]:
        worksheet = self.get_worksheet(sheet_name)
        return worksheet.get_all_records(numericise_ignore=['all'])

    # ============ REPORTS ============

    def get_all_reports(self) -> List[Dict[str, Any]]:
        """Get all reports from the sheet"""
        return self._records('tip_reports')

    def add_report(self, report_data: Dict[str, Any]) -> Dict[str, Any]:
        """Add a new report to the sheet"""
        return self._append('tip_reports', REPORT_COLUMNS, report_data)

    # ============ CALCULATIONS ============

    def get_all_calculations(self) -> List[Dict[str, Any]]:
        """Get all calculations from the sheet"""
        return self._records('tip_calculations')

    def add_calculation(self, calculation_data: Dict[str, Any]) -> Dict[str, Any]:
        """Add a new calculation to the sheet"""
        return self._append('tip_calculations', CALCULATION_COLUMNS, calculation_data)


# Singleton instance - cached as Streamlit resource (survives reruns)
@st.cache_resource
def get_sheets_client() -> GoogleSheetsClient:
    """Get or create the Google Sheets client singleton (cached across reruns)."""
    return GoogleSheetsClient()
