"""Configuration settings for Tip Distribution Reports"""
import os

# Application Information
APP_NAME = "Tip Distribution Reports"

# Report labels (matched as case-sensitive line prefixes)
STORE_NUMBER_LABEL = 'Store Number:'
TIME_PERIOD_LABEL = 'Time Period:'
EXECUTED_BY_LABEL = 'Executed By:'
EXECUTED_ON_LABEL = 'Executed On:'
TOTAL_HOURS_LABEL = 'Total Tippable Hours:'

# Substrings that must all appear on the table header line
TABLE_HEADER_MARKERS = (
    'Home Store',
    'Partner Name',
    'Partner Number',
    'Total Tippable Hours',
)

# Allowed difference between summed row hours and the footer total
HOURS_MISMATCH_TOLERANCE = 0.05

# Export columns (CSV and clipboard share the same order)
EXPORT_COLUMNS = [
    'Partner Name',
    'Partner Number',
    'Tippable Hours',
    'Tip Amount',
    'Hourly Rate',
    'Store Number',
]

# Excel styling
EXCEL_STYLES = {
    'header_bg_color': 'D3D3D3',  # Light gray
    'summary_bg_color': 'DBEAFE',  # Light blue
    'font_name': 'Arial',
    'font_size': 10
}

# Local storage directory (used when Google Sheets is not configured)
DATA_DIR = os.environ.get('TIP_REPORTS_DATA_DIR', 'data')

# Google Sheets spreadsheet holding the tip_reports / tip_calculations worksheets
SHEET_ID = os.environ.get('TIP_REPORTS_SHEET_ID', '')

# Simulated latency of the mock vision client (seconds)
MOCK_EXTRACTION_DELAY = 1.5
