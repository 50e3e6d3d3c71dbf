"""Payout export for Tip Distribution Reports"""
from decimal import Decimal, ROUND_HALF_UP
from io import BytesIO
from pathlib import Path
from typing import Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side

from .models import DistributionResult, Report
from config import APP_NAME, EXCEL_STYLES, EXPORT_COLUMNS

CENT = Decimal('0.01')


def format_amount(value: float) -> str:
    """Format to exactly two decimals, rounding halves away from zero."""
    return str(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def export_filename(report: Report, extension: str = 'csv') -> str:
    return f"tip-distribution-{report.store_number}-{report.period_end}.{extension}"


class PayoutExporter:
    """
    Renders a distribution as CSV, clipboard text, a DataFrame or Excel.

    Every numeric value is rounded to cents here and only here.
    """

    def __init__(self, report: Report, result: DistributionResult):
        self.report = report
        self.result = result

    def _formatted_rows(self):
        rate = format_amount(self.result.hourly_rate)
        for p in self.result.payouts:
            yield (
                p.partner_name,
                p.partner_number,
                format_amount(p.tippable_hours),
                format_amount(p.tip_amount),
                rate,
                self.report.store_number
            )

    def to_csv(self) -> str:
        """
        CSV with names and numbers quoted, e.g.

        Partner Name,Partner Number,Tippable Hours,Tip Amount,Hourly Rate,Store Number
        "Anderson, Sarah M","US36955947",22.75,50.12,2.20,69600
        """
        header = ','.join(EXPORT_COLUMNS) + '\n'
        rows = [
            f'"{name}","{number}",{hours},{amount},{rate},{store}'
            for name, number, hours, amount, rate, store in self._formatted_rows()
        ]
        return header + '\n'.join(rows)

    def to_clipboard_text(self) -> str:
        """Tab-separated variant of the CSV for pasting into a spreadsheet."""
        header = '\t'.join(EXPORT_COLUMNS) + '\n'
        rows = ['\t'.join(row) for row in self._formatted_rows()]
        return header + '\n'.join(rows)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert payouts to a pandas DataFrame for display.
        """
        data = []
        for p in self.result.payouts:
            data.append({
                'Partner Name': p.partner_name,
                'Partner Number': p.partner_number,
                'Tippable Hours': f"{format_amount(p.tippable_hours)}",
                'Hourly Rate': f"${format_amount(self.result.hourly_rate)}",
                'Tip Amount': f"${format_amount(p.tip_amount)}"
            })

        return pd.DataFrame(data, columns=['Partner Name', 'Partner Number', 'Tippable Hours',
                                           'Hourly Rate', 'Tip Amount'])

    def export_excel(self, filepath: Optional[str] = None) -> bytes:
        """
        Export payouts to an Excel workbook.

        Args:
            filepath: Optional path to also save the workbook to

        Returns:
            The workbook as bytes
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Tip Distribution"

        # Styles
        header_fill = PatternFill(start_color=EXCEL_STYLES['header_bg_color'],
                                  end_color=EXCEL_STYLES['header_bg_color'],
                                  fill_type='solid')
        summary_fill = PatternFill(start_color=EXCEL_STYLES['summary_bg_color'],
                                   end_color=EXCEL_STYLES['summary_bg_color'],
                                   fill_type='solid')
        header_font = Font(name=EXCEL_STYLES['font_name'],
                           size=EXCEL_STYLES['font_size'],
                           bold=True)
        title_font = Font(name=EXCEL_STYLES['font_name'],
                          size=14,
                          bold=True)
        border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        # Title section
        ws['A1'] = APP_NAME
        ws['A1'].font = title_font

        ws['A2'] = f"Store: {self.report.store_number}"
        ws['A2'].font = Font(size=12, bold=True)

        if self.report.period_start or self.report.period_end:
            ws['A3'] = f"Period: {self.report.period_start} - {self.report.period_end}"

        # Data starts at row 5
        start_row = 5

        for col_idx, col_name in enumerate(EXPORT_COLUMNS, 1):
            cell = ws.cell(row=start_row, column=col_idx, value=col_name)
            cell.fill = header_fill
            cell.font = header_font
            cell.border = border
            cell.alignment = Alignment(horizontal='center')

        rate = float(format_amount(self.result.hourly_rate))
        for row_idx, p in enumerate(self.result.payouts, 1):
            values = [
                p.partner_name,
                p.partner_number,
                float(format_amount(p.tippable_hours)),
                float(format_amount(p.tip_amount)),
                rate,
                self.report.store_number
            ]
            for col_idx, value in enumerate(values, 1):
                cell = ws.cell(row=start_row + row_idx, column=col_idx, value=value)
                cell.border = border
                if col_idx == 3:
                    cell.number_format = '0.00'
                elif col_idx in (4, 5):
                    cell.number_format = '$#,##0.00'

        # Totals row
        summary_row = start_row + len(self.result.payouts) + 1
        totals = {
            1: 'Total',
            3: float(format_amount(self.result.total_hours)),
            4: float(format_amount(self.result.total_paid))
        }
        for col_idx in range(1, len(EXPORT_COLUMNS) + 1):
            cell = ws.cell(row=summary_row, column=col_idx, value=totals.get(col_idx))
            cell.fill = summary_fill
            cell.font = Font(bold=True)
            cell.border = border
            if col_idx == 3:
                cell.number_format = '0.00'
            elif col_idx == 4:
                cell.number_format = '$#,##0.00'

        # Adjust column widths
        column_widths = [30, 16, 15, 13, 13, 14]
        for idx, width in enumerate(column_widths, 1):
            ws.column_dimensions[chr(64 + idx)].width = width

        buffer = BytesIO()
        wb.save(buffer)
        data = buffer.getvalue()

        if filepath:
            Path(filepath).parent.mkdir(parents=True, exist_ok=True)
            Path(filepath).write_bytes(data)

        return data
