"""
Tip Distribution Reports - Main Application
"""
import streamlit as st
import pandas as pd

from tip_reports.calculator import TipDistributionCalculator
from tip_reports.exceptions import PersistenceError
from tip_reports.exporters import PayoutExporter, export_filename, format_amount
from tip_reports.models import DistributionInputs, Report, ReportRow, TIPPABLE_HOURS
from tip_reports.report_editor import (
    carry_review_flags,
    coerce_hours,
    replace_rows,
    update_header,
    update_total_reported,
)
from tip_reports.report_storage import ReportStorage
from tip_reports.upload_service import ReportUploadService, UploadedFile
from tip_reports.vision_client import MockVisionClient
from config import APP_NAME, HOURS_MISMATCH_TOLERANCE


# Initialize storage
storage = ReportStorage()
calculator = TipDistributionCalculator()

EDITOR_COLUMNS = ['Home Store', 'Partner Name', 'Partner Number', 'Tippable Hours', 'Needs Review']


def reset_flow():
    for key in ('report', 'report_id', 'inputs', 'step', 'rows_editor'):
        st.session_state.pop(key, None)


def rows_to_frame(report: Report) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                'Home Store': row.home_store,
                'Partner Name': row.partner_name,
                'Partner Number': row.partner_number,
                'Tippable Hours': row.tippable_hours,
                'Needs Review': row.is_uncertain(TIPPABLE_HOURS),
            }
            for row in report.rows
        ],
        columns=EDITOR_COLUMNS
    )


def _cell_text(value, default: str = '') -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return default
    return str(value).strip() or default


def frame_to_rows(df: pd.DataFrame, original: Report) -> tuple:
    """Rebuild rows from the table editor. Hours that were changed lose their review flag."""
    rows = [
        ReportRow(
            home_store=_cell_text(record.get('Home Store'), original.store_number),
            partner_name=_cell_text(record.get('Partner Name')),
            partner_number=_cell_text(record.get('Partner Number')),
            tippable_hours=coerce_hours(record.get('Tippable Hours'))
        )
        for record in df.to_dict('records')
    ]
    return carry_review_flags(original, rows)


def page_upload():
    """Upload a report image and parse it"""
    st.header("📤 Upload Tip Distribution Report")
    st.markdown("Upload a photo or screenshot of the weekly report. The data will be extracted for review.")

    uploaded = st.file_uploader("Report image", type=['png', 'jpg', 'jpeg', 'webp', 'gif'])

    if uploaded is not None and st.button("🔍 Extract Report", type="primary"):
        service = ReportUploadService(MockVisionClient(), storage)
        with st.spinner("Extracting report data..."):
            response = service.handle(UploadedFile(
                name=uploaded.name,
                content_type=uploaded.type or '',
                data=uploaded.getvalue()
            ))

        if not response.ok:
            st.error(f"❌ {response.body['error']}")
            return

        st.session_state.report_id = response.parsed.report_id
        st.session_state.report = response.parsed.report
        st.session_state.step = 'review'
        st.rerun()


def page_review():
    """Review and correct the parsed report"""
    report: Report = st.session_state.report

    st.header("✏️ Review & Edit Report")

    st.markdown("#### Report Information")
    col1, col2 = st.columns(2)
    with col1:
        store_number = st.text_input("Store Number", value=report.store_number)
        period_start = st.text_input("Period Start", value=report.period_start)
        executed_by = st.text_input("Executed By", value=report.executed_by)
    with col2:
        total_reported = st.number_input(
            "Total Tippable Hours (from report)",
            value=float(report.total_tippable_hours_reported),
            step=0.01,
            format="%.2f"
        )
        period_end = st.text_input("Period End", value=report.period_end)
        executed_on = st.text_input("Executed On", value=report.executed_on)

    edited = report
    for field_name, value in (('store_number', store_number), ('period_start', period_start),
                              ('period_end', period_end), ('executed_by', executed_by),
                              ('executed_on', executed_on)):
        edited = update_header(edited, field_name, value)
    edited = update_total_reported(edited, total_reported)

    st.markdown("#### Partners")
    uncertain_count = len(report.uncertain_row_indices)
    if uncertain_count:
        st.warning(f"⚠️ {uncertain_count} hour value(s) may have been misread. Check rows marked 'Needs Review'.")

    table = st.data_editor(
        rows_to_frame(report),
        num_rows="dynamic",
        use_container_width=True,
        disabled=['Needs Review'],
        column_config={
            'Tippable Hours': st.column_config.NumberColumn(min_value=0.0, step=0.01, format="%.2f")
        },
        key="rows_editor"
    )
    edited = replace_rows(edited, frame_to_rows(table, report))

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Sum of Rows", f"{edited.sum_of_row_hours:.2f} hrs")
    with col2:
        st.metric("Reported Total", f"{edited.total_tippable_hours_reported:.2f} hrs",
                  delta=f"{edited.hours_difference:+.2f}", delta_color="off")

    if edited.has_hours_mismatch:
        st.warning(
            f"⚠️ Row hours differ from the reported total by more than "
            f"{HOURS_MISMATCH_TOLERANCE:.2f} hrs. Please double-check the values."
        )

    st.markdown("---")
    col1, col2 = st.columns([1, 5])
    with col1:
        if st.button("Cancel"):
            reset_flow()
            st.rerun()
    with col2:
        if st.button("➡️ Continue to Tips", type="primary"):
            st.session_state.report = edited
            st.session_state.step = 'calculate'
            st.rerun()


def page_calculate():
    """Enter the tip pool and preview the distribution"""
    report: Report = st.session_state.report

    st.header("💵 Calculate Tips")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Store Number", report.store_number or "-")
    with col2:
        st.metric("Total Hours", f"{report.sum_of_row_hours:.2f}")
    with col3:
        st.metric("Period", f"{report.period_start} - {report.period_end}")

    total_tips = st.number_input("Total tip amount for this week ($)", min_value=0.0, step=0.01, format="%.2f")
    adjustments = st.number_input("Adjustments (e.g., cash tips, corrections) ($)", value=0.0,
                                  step=0.01, format="%.2f")

    inputs = DistributionInputs(total_tips=total_tips, adjustments=adjustments)
    result = calculator.calculate_for_report(report, inputs)

    if total_tips > 0:
        st.metric("Hourly Tip Rate", f"${format_amount(result.hourly_rate)}/hr")

    if result.payouts:
        st.markdown("### 📊 Preview Payouts")
        st.dataframe(PayoutExporter(report, result).to_dataframe(), use_container_width=True)
    elif report.sum_of_row_hours == 0:
        st.info("📭 No tippable hours in this report, nothing to distribute.")

    st.markdown("---")
    col1, col2 = st.columns([1, 5])
    with col1:
        if st.button("Back"):
            st.session_state.step = 'review'
            st.rerun()
    with col2:
        if st.button("✅ View Results", type="primary", disabled=total_tips <= 0):
            st.session_state.inputs = inputs
            st.session_state.step = 'results'
            st.rerun()


def page_results():
    """Show final payouts with export and save options"""
    report: Report = st.session_state.report
    inputs: DistributionInputs = st.session_state.inputs

    calculation = calculator.build_calculation(report, inputs, st.session_state.get('report_id'))
    result = calculation.result
    exporter = PayoutExporter(report, result)
    summary = calculator.calculate_summary(result)

    st.header("📈 Tip Distribution Results")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Store Number", report.store_number or "-")
    with col2:
        st.metric("Total Hours", f"{summary['total_hours']:.2f}")
    with col3:
        st.metric("Total Tips", f"${format_amount(inputs.effective_total)}")
    with col4:
        st.metric("Hourly Rate", f"${format_amount(summary['hourly_rate'])}/hr")

    st.dataframe(exporter.to_dataframe(), use_container_width=True)
    st.caption(f"Total paid: ${format_amount(summary['total_paid'])} to {summary['partner_count']} partners")

    # Download buttons
    st.markdown("### 📥 Export")
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label="📄 Download CSV",
            data=exporter.to_csv(),
            file_name=export_filename(report, 'csv'),
            mime="text/csv"
        )
    with col2:
        st.download_button(
            label="📊 Download Excel",
            data=exporter.export_excel(),
            file_name=export_filename(report, 'xlsx'),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )

    with st.expander("📋 Copy to clipboard"):
        st.code(exporter.to_clipboard_text(), language=None)

    st.markdown("---")
    col1, col2 = st.columns([1, 5])
    with col1:
        if st.button("💾 Save Calculation", type="primary"):
            try:
                storage.add_calculation(calculation)
                st.success("Calculation saved successfully!")
            except PersistenceError as e:
                st.error(f"❌ Failed to save calculation: {e.message}")
    with col2:
        if st.button("Process Another Report"):
            reset_flow()
            st.rerun()


def page_history():
    """Past reports and their calculations"""
    st.header("🗂️ Report History")

    try:
        history = storage.get_history()
    except PersistenceError as e:
        st.error(f"❌ {e.message}")
        return

    if not history:
        st.info("📭 No reports yet. Upload your first tip distribution report to get started.")
        return

    for entry in history:
        stored = entry.report
        with st.expander(f"Store {stored.store_number} • {stored.period_start} - {stored.period_end}"):
            st.caption(f"Uploaded: {stored.created_at[:16].replace('T', ' ')}")

            if not entry.calculations:
                st.write("No calculations saved for this report.")
                continue

            report = stored.to_report()
            for stored_calc in entry.calculations:
                calc = stored_calc.to_calculation()
                exporter = PayoutExporter(report, calc.result)

                col1, col2 = st.columns([4, 1])
                with col1:
                    st.write(
                        f"**Total Tips:** ${format_amount(calc.inputs.effective_total)} • "
                        f"**Rate:** ${format_amount(calc.result.hourly_rate)}/hr • "
                        f"**Partners:** {len(calc.result.payouts)}"
                    )
                    st.caption(f"Calculated: {stored_calc.created_at[:16].replace('T', ' ')}")
                with col2:
                    st.download_button(
                        label="📄 CSV",
                        data=exporter.to_csv(),
                        file_name=export_filename(report, 'csv'),
                        mime="text/csv",
                        key=f"csv_{stored_calc.id}"
                    )

            st.markdown("##### Latest Calculation Details")
            latest = entry.calculations[0].to_calculation()
            st.dataframe(PayoutExporter(report, latest.result).to_dataframe(), use_container_width=True)


def main():
    st.set_page_config(
        page_title=APP_NAME,
        page_icon="💵",
        layout="wide"
    )

    st.sidebar.title(f"💵 {APP_NAME}")
    st.sidebar.caption("Google Sheets storage" if storage.uses_sheets else "Local storage")
    st.sidebar.markdown("---")

    # Navigation
    page = st.sidebar.radio(
        "Navigation",
        ["📤 Process Report", "🗂️ History"],
        label_visibility="collapsed"
    )

    if page == "🗂️ History":
        page_history()
        return

    step = st.session_state.get('step', 'upload')
    if step == 'review':
        page_review()
    elif step == 'calculate':
        page_calculate()
    elif step == 'results':
        page_results()
    else:
        page_upload()


if __name__ == '__main__':
    main()
