"""Report formatter: CSV and Excel exports of a filtered expense set.

Both formatters are pure and return the payload; saving it (a Streamlit
download button, or a file under ``data/reports``) is up to the caller.
"""

from __future__ import annotations

import io
from typing import Dict, Iterable, List, NamedTuple, Sequence, Tuple, Union

import pandas as pd

from .aggregation import enumerate_months  # noqa: F401  # re-exported for the month selector
from .errors import EmptyReportError, ValidationError
from .formatting import display_category, format_amount, format_display_date
from .models import Expense, MonthFilter, YearMonth

REPORT_COLUMNS = ['Date', 'Amount', 'Category']
SHEET_NAME = 'Expenses'
ALL_TIME_LABEL = 'All Time'

CSV_MIME = 'text/csv'
XLSX_MIME = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

# format -> (file extension, MIME type)
REPORT_FORMATS: Dict[str, Tuple[str, str]] = {
    'csv': ('csv', CSV_MIME),
    'xlsx': ('xlsx', XLSX_MIME),
}


class ReportPayload(NamedTuple):
    filename: str
    mime_type: str
    payload: Union[str, bytes]


def period_label_for(year_month: MonthFilter = None) -> str:
    """Human-readable period, e.g. ``"January 2025"`` or ``"All Time"``."""
    if year_month is None:
        return ALL_TIME_LABEL
    return YearMonth.parse(year_month).label


def month_label(key: str) -> str:
    return period_label_for(key)


def report_filename(label: str, fmt: str = 'csv') -> str:
    """``expense_report_<label>.<ext>`` with spaces in the label replaced by ``_``."""
    extension, _ = _resolve_format(fmt)
    return f"expense_report_{label.replace(' ', '_')}.{extension}"


def _resolve_format(fmt: str) -> Tuple[str, str]:
    try:
        return REPORT_FORMATS[fmt.lower()]
    except (KeyError, AttributeError):
        raise ValidationError(f"Unsupported report format: {fmt!r}") from None


def _report_rows(expenses: Sequence[Expense], label: str) -> List[Expense]:
    rows = list(expenses)
    if not rows:
        raise EmptyReportError(label)
    return rows


def to_delimited_text(expenses: Iterable[Expense], period_label: str) -> str:
    """Render ``Date,Amount,Category`` CSV text, one row per expense in input order.

    Raises:
        EmptyReportError: when there is nothing to export
    """
    rows = _report_rows(list(expenses), period_label)
    frame = pd.DataFrame(
        [
            {
                'Date': format_display_date(e.date),
                'Amount': format_amount(e.amount),
                'Category': display_category(e.category),
            }
            for e in rows
        ],
        columns=REPORT_COLUMNS,
    )
    return frame.to_csv(index=False, lineterminator='\n').rstrip('\n')


def to_tabular_binary(expenses: Iterable[Expense], period_label: str) -> bytes:
    """Render the report rows into an ``.xlsx`` workbook with one ``Expenses`` sheet.

    Amounts are written as numeric cells, not text.

    Raises:
        EmptyReportError: when there is nothing to export
    """
    rows = _report_rows(list(expenses), period_label)
    frame = pd.DataFrame(
        [
            {
                'Date': format_display_date(e.date),
                'Amount': float(e.amount),
                'Category': display_category(e.category),
            }
            for e in rows
        ],
        columns=REPORT_COLUMNS,
    )
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        sheet = writer.sheets[SHEET_NAME]
        for row in sheet.iter_rows(min_row=2, min_col=2, max_col=2):
            for cell in row:
                cell.number_format = '0.00'
    return buffer.getvalue()


def build_report(expenses: Iterable[Expense], period_label: str, fmt: str = 'csv') -> ReportPayload:
    """Bundle a report into the ``(filename, mime_type, payload)`` triple a sink expects."""
    _, mime_type = _resolve_format(fmt)
    if fmt.lower() == 'csv':
        payload: Union[str, bytes] = to_delimited_text(expenses, period_label)
    else:
        payload = to_tabular_binary(expenses, period_label)
    return ReportPayload(report_filename(period_label, fmt), mime_type, payload)
