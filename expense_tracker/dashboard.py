"""Streamlit app for the monthly expense tracker.

The page is a thin layer over :class:`~expense_tracker.session.ExpenseSession`:
widgets collect input, the session validates and persists it, and the
aggregation/report helpers produce everything that is displayed.  Errors
raised by the session are shown with ``st.error`` and never stop the app.

To run the dashboard from the command line::

    streamlit run expense_tracker/dashboard.py

or use ``python run_dashboard.py`` from the project root.
"""

from __future__ import annotations

import os
import sys
from datetime import date, datetime
from typing import Callable, Optional, TypeVar

import pandas as pd
import streamlit as st

# Support both ``python -m expense_tracker.dashboard`` and
# ``streamlit run expense_tracker/dashboard.py`` (no parent package).
if __package__:
    from . import config
    from . import visualization as viz
    from .aggregation import budget_status, category_breakdown, monthly_summary, weekly_totals
    from .categories import PREDEFINED_TOKENS, CategoryState, capitalize, classify_category
    from .errors import EmptyReportError, ExpenseTrackerError
    from .formatting import display_category, format_currency, format_display_date
    from .models import Command, DeleteCommand, EditCommand
    from .reports import month_label
    from .session import ExpenseSession
    from .stores import open_stores
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from expense_tracker import config  # type: ignore
    from expense_tracker import visualization as viz  # type: ignore
    from expense_tracker.aggregation import budget_status, category_breakdown, monthly_summary, weekly_totals  # type: ignore
    from expense_tracker.categories import PREDEFINED_TOKENS, CategoryState, capitalize, classify_category  # type: ignore
    from expense_tracker.errors import EmptyReportError, ExpenseTrackerError  # type: ignore
    from expense_tracker.formatting import display_category, format_currency, format_display_date  # type: ignore
    from expense_tracker.models import Command, DeleteCommand, EditCommand  # type: ignore
    from expense_tracker.reports import month_label  # type: ignore
    from expense_tracker.session import ExpenseSession  # type: ignore
    from expense_tracker.stores import open_stores  # type: ignore

SESSION_KEY = 'expense_session'
PENDING_DELETE_KEY = 'pending_delete'
ALL_MONTHS = ''

T = TypeVar('T')


def _rerun() -> None:
    rerun_fn = getattr(st, 'rerun', None) or getattr(st, 'experimental_rerun', None)
    if rerun_fn:
        rerun_fn()


def _get_session() -> ExpenseSession:
    """Session object kept in ``st.session_state`` across reruns."""
    session = st.session_state.get(SESSION_KEY)
    if session is None:
        session = ExpenseSession(*open_stores())
        session.load()
        st.session_state[SESSION_KEY] = session
    return session


def _run_action(action: Callable[[], T], success: Optional[str] = None) -> Optional[T]:
    """Run a session mutation, reporting failures instead of raising them."""
    try:
        result = action()
    except ExpenseTrackerError as exc:
        st.error(str(exc))
        return None
    if success:
        st.success(success)
    return result


def _handle_command(session: ExpenseSession, command: Command) -> None:
    if isinstance(command, DeleteCommand):
        # deletion waits for an explicit confirmation
        st.session_state[PENDING_DELETE_KEY] = command.expense_id
        return
    _run_action(lambda: session.dispatch(command))


def _category_inputs(prefix: str, stored: Optional[str] = None):
    """Category select box plus the custom text box used when "other" is picked."""
    form_state = classify_category(stored) if stored is not None else None
    options = list(PREDEFINED_TOKENS)
    index = options.index(form_state.choice) if form_state else 0
    choice = st.selectbox("Category", options, index=index, format_func=capitalize, key=f"{prefix}_category")
    custom_default = form_state.custom_text if form_state and form_state.state is CategoryState.CUSTOM_OTHER else ''
    custom_text = st.text_input(
        "Custom category (when Other is selected)", value=custom_default, key=f"{prefix}_custom"
    )
    return choice, custom_text


def render_budget_section(session: ExpenseSession) -> None:
    st.subheader("Monthly budget")
    st.write(f"Current Budget: {format_currency(session.budget)}")
    with st.form("budget_form", clear_on_submit=True):
        value = st.number_input("Budget", min_value=0.0, step=100.0, format="%.2f")
        if st.form_submit_button("Set budget"):
            _run_action(lambda: session.set_budget(value), "Budget updated.")


def render_add_expense(session: ExpenseSession) -> None:
    st.subheader("Add expense")
    with st.form("add_expense_form", clear_on_submit=True):
        amount = st.number_input("Amount", min_value=0.0, step=10.0, format="%.2f")
        choice, custom_text = _category_inputs("add")
        spent_on = st.date_input("Date", value=date.today())
        if st.form_submit_button("Add expense"):
            # keep the time of day when the expense is logged for today
            when = datetime.now() if spent_on == date.today() else spent_on
            _run_action(
                lambda: session.add_expense(amount, choice, when, custom_text=custom_text),
                "Expense added.",
            )


def render_edit_section(session: ExpenseSession) -> None:
    expense = session.editing
    if expense is None:
        return
    st.subheader("Edit expense")
    with st.form("edit_expense_form"):
        amount = st.number_input("Amount", min_value=0.0, value=float(expense.amount), step=10.0, format="%.2f")
        choice, custom_text = _category_inputs("edit", expense.category)
        spent_on = st.date_input("Date", value=expense.day)
        save_col, cancel_col = st.columns(2)
        save = save_col.form_submit_button("Save")
        cancel = cancel_col.form_submit_button("Cancel")
    if cancel:
        session.cancel_edit()
        _rerun()
    elif save:
        when = expense.date if spent_on == expense.day else spent_on
        if _run_action(lambda: session.save_edit(amount, choice, when, custom_text=custom_text), "Expense updated."):
            _rerun()


def render_month_selector(session: ExpenseSession, months) -> None:
    options = [ALL_MONTHS] + list(months)
    current = session.selected_month.key if session.selected_month else ALL_MONTHS
    if current not in options:
        options.append(current)
    selected = st.selectbox(
        "Month",
        options,
        index=options.index(current),
        format_func=lambda key: "All months" if key == ALL_MONTHS else month_label(key),
    )
    if selected != current:
        session.select_month(selected or None)
        _rerun()


def render_summary(session: ExpenseSession) -> None:
    summary = session.summary()
    render_month_selector(session, summary.months)

    col1, col2, col3 = st.columns(3)
    col1.metric("Budget", format_currency(summary.budget))
    col2.metric("Total Spent", format_currency(summary.total_spent))
    col3.metric(
        "Remaining Budget",
        format_currency(summary.remaining),
        delta="Over budget" if summary.over_budget else None,
        delta_color="inverse",
    )

    left, right = st.columns(2)
    with left:
        st.markdown("#### By category")
        breakdown = pd.DataFrame(
            [(name, format_currency(amount)) for name, amount in category_breakdown(summary.totals)],
            columns=["Category", "Amount"],
        )
        st.dataframe(breakdown, hide_index=True, use_container_width=True)
        st.plotly_chart(viz.create_category_pie_chart(summary.totals), use_container_width=True)
    with right:
        st.markdown("#### By day")
        if summary.daily:
            daily = pd.DataFrame(
                [(day, format_currency(amount)) for day, amount in summary.daily],
                columns=["Date", "Amount"],
            )
            st.dataframe(daily, hide_index=True, use_container_width=True)
        else:
            st.info("No expenses recorded for this period.")
        st.plotly_chart(viz.create_daily_bar_chart(summary.daily), use_container_width=True)

    if session.selected_month is not None:
        weekly = weekly_totals(summary.expenses, session.selected_month)
        if not weekly.empty:
            st.markdown("#### By week")
            weekly['Category'] = weekly['Category'].map(display_category)
            weekly['Total'] = weekly['Total'].map(format_currency)
            st.dataframe(weekly, hide_index=True, use_container_width=True)
    else:
        status = budget_status(session.budget, session.expenses)
        st.plotly_chart(
            viz.create_budget_gauge(status.budget_amount, status.spent_this_month, title=f"Budget used in {status.month.label}"),
            use_container_width=True,
        )
        st.plotly_chart(viz.create_monthly_bar_chart(monthly_summary(session.expenses)), use_container_width=True)

    render_recent_expenses(session, summary.recent)
    render_export(session, summary.period_label)


def render_recent_expenses(session: ExpenseSession, recent) -> None:
    st.markdown("#### Recent expenses")
    if not recent:
        st.info("No expenses yet.")
        return
    for expense in recent:
        info, edit_col, delete_col = st.columns([6, 1, 1])
        info.write(
            f"{format_currency(expense.amount)} - {display_category(expense.category)} - "
            f"{format_display_date(expense.date)}"
        )
        if edit_col.button("Edit", key=f"edit_{expense.id}"):
            _handle_command(session, EditCommand(expense.id))
            _rerun()
        if delete_col.button("Delete", key=f"delete_{expense.id}"):
            _handle_command(session, DeleteCommand(expense.id))
            _rerun()

    pending = st.session_state.get(PENDING_DELETE_KEY)
    if pending is not None and session.find(pending) is not None:
        st.warning("Are you sure you want to delete this expense?")
        yes_col, no_col = st.columns(2)
        if yes_col.button("Yes, delete"):
            st.session_state[PENDING_DELETE_KEY] = None
            _run_action(lambda: session.dispatch(DeleteCommand(pending)), "Expense deleted.")
            _rerun()
        if no_col.button("Keep it"):
            st.session_state[PENDING_DELETE_KEY] = None
            _rerun()


def render_export(session: ExpenseSession, period: str) -> None:
    st.markdown(f"#### Export report: {period}")
    col1, col2 = st.columns(2)
    try:
        csv_report = session.export('csv')
        xlsx_report = session.export('xlsx')
    except EmptyReportError as exc:
        st.info(str(exc))
        return
    col1.download_button(
        label="📥 Download CSV",
        data=csv_report.payload,
        file_name=csv_report.filename,
        mime=csv_report.mime_type,
    )
    col2.download_button(
        label="📥 Download Excel",
        data=xlsx_report.payload,
        file_name=xlsx_report.filename,
        mime=xlsx_report.mime_type,
    )


def main() -> None:
    """Entry point for the Streamlit application."""
    st.set_page_config(page_title="Monthly Expense Tracker", page_icon="💰", layout="wide")
    st.title("💰 Monthly Expense Tracker")
    st.caption(f"Signed in as {config.USER_ID}")

    try:
        session = _get_session()
    except ExpenseTrackerError as exc:
        st.error(f"Could not load your data: {exc}")
        return

    with st.sidebar:
        render_budget_section(session)
        render_add_expense(session)

    render_edit_section(session)
    render_summary(session)


if __name__ == "__main__":  # pragma: no cover
    main()
