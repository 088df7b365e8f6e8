"""Top-level package for the monthly expense tracker.

The primary modules are:

* ``aggregation`` - pure totals and groupings over a list of expenses
* ``reports`` - CSV/Excel exports of a filtered expense set
* ``session`` - the signed-in user's state and the mutation entry points
* ``db`` / ``local_store`` - SQLite and JSON-file persistence backends
* ``dashboard`` - a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run expense_tracker/dashboard.py
```
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import reports  # noqa: F401  # re-exported for convenience
from .errors import EmptyReportError, ExpenseTrackerError, StoreError, ValidationError
from .models import DeleteCommand, EditCommand, Expense, YearMonth
from .session import ExpenseSession

__version__ = "0.1.0"

__all__ = [
    "aggregation",
    "reports",
    "EmptyReportError",
    "ExpenseTrackerError",
    "StoreError",
    "ValidationError",
    "DeleteCommand",
    "EditCommand",
    "Expense",
    "YearMonth",
    "ExpenseSession",
]
