"""Fixed dashboard queries.

Every window is derived from one reference date so all panels of a refresh
agree with each other. Dates are rendered as ISO literals; windows are
half-open (``>= start AND < end + 1 day``) so time-of-day values on the
last day are included.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta


def shift_years(day: date, years: int) -> date:
    """Move ``day`` by whole years, mapping 29 February to the 28th."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


@dataclass(frozen=True)
class ReportingWindows:
    """The trailing window ending on the reference date and its prior-year twin."""

    reference: date
    current_start: date
    current_end: date
    previous_start: date
    previous_end: date

    @classmethod
    def from_reference(cls, reference: date, days: int = 30) -> ReportingWindows:
        """Build both windows from a single reference date.

        Args:
            reference: Last day of the current window.
            days: Window length in days (inclusive of the reference date).
        """
        span = max(days, 1)
        current_start = reference - timedelta(days=span - 1)
        return cls(
            reference=reference,
            current_start=current_start,
            current_end=reference,
            previous_start=shift_years(current_start, -1),
            previous_end=shift_years(reference, -1),
        )

    @property
    def days(self) -> int:
        """Number of days in the current window."""
        return (self.current_end - self.current_start).days + 1


def _lit(day: date) -> str:
    return f"'{day.isoformat()}'"


def _between(column: str, start: date, end: date) -> str:
    return f"{column} >= {_lit(start)} AND {column} < {_lit(end + timedelta(days=1))}"


REFERENCE_DATE_SQL = "SELECT MAX(TransactionDate) AS max_date FROM dbo.AUDIT"


def sales_yoy_sql(windows: ReportingWindows) -> str:
    """Daily revenue for the current window and the same days last year."""
    current = _between("TransactionDate", windows.current_start, windows.current_end)
    previous = _between("TransactionDate", windows.previous_start, windows.previous_end)
    return (
        "SELECT CAST(TransactionDate AS date) AS day, "
        "SUM(Qty * RetailPriceExcl) AS revenue "
        "FROM dbo.AUDIT "
        f"WHERE ({current}) OR ({previous}) "
        "GROUP BY CAST(TransactionDate AS date) "
        "ORDER BY day"
    )


def composition_sql(windows: ReportingWindows) -> str:
    """Invoice value per transaction type in the current window."""
    current = _between("InvoiceDate", windows.current_start, windows.current_end)
    return (
        "SELECT TransactionType AS code, SUM(InvoicePrice) AS value "
        "FROM dbo.TRANSACTIONS "
        f"WHERE {current} "
        "GROUP BY TransactionType "
        "ORDER BY value DESC"
    )


def top_buyers_sql(windows: ReportingWindows, keyword: str) -> str:
    """Segment revenue per customer for the reference year and the year before."""
    safe_keyword = keyword.replace("'", "''").upper()
    year = windows.reference.year
    return (
        "SELECT d.Surname AS customer, YEAR(a.TransactionDate) AS year, "
        "SUM(a.Qty * a.RetailPriceExcl) AS revenue "
        "FROM dbo.AUDIT a "
        "JOIN dbo.DEBTOR d ON a.DebtorOrCreditorNumber = d.ANUMBER "
        f"WHERE UPPER(a.Description) LIKE '%{safe_keyword}%' "
        f"AND YEAR(a.TransactionDate) IN ({year - 1}, {year}) "
        "AND a.TransactionDate < "
        f"{_lit(windows.reference + timedelta(days=1))} "
        "GROUP BY d.Surname, YEAR(a.TransactionDate)"
    )


def kpi_sql(windows: ReportingWindows, low_stock_threshold: int) -> str:
    """Revenue for both windows, active customers, tickets and low stock."""
    current = _between("TransactionDate", windows.current_start, windows.current_end)
    previous = _between("TransactionDate", windows.previous_start, windows.previous_end)
    return (
        "SELECT "
        f"SUM(CASE WHEN {current} THEN Qty * RetailPriceExcl ELSE 0 END) AS current_revenue, "
        f"SUM(CASE WHEN {previous} THEN Qty * RetailPriceExcl ELSE 0 END) AS previous_revenue, "
        f"COUNT(DISTINCT CASE WHEN {current} THEN DebtorOrCreditorNumber END) AS active_customers, "
        f"COUNT(DISTINCT CASE WHEN {current} THEN TransactionNumber END) AS ticket_count, "
        "(SELECT COUNT(*) FROM dbo.STOCK "
        f"WHERE StockType = 0 AND OnHand <= {int(low_stock_threshold)}) AS low_stock_count "
        "FROM dbo.AUDIT "
        f"WHERE ({current}) OR ({previous})"
    )
