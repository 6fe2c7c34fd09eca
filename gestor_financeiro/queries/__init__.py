"""Monthly aggregation package."""

from gestor_financeiro.queries.aggregator import (
    category_total,
    chart_rows,
    compute_monthly_summary,
    expenses_for_month,
)

__all__ = [
    "category_total",
    "chart_rows",
    "compute_monthly_summary",
    "expenses_for_month",
]
