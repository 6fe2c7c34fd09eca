"""
Monthly Aggregation

DESIGN DECISION: Aggregation is DETERMINISTIC and pure.
Gemini only tells us WHAT the user asks for ("summary", "total of
Alimentação"); the numbers always come from here, recomputed from
the stored records on every call.

GUARANTEES:
- Every category appears in the totals, even with zero spend
- Category totals add up exactly to the grand total
- A month without spending has no summary (None), not a zero summary
"""

from decimal import Decimal
from typing import Iterable, Optional

from gestor_financeiro.formatting import format_month_year
from gestor_financeiro.models.categories import ExpenseCategory
from gestor_financeiro.models.expense import (
    ChartRow,
    Expense,
    HighestSpending,
    MonthlySummary,
)

ZERO = Decimal("0")


def expenses_for_month(expenses: Iterable[Expense], month: str) -> list[Expense]:
    """Records dated within month (YYYY-MM), input order preserved."""
    return [expense for expense in expenses if expense.date.startswith(month)]


def compute_monthly_summary(
    expenses: Iterable[Expense],
    month: str,
) -> Optional[MonthlySummary]:
    """
    Aggregate one month of spending.

    The highest-spending category is tracked during a single forward
    scan: it changes only when a category's running total becomes
    strictly greater than the current highest amount. On an exact
    tie the category that reached the amount first keeps the title.

    Args:
        expenses: All records, date ascending
        month: Month to summarize (YYYY-MM)

    Returns:
        The summary, or None if nothing was spent that month
    """
    totals: dict[ExpenseCategory, Decimal] = {category: ZERO for category in ExpenseCategory}
    grand_total = ZERO
    highest: Optional[HighestSpending] = None

    for expense in expenses_for_month(expenses, month):
        totals[expense.category] += expense.amount
        grand_total += expense.amount

        running = totals[expense.category]
        if highest is None or running > highest.amount:
            highest = HighestSpending(category=expense.category, amount=running)

    if grand_total == ZERO:
        return None

    return MonthlySummary(
        month=month,
        month_label=format_month_year(month),
        category_totals=totals,
        grand_total=grand_total,
        highest_spending=highest,
    )


def category_total(
    expenses: Iterable[Expense],
    month: str,
    category: ExpenseCategory,
) -> Decimal:
    """Total for one category in a month (zero when nothing was spent)."""
    summary = compute_monthly_summary(expenses, month)
    if summary is None:
        return ZERO
    return summary.total_for(category)


def chart_rows(summary: Optional[MonthlySummary]) -> list[ChartRow]:
    """
    Bars for the distribution chart.

    Only categories with spending, largest first. Percentages are
    relative to the grand total.
    """
    if summary is None or summary.grand_total == ZERO:
        return []

    spent = [
        (category, amount)
        for category, amount in summary.category_totals.items()
        if amount > ZERO
    ]
    spent.sort(key=lambda item: item[1], reverse=True)

    return [
        ChartRow(
            category=category,
            amount=amount,
            percentage=float(amount / summary.grand_total * 100),
        )
        for category, amount in spent
    ]
