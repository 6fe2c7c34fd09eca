"""
HTML fragments for the Streamlit page.

Descriptions and original inputs come from the user or from Gemini,
so every text value is escaped before it is placed in markup.
"""

import html as html_lib
from typing import Any

from gestor_financeiro.config import AppSettings
from gestor_financeiro.formatting import (
    format_currency,
    format_date_short,
    truncate_input,
)
from gestor_financeiro.models.categories import CATEGORY_STYLES, category_icon
from gestor_financeiro.models.expense import ChartRow, Expense, HighestSpending
from gestor_financeiro.models.tracker import Notification, NotificationType

TOAST_ICONS = {
    NotificationType.SUCCESS: "✅",
    NotificationType.ERROR: "⚠️",
    NotificationType.INFO: "ℹ️",
}


def sanitize(text: Any) -> str:
    """Escape HTML special characters."""
    return html_lib.escape(str(text))


def toast_options(notification: Notification, settings: AppSettings) -> dict[str, Any]:
    """Keyword arguments for st.toast."""
    return {
        "icon": TOAST_ICONS[notification.type],
        "duration": notification.duration_seconds(
            settings.info_toast_seconds,
            settings.toast_seconds,
        ),
    }


def highest_spending_html(highest: HighestSpending) -> str:
    color = CATEGORY_STYLES[highest.category].text_color
    return (
        f"Categoria Destaque: <span style='color:{color};font-weight:600'>"
        f"{sanitize(highest.category.value)}</span> ({format_currency(highest.amount)})"
    )


def chart_row_html(row: ChartRow) -> str:
    """One labelled bar of the distribution chart."""
    style = CATEGORY_STYLES[row.category]
    return f"""
        <div style="display:flex;justify-content:space-between;font-size:0.9em">
            <span>{style.icon} {sanitize(row.category.value)}</span>
            <span>{format_currency(row.amount)} ({row.percentage:.1f}%)</span>
        </div>
        <div class="bar-track">
            <div class="category-bar"
                 style="width:{row.percentage:.1f}%;background-color:{style.color}"></div>
        </div>
        """


def expense_item_html(expense: Expense) -> str:
    """One card of the expense list."""
    style = CATEGORY_STYLES[expense.category]
    return f"""
        <div class="expense-item"
             style="background-color:{style.light_color};border-color:{style.color}">
            <div style="display:flex;justify-content:space-between">
                <span>{category_icon(expense.category)} <strong>{sanitize(expense.description)}</strong></span>
                <span style="color:{style.text_color};font-weight:700">
                    {format_currency(expense.amount)}
                </span>
            </div>
            <div class="expense-meta" style="display:flex;justify-content:space-between">
                <span>{format_date_short(expense.date)} - <em>"{sanitize(truncate_input(expense.original_input))}"</em></span>
                <span style="color:{style.text_color};font-weight:600">{sanitize(expense.category.value)}</span>
            </div>
        </div>
        """
