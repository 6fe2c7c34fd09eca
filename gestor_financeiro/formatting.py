"""
pt-BR display formatting.

Currency, dates and month labels as the Brazilian user expects them.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

MONTH_NAMES_PT = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)

Number = Union[Decimal, int, float]

CENTS = Decimal("0.01")


def format_currency(amount: Number) -> str:
    """Format an amount as BRL: R$ 1.234,56 / -R$ 1.234,56"""
    value = Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    text = f"{abs(value):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{sign}R$ {text}"


def format_date_short(iso_date: str) -> str:
    """YYYY-MM-DD -> DD/MM/YY"""
    year, month, day = iso_date.split("-")
    return f"{day}/{month}/{year[2:]}"


def format_month_year(month: str) -> str:
    """YYYY-MM -> 'maio de 2024'"""
    year, month_number = month.split("-")
    return f"{MONTH_NAMES_PT[int(month_number) - 1]} de {year}"


def truncate_input(text: str, limit: int = 30) -> str:
    """Shorten long original inputs for the expense list."""
    if len(text) > limit:
        return text[:limit - 3] + "..."
    return text
