"""
Expense Categories

The nine fixed spending categories and their display metadata.
The metadata is a plain lookup table; nothing dispatches on it.
"""

from enum import Enum
from types import MappingProxyType
from typing import NamedTuple, Optional


class ExpenseCategory(str, Enum):
    """
    Supported spending categories.

    DESIGN DECISION: The values are the Portuguese labels shown to the
    user and sent to Gemini, so the model's answer maps straight back
    onto the enum.
    """
    ALIMENTACAO = "Alimentação"
    TRANSPORTE = "Transporte"
    LAZER = "Lazer"
    CONTAS_FIXAS = "Contas Fixas"
    SAUDE = "Saúde"
    INVESTIMENTOS = "Investimentos"
    EDUCACAO = "Educação"
    COMPRAS = "Compras"
    OUTROS = "Outros"

    @classmethod
    def from_label(cls, label: object) -> Optional["ExpenseCategory"]:
        """Match a label loosely (case and surrounding spaces ignored)."""
        if not isinstance(label, str):
            return None
        wanted = label.strip().casefold()
        for category in cls:
            if category.value.casefold() == wanted or category.name.casefold() == wanted:
                return category
        return None


# Category names in declaration order, for prompts
CATEGORY_NAMES = tuple(category.value for category in ExpenseCategory)


class CategoryStyle(NamedTuple):
    """Display metadata for one category."""
    icon: str
    color: str        # bar / border color
    text_color: str
    light_color: str  # list item background


UNKNOWN_CATEGORY_ICON = "❔"

CATEGORY_STYLES = MappingProxyType({
    ExpenseCategory.ALIMENTACAO: CategoryStyle("🍔", "#ef4444", "#b91c1c", "#fee2e2"),
    ExpenseCategory.TRANSPORTE: CategoryStyle("🚗", "#3b82f6", "#1d4ed8", "#dbeafe"),
    ExpenseCategory.LAZER: CategoryStyle("🎉", "#22c55e", "#15803d", "#dcfce7"),
    ExpenseCategory.CONTAS_FIXAS: CategoryStyle("🏠", "#eab308", "#a16207", "#fef9c3"),
    ExpenseCategory.SAUDE: CategoryStyle("💊", "#a855f7", "#7e22ce", "#f3e8ff"),
    ExpenseCategory.INVESTIMENTOS: CategoryStyle("📈", "#6366f1", "#4338ca", "#e0e7ff"),
    ExpenseCategory.EDUCACAO: CategoryStyle("📚", "#ec4899", "#be185d", "#fce7f3"),
    ExpenseCategory.COMPRAS: CategoryStyle("🛍️", "#14b8a6", "#0f766e", "#ccfbf1"),
    ExpenseCategory.OUTROS: CategoryStyle("📎", "#6b7280", "#374151", "#f3f4f6"),
})


def category_icon(category: object) -> str:
    """Icon for a category, or the fallback for anything unknown."""
    style = CATEGORY_STYLES.get(category)
    return style.icon if style else UNKNOWN_CATEGORY_ICON
