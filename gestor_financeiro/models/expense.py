"""
Core Data Models for Gestor Financeiro

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Keep the persisted JSON shape stable (camelCase keys, numeric amounts)
3. Tolerate sloppy model output where it is harmless (category labels)
4. Reject it where it is not (dates, amounts)

DESIGN DECISION: Amounts are Decimal everywhere so monthly totals add
up exactly. They are written to JSON as numbers.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from gestor_financeiro.dates import is_valid_iso_date
from gestor_financeiro.models.categories import ExpenseCategory


# =============================================================================
# EXPENSE RECORD
# =============================================================================

class Expense(BaseModel):
    """
    A single recorded expense.

    CRITICAL: Only created by the add-expense flow, after validation.
    Records are never edited or deleted one by one.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Opaque unique identifier"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in BRL"
    )
    description: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )
    date: str = Field(
        ...,
        description="Expense date (YYYY-MM-DD)"
    )
    category: ExpenseCategory
    original_input: str = Field(
        default="",
        alias="originalInput",
        description="Raw text the user typed"
    )

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        if not is_valid_iso_date(v):
            raise ValueError(f"Invalid date: {v!r} (expected a real YYYY-MM-DD date)")
        return v

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, amount: Decimal) -> float:
        return float(amount)

    @property
    def month(self) -> str:
        """YYYY-MM this expense belongs to."""
        return self.date[:7]

    def to_storage_dict(self) -> dict[str, Any]:
        """JSON-ready dict with the persisted (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# INTERPRETER RESULTS
# =============================================================================
# These mirror the JSON Gemini is asked to produce (Portuguese keys).
# They are PROPOSED data and go through ExpenseValidator before use.

class QueryType(str, Enum):
    """Intent of a user's free-text input."""
    RESUMO_GERAL = "RESUMO_GERAL"          # general monthly summary
    TOTAL_CATEGORIA = "TOTAL_CATEGORIA"    # total for one category
    DESCONHECIDO = "DESCONHECIDO"          # not understood
    REGISTRO_DESPESA = "REGISTRO_DESPESA"  # register an expense


def _lenient_category(value: Any) -> Any:
    """Map loose labels onto the enum; unknown labels become None."""
    if value is None or isinstance(value, ExpenseCategory):
        return value
    return ExpenseCategory.from_label(value)


class ParsedExpenseData(BaseModel):
    """
    Expense details extracted from free text.

    Every field is optional because extraction can miss any of them.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    valor: Optional[Decimal] = None
    descricao: Optional[str] = None
    data: Optional[str] = None

    @field_validator("valor", mode="before")
    @classmethod
    def brazilian_number(cls, v: Any) -> Any:
        """Accept "R$ 1.234,56" style strings as well as plain numbers."""
        if not isinstance(v, str):
            return v
        text = v.replace("R$", "").strip()
        if not text:
            return None
        if "," in text:
            text = text.replace(".", "").replace(",", ".")
        return text

    @field_validator("descricao", "data", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_complete(self) -> bool:
        return self.valor is not None and self.descricao is not None and self.data is not None


class CategorizedData(BaseModel):
    """Category Gemini assigned to a description."""

    categoria: Optional[ExpenseCategory] = None

    @field_validator("categoria", mode="before")
    @classmethod
    def lenient_category(cls, v: Any) -> Any:
        return _lenient_category(v)


class ParsedQuery(BaseModel):
    """Intent Gemini read from the user's input."""
    model_config = ConfigDict(populate_by_name=True)

    tipo_query: QueryType = Field(
        default=QueryType.DESCONHECIDO,
        alias="tipoQuery",
    )
    categoria: Optional[ExpenseCategory] = None

    @field_validator("tipo_query", mode="before")
    @classmethod
    def unknown_query_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().upper()
            if v not in QueryType.__members__:
                return QueryType.DESCONHECIDO
        return v

    @field_validator("categoria", mode="before")
    @classmethod
    def lenient_category(cls, v: Any) -> Any:
        return _lenient_category(v)


# =============================================================================
# MONTHLY SUMMARY (derived, never persisted)
# =============================================================================

class HighestSpending(BaseModel):
    """Category with the largest total in a month."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    amount: Decimal


class MonthlySummary(BaseModel):
    """
    Aggregated spending for one month.

    Every category is present in category_totals, even with zero spend.
    """
    model_config = ConfigDict(frozen=True)

    month: str = Field(..., description="YYYY-MM")
    month_label: str = Field(..., description="e.g. 'maio de 2024'")
    category_totals: dict[ExpenseCategory, Decimal]
    grand_total: Decimal = Field(..., ge=0)
    highest_spending: Optional[HighestSpending] = None

    @model_validator(mode="after")
    def validate_totals(self) -> "MonthlySummary":
        """Category totals must cover every category and add up."""
        missing = set(ExpenseCategory) - set(self.category_totals)
        if missing:
            raise ValueError(f"Missing category totals: {sorted(c.value for c in missing)}")
        if sum(self.category_totals.values(), Decimal("0")) != self.grand_total:
            raise ValueError("Category totals don't add up to the grand total")
        if self.highest_spending is not None:
            expected = self.category_totals[self.highest_spending.category]
            if self.highest_spending.amount != expected:
                raise ValueError("Highest spending amount doesn't match its category total")
        return self

    def total_for(self, category: ExpenseCategory) -> Decimal:
        return self.category_totals.get(category, Decimal("0"))


class ChartRow(BaseModel):
    """One bar in the monthly distribution chart."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    amount: Decimal
    percentage: float = Field(..., ge=0.0, le=100.0)
