"""
Extraction Validator

DESIGN DECISION: Nothing Gemini extracts is trusted as-is.
Every extraction passes through here before an Expense is created.

Stage 1: Completeness - value, description and date were all extracted
Stage 2: Semantics    - the amount is positive and the date is a real
                        calendar date in YYYY-MM-DD form

A failure at either stage blocks the record. Nothing is corrected
silently: a bad date is reported back to the user, not guessed.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from gestor_financeiro.dates import is_valid_iso_date
from gestor_financeiro.models.expense import ParsedExpenseData

MISSING = "missing"
INVALID_AMOUNT = "invalid_amount"
INVALID_DATE = "invalid_date"


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(..., description="Field with the issue")
    issue_type: str = Field(..., description="missing, invalid_amount or invalid_date")
    message: str = Field(..., description="Human-readable description (pt-BR)")
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
    )


class ValidationResult(BaseModel):
    """Result of validating one extraction."""

    complete: bool = Field(..., description="Did stage 1 pass?")
    is_valid: bool = Field(..., description="Did both stages pass?")
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    def first_issue(self, issue_type: str) -> Optional[ValidationIssue]:
        for issue in self.issues:
            if issue.issue_type == issue_type:
                return issue
        return None

    def as_dicts(self) -> list[dict]:
        """Issues in audit-log form."""
        return [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in self.issues
        ]


class ExpenseValidator:
    """
    Validates extracted expense data.

    Stateless; one instance can be shared.
    """

    def _validate_completeness(
        self,
        parsed: ParsedExpenseData,
    ) -> tuple[bool, list[ValidationIssue]]:
        """Stage 1: every required field was extracted."""
        issues = []

        if parsed.valor is None:
            issues.append(ValidationIssue(
                field="valor",
                issue_type=MISSING,
                message="Valor não identificado",
            ))
        if parsed.descricao is None:
            issues.append(ValidationIssue(
                field="descricao",
                issue_type=MISSING,
                message="Descrição não identificada",
            ))
        if parsed.data is None:
            issues.append(ValidationIssue(
                field="data",
                issue_type=MISSING,
                message="Data não identificada",
            ))

        return not issues, issues

    def _validate_semantic(
        self,
        parsed: ParsedExpenseData,
    ) -> tuple[bool, list[ValidationIssue]]:
        """Stage 2: the extracted values make sense."""
        issues = []

        if parsed.valor is not None and parsed.valor <= Decimal("0"):
            issues.append(ValidationIssue(
                field="valor",
                issue_type=INVALID_AMOUNT,
                message=f"Valor inválido ({parsed.valor}). O valor deve ser maior que zero.",
            ))

        if not is_valid_iso_date(parsed.data):
            issues.append(ValidationIssue(
                field="data",
                issue_type=INVALID_DATE,
                message=(
                    f"❌ Data inválida ({parsed.data}) recebida do processamento. "
                    "Por favor, tente especificar a data como AAAA-MM-DD."
                ),
            ))

        return not issues, issues

    def validate(self, parsed: ParsedExpenseData) -> ValidationResult:
        """
        Run both stages.

        Stage 2 only runs when stage 1 passed.
        """
        complete, issues = self._validate_completeness(parsed)

        semantic_valid = False
        if complete:
            semantic_valid, semantic_issues = self._validate_semantic(parsed)
            issues.extend(semantic_issues)

        return ValidationResult(
            complete=complete,
            is_valid=complete and semantic_valid,
            issues=issues,
        )

    def get_user_message(self, result: ValidationResult) -> str:
        """The one message the user sees for a failed validation."""
        if result.is_valid:
            return ""

        if not result.complete:
            return (
                "❌ Não foi possível entender os detalhes da despesa. "
                "Tente ser mais específico (valor, descrição, data AAAA-MM-DD)."
            )

        date_issue = result.first_issue(INVALID_DATE)
        if date_issue:
            return date_issue.message

        return "\n".join(f"❌ {issue.message}" for issue in result.issues)
