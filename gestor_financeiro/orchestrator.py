"""
Main Orchestrator for Gestor Financeiro

This module ties together all the components and defines the
end-to-end flow for one submitted text:

    text → interpret intent → (extract → categorize → validate → store)
                            | (summary)
                            | (category total)
                            | (unknown)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No record is created from unvalidated extraction
- No total is answered by the LLM; the aggregator computes it
- Every failure ends in a notification, never an exception
- One request at a time, guarded by the state's loading flag

Session state is an explicit TrackerState passed in by the caller;
the orchestrator keeps none of its own.
"""

from datetime import datetime
from typing import Optional

import structlog
from pydantic import ValidationError

from gestor_financeiro.agents import ExpenseInterpreterAgent
from gestor_financeiro.audit import AuditLogger, create_correlation_id
from gestor_financeiro.config import get_settings, validate_all_settings
from gestor_financeiro.formatting import (
    format_currency,
    format_date_short,
    format_month_year,
)
from gestor_financeiro.models.categories import ExpenseCategory
from gestor_financeiro.models.expense import (
    ChartRow,
    Expense,
    MonthlySummary,
    ParsedExpenseData,
    QueryType,
)
from gestor_financeiro.models.tracker import Notification, TrackerState
from gestor_financeiro.queries import (
    category_total,
    chart_rows,
    compute_monthly_summary,
)
from gestor_financeiro.services.storage import (
    ExpenseStorageInterface,
    JsonFileExpenseStorage,
    StorageError,
)
from gestor_financeiro.store import ExpenseRecordStore
from gestor_financeiro.validation import ExpenseValidator

logger = structlog.get_logger(__name__)

# User-facing messages (pt-BR)
MSG_API_KEY_MISSING_STARTUP = (
    "Chave de API do Gemini não configurada. Funcionalidades de IA desabilitadas."
)
MSG_API_KEY_MISSING = "Chave de API não configurada."
MSG_EMPTY_INPUT = "Por favor, insira uma descrição ou comando."
MSG_BUSY = "Aguarde, a solicitação anterior ainda está sendo processada."
MSG_PARSE_FAILED = (
    "❌ Não foi possível entender os detalhes da despesa. "
    "Tente ser mais específico (valor, descrição, data AAAA-MM-DD)."
)
MSG_ADD_FAILED = "❌ Erro ao processar despesa."
MSG_UNKNOWN_COMMAND = 'Não entendi o comando. Tente "resumo do mês" ou registrar uma despesa.'


class ExpenseTracker:
    """
    Orchestrates the free-text flow.

    Flow:
    1. Guard → loading flag, API key, empty input
    2. Interpret → Gemini classifies the intent
    3. Dispatch:
       - REGISTRO_DESPESA → extract, categorize, validate, store
       - RESUMO_GERAL → point the user at the monthly summary
       - TOTAL_CATEGORIA → answer from the aggregator
       - anything else → "did not understand"

    The interpreter is optional: without it the tracker still loads
    and shows stored expenses, but every text input is refused.
    """

    def __init__(
        self,
        store: ExpenseRecordStore,
        interpreter: Optional[ExpenseInterpreterAgent] = None,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._interpreter = interpreter
        self._validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def store(self) -> ExpenseRecordStore:
        return self._store

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def ai_enabled(self) -> bool:
        return self._interpreter is not None

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    def new_state(self, now: Optional[datetime] = None) -> TrackerState:
        """Fresh session looking at the current month."""
        return TrackerState(
            selected_month=self._store.current_month(now),
            api_key_exists=self.ai_enabled,
        )

    def startup(
        self,
        state: TrackerState,
        now: Optional[datetime] = None,
    ) -> Optional[Notification]:
        """
        Load stored expenses and settle the selected month.

        Returns the missing-API-key warning the first time it is
        called for a session without AI, None otherwise.
        """
        self._store.load()
        self.reconcile_selected_month(state, now)

        if not state.api_key_exists and not state.startup_warning_shown:
            state.startup_warning_shown = True
            self._audit_logger.log_api_key_missing()
            return Notification.error(MSG_API_KEY_MISSING_STARTUP)
        return None

    def available_months(self, now: Optional[datetime] = None) -> list[str]:
        return self._store.available_months(now)

    def reconcile_selected_month(
        self,
        state: TrackerState,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Make sure the selected month is one the user can pick.

        Falls back to the most recent available month.
        """
        months = self._store.available_months(now)
        if state.selected_month not in months:
            state.selected_month = months[-1]
        return state.selected_month

    def select_month(self, state: TrackerState, month: str) -> str:
        """
        Switch the month being viewed.

        Raises:
            ValueError: If the month isn't in available_months()
        """
        if month not in self._store.available_months():
            raise ValueError(f"Month {month} is not available")
        state.selected_month = month
        return month

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def monthly_summary(self, state: TrackerState) -> Optional[MonthlySummary]:
        return compute_monthly_summary(self._store.expenses, state.selected_month)

    def chart(self, state: TrackerState) -> list[ChartRow]:
        return chart_rows(self.monthly_summary(state))

    def expenses_for_selected_month(self, state: TrackerState) -> list[Expense]:
        return self._store.expenses_for_month(state.selected_month)

    # ------------------------------------------------------------------
    # Free-text flow
    # ------------------------------------------------------------------

    async def process_input(self, state: TrackerState, text: str) -> Notification:
        """
        Handle one submitted text.

        Always returns a notification for the user. Only an
        expense registration can modify the store.
        """
        if state.is_loading:
            self._audit_logger.log_input_rejected("busy")
            return Notification.info(MSG_BUSY)

        if not state.api_key_exists or self._interpreter is None:
            self._audit_logger.log_input_rejected("api_key_missing")
            return Notification.error(MSG_API_KEY_MISSING)

        text = text.strip() if text else ""
        if not text:
            self._audit_logger.log_input_rejected("empty_input")
            return Notification.error(MSG_EMPTY_INPUT)

        correlation_id = create_correlation_id()
        self._audit_logger.log_input_received(text, correlation_id)

        state.is_loading = True
        try:
            query = await self._interpreter.interpret_intent(text)
            self._audit_logger.log_intent_interpreted(
                query_type=query.tipo_query.value,
                category=query.categoria.value if query.categoria else None,
                correlation_id=correlation_id,
            )

            if query.tipo_query == QueryType.REGISTRO_DESPESA:
                return await self._register_expense(state, text, correlation_id)

            if query.tipo_query == QueryType.RESUMO_GERAL:
                self._audit_logger.log_summary_requested(state.selected_month, correlation_id)
                return Notification.info(
                    f"✅ Resumo de {format_month_year(state.selected_month)} exibido abaixo."
                )

            if query.tipo_query == QueryType.TOTAL_CATEGORIA and query.categoria:
                return self._answer_category_total(state, query.categoria, correlation_id)

            self._audit_logger.log_unknown_command(correlation_id)
            return Notification.error(MSG_UNKNOWN_COMMAND)
        finally:
            state.is_loading = False

    def _answer_category_total(
        self,
        state: TrackerState,
        category: ExpenseCategory,
        correlation_id,
    ) -> Notification:
        total = category_total(self._store.expenses, state.selected_month, category)
        self._audit_logger.log_category_total_requested(
            month=state.selected_month,
            category=category.value,
            total=str(total),
            correlation_id=correlation_id,
        )
        return Notification.info(
            f"Total de {category.value} em {format_month_year(state.selected_month)}: "
            f"{format_currency(total)}"
        )

    async def _register_expense(
        self,
        state: TrackerState,
        text: str,
        correlation_id,
    ) -> Notification:
        """Extract, categorize, validate and store one expense."""
        parsed = await self._interpreter.parse_expense(text)
        if parsed is None or not parsed.is_complete:
            self._audit_logger.log_expense_parse_failed(correlation_id)
            return Notification.error(MSG_PARSE_FAILED)

        self._audit_logger.log_expense_parsed(
            amount=str(parsed.valor),
            date=parsed.data,
            correlation_id=correlation_id,
        )
        return await self.add_expense(state, parsed, text, correlation_id)

    async def add_expense(
        self,
        state: TrackerState,
        parsed: ParsedExpenseData,
        original_input: str,
        correlation_id=None,
    ) -> Notification:
        """
        Turn a complete extraction into a stored Expense.

        On success the selected month switches to the new
        expense's month so the user sees it immediately.
        """
        correlation_id = correlation_id or create_correlation_id()

        categorized = None
        if self._interpreter is not None:
            categorized = await self._interpreter.categorize(parsed.descricao)
        category = categorized.categoria if categorized and categorized.categoria else None
        self._audit_logger.log_category_assigned(
            category=(category or ExpenseCategory.OUTROS).value,
            defaulted=category is None,
            correlation_id=correlation_id,
        )
        category = category or ExpenseCategory.OUTROS

        validation = self._validator.validate(parsed)
        if not validation.is_valid:
            logger.info("expense_rejected", errors=validation.error_count)
            self._audit_logger.log_validation_failed(validation.as_dicts(), correlation_id)
            return Notification.error(self._validator.get_user_message(validation))

        try:
            expense = Expense(
                amount=parsed.valor,
                description=parsed.descricao,
                date=parsed.data,
                category=category,
                original_input=original_input,
            )
            self._store.add(expense)
        except (ValidationError, StorageError) as e:
            logger.error("expense_add_failed", error=str(e))
            self._audit_logger.log_error(type(e).__name__, str(e), correlation_id)
            return Notification.error(MSG_ADD_FAILED)

        self._audit_logger.log_expense_saved(
            expense_id=expense.id,
            amount=str(expense.amount),
            category=expense.category.value,
            date=expense.date,
            correlation_id=correlation_id,
        )

        if state.selected_month != expense.month:
            state.selected_month = expense.month

        return Notification.success(
            f"✅ Despesa registrada: {format_currency(expense.amount)} em "
            f"{expense.category.value} ({format_date_short(expense.date)})"
        )


def create_app_components(
    storage: Optional[ExpenseStorageInterface] = None,
) -> ExpenseTracker:
    """
    Factory function to create the tracker with its collaborators.

    Args:
        storage: Expense storage backend. Defaults to the JSON file
                 configured by STORAGE_PATH / STORAGE_KEY.

    A missing Gemini key is not an error here: the tracker is built
    without an interpreter and reports it once at startup.

    Raises:
        ValueError: If the storage or app settings are invalid
    """
    status = validate_all_settings()
    for section in ("storage", "app"):
        if not status[section]:
            raise ValueError(f"Invalid {section} settings: {status[f'{section}_error']}")

    settings = get_settings()
    app_settings = settings.app
    audit_logger = AuditLogger()

    store = ExpenseRecordStore(
        storage=storage or JsonFileExpenseStorage(),
        audit_logger=audit_logger,
        timezone=app_settings.timezone,
    )

    interpreter = None
    if status["gemini"]:
        interpreter = ExpenseInterpreterAgent(
            settings=settings.gemini,
            timezone=app_settings.timezone,
            audit_logger=audit_logger,
        )
    else:
        logger.warning("gemini_not_configured", error=status["gemini_error"])

    return ExpenseTracker(
        store=store,
        interpreter=interpreter,
        audit_logger=audit_logger,
    )
