"""
Streamlit Frontend for Gestor Financeiro

A single page:
1. One text box for expenses and commands ("Lanche R$30 ontem", "resumo do mês")
2. Month navigation over the months that have expenses
3. Monthly summary with a distribution bar chart
4. The selected month's expenses

All logic lives in ExpenseTracker; this file only renders its
results and forwards the user's input.
"""

import asyncio

import streamlit as st

from gestor_financeiro.config import get_settings
from gestor_financeiro.display import (
    chart_row_html,
    expense_item_html,
    highest_spending_html,
    toast_options,
)
from gestor_financeiro.formatting import format_currency, format_month_year
from gestor_financeiro.models.tracker import Notification, TrackerState
from gestor_financeiro.orchestrator import ExpenseTracker, create_app_components


# Page configuration
st.set_page_config(
    page_title="Gestor Financeiro Pessoal",
    page_icon="💰",
    layout="centered",
)

st.markdown("""
<style>
    .expense-item {
        padding: 10px 14px;
        border-radius: 10px;
        border-left: 5px solid;
        margin: 6px 0;
    }
    .expense-meta {
        font-size: 0.8em;
        color: #64748b;
    }
    .category-bar {
        height: 14px;
        border-radius: 7px;
    }
    .bar-track {
        width: 100%;
        background-color: #e2e8f0;
        border-radius: 7px;
        overflow: hidden;
        margin-bottom: 8px;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_tracker() -> ExpenseTracker:
    """Get or create the tracker (cached across reruns)."""
    return create_app_components()


def get_state(tracker: ExpenseTracker) -> TrackerState:
    """Session state, created and loaded on the first run."""
    if "tracker_state" not in st.session_state:
        state = tracker.new_state()
        warning = tracker.startup(state)
        st.session_state.tracker_state = state
        st.session_state.pending_notification = warning
    return st.session_state.tracker_state


def show_notification(notification: Notification) -> None:
    """Render a transient toast."""
    st.toast(notification.message, **toast_options(notification, get_settings().app))


def main():
    """Main application entry point."""
    tracker = get_tracker()
    state = get_state(tracker)

    pending = st.session_state.get("pending_notification")
    if pending:
        show_notification(pending)
        st.session_state.pending_notification = None

    st.title("💰 Gestor Financeiro Pessoal")

    render_input_section(tracker, state)
    render_month_section(tracker, state)
    render_expense_list(tracker, state)

    st.markdown("---")
    st.caption("Gestor Financeiro Pessoal. Simplificando suas finanças.")


def render_input_section(tracker: ExpenseTracker, state: TrackerState):
    """Free-text input for expenses and commands."""
    st.subheader("Adicionar Despesa ou Consultar")
    st.caption('Ex: "Lanche R$30 ontem", "Gasolina 120 dia 15/07/2024", "resumo do mês"')

    with st.form("input_form", clear_on_submit=True):
        user_input = st.text_input(
            "Entrada de despesa ou comando",
            placeholder="Qual foi sua primeira despesa do mês?",
            disabled=not state.api_key_exists,
            label_visibility="collapsed",
        )
        submitted = st.form_submit_button(
            "Processar",
            type="primary",
            disabled=state.is_loading or not state.api_key_exists,
        )

    if not state.api_key_exists:
        st.error(
            "A chave da API do Gemini não está configurada. "
            "O processamento de IA está desabilitado."
        )

    if submitted:
        with st.spinner("Processando..."):
            notification = run_async(tracker.process_input(state, user_input))
        st.session_state.pending_notification = notification
        st.rerun()


def render_month_section(tracker: ExpenseTracker, state: TrackerState):
    """Month navigation plus the summary of the selected month."""
    st.markdown("---")
    st.subheader("Navegação Mensal")

    months = tracker.available_months()
    tracker.reconcile_selected_month(state)

    selected = st.radio(
        "Mês",
        options=months,
        index=months.index(state.selected_month),
        format_func=format_month_year,
        horizontal=True,
        label_visibility="collapsed",
    )
    if selected != state.selected_month:
        tracker.select_month(state, selected)
        st.rerun()

    label = format_month_year(state.selected_month)
    st.markdown(f"### Resumo de {label}")

    summary = tracker.monthly_summary(state)
    if summary is None:
        st.info(f"Nenhuma despesa registrada para {label}.")
        return

    st.metric("Total Gasto no Mês", format_currency(summary.grand_total))

    if summary.highest_spending:
        st.markdown(highest_spending_html(summary.highest_spending), unsafe_allow_html=True)

    st.markdown("#### Distribuição de Gastos")
    for row in tracker.chart(state):
        st.markdown(chart_row_html(row), unsafe_allow_html=True)


def render_expense_list(tracker: ExpenseTracker, state: TrackerState):
    """Read-only list of the selected month's expenses."""
    label = format_month_year(state.selected_month)
    st.markdown("---")
    st.subheader(f"Despesas de {label}")

    expenses = tracker.expenses_for_selected_month(state)
    if not expenses:
        st.info(f"Nenhuma despesa registrada para {label}.")
        return

    with st.container(height=400):
        for expense in expenses:
            st.markdown(expense_item_html(expense), unsafe_allow_html=True)


if __name__ == "__main__":
    main()
