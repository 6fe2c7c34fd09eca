"""AI Agents package."""

from gestor_financeiro.agents.ai_agents import (
    ExpenseInterpreterAgent,
    InterpreterError,
    extract_json,
)

__all__ = [
    "ExpenseInterpreterAgent",
    "InterpreterError",
    "extract_json",
]
