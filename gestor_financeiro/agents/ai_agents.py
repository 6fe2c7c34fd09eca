"""
AI Agents for Gestor Financeiro

DESIGN DECISION: Gemini is used for three narrow jobs:
1. Classify what the user's text is (expense, summary, category total)
2. Extract value / description / date from an expense text
3. Pick one of the nine categories for a description

CRITICAL BOUNDARIES:
- The LLM NEVER computes totals; the aggregator does
- The LLM NEVER writes to the store; its output is validated first
- A failed or unparsable answer becomes "unknown" / None, never an exception

The LLM is a TRANSLATOR, not an ORACLE.
"""

import json
import re
from datetime import date
from typing import Any, Optional

import google.generativeai as genai
import structlog
from pydantic import ValidationError

from gestor_financeiro.audit import AuditLogger
from gestor_financeiro.config import GeminiSettings, get_settings
from gestor_financeiro.dates import DEFAULT_TIMEZONE, today_in
from gestor_financeiro.models.categories import CATEGORY_NAMES
from gestor_financeiro.models.expense import (
    CategorizedData,
    ParsedExpenseData,
    ParsedQuery,
    QueryType,
)

logger = structlog.get_logger(__name__)

WEEKDAYS_PT = (
    "segunda-feira", "terça-feira", "quarta-feira", "quinta-feira",
    "sexta-feira", "sábado", "domingo",
)

_FENCE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


class InterpreterError(Exception):
    """Gemini's answer could not be used."""
    pass


def extract_json(text: Optional[str]) -> dict[str, Any]:
    """
    Pull the JSON object out of a model answer.

    Accepts bare JSON, JSON wrapped in a markdown code fence, or JSON
    surrounded by prose.

    Raises:
        InterpreterError: If no JSON object can be found
    """
    if not text:
        raise InterpreterError("Empty response")

    text = text.strip()
    match = _FENCE.match(text)
    if match:
        text = match.group(1).strip()

    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise InterpreterError(f"No JSON object in response: {text[:100]!r}")

    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError as e:
        raise InterpreterError(f"Malformed JSON in response: {e}") from e

    if not isinstance(data, dict):
        raise InterpreterError("Response JSON is not an object")
    return data


class ExpenseInterpreterAgent:
    """
    Gemini-backed interpreter for the tracker's free-text input.

    RESPONSIBILITIES:
    - Classify the intent of an input
    - Extract expense details, resolving relative dates ("ontem")
    - Suggest a category for a description

    BOUNDARIES:
    - NEVER persists data
    - NEVER raises on a bad answer; callers get None / DESCONHECIDO
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        timezone: str = DEFAULT_TIMEZONE,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Raises:
            pydantic.ValidationError: If no API key is configured
        """
        self._settings = settings or get_settings().gemini
        self._timezone = timezone
        self._audit_logger = audit_logger
        self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
                "response_mime_type": "application/json",
            }
        )

    async def _call_model(self, prompt: str) -> str:
        """Raw text answer for one prompt."""
        response = await self._model.generate_content_async(prompt)
        return response.text

    async def _generate_json(self, prompt: str, operation: str) -> Optional[dict[str, Any]]:
        """
        One round trip to Gemini.

        Returns the parsed JSON object, or None if the call or the
        parsing failed. Failures are logged, not raised.
        """
        try:
            return extract_json(await self._call_model(prompt))
        except InterpreterError as e:
            logger.warning("gemini_unparsable_response", operation=operation, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_external_service_error("gemini", operation, str(e))
        except Exception as e:
            # Transport, quota, safety blocks: all end the request the same way
            logger.error("gemini_call_failed", operation=operation, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_external_service_error("gemini", operation, str(e))
        return None

    def _today_line(self, today: Optional[date] = None) -> str:
        today = today or today_in(self._timezone)
        return f"Hoje é {WEEKDAYS_PT[today.weekday()]}, {today.isoformat()} (horário de Brasília)."

    async def interpret_intent(self, text: str) -> ParsedQuery:
        """
        Classify the user's input.

        Returns DESCONHECIDO when the answer is missing or unusable.
        """
        prompt = f"""Você é o assistente de um app de controle de despesas pessoais.

Classifique a entrada do usuário em um destes tipos:
- REGISTRO_DESPESA: o usuário está informando um gasto (ex.: "Lanche R$30 ontem", "Gasolina 120 dia 15/07/2024")
- RESUMO_GERAL: o usuário pede o resumo dos gastos do mês (ex.: "resumo do mês", "como estão meus gastos?")
- TOTAL_CATEGORIA: o usuário pergunta quanto gastou em uma categoria (ex.: "quanto gastei com alimentação?")
- DESCONHECIDO: qualquer outra coisa

Categorias válidas: {', '.join(CATEGORY_NAMES)}

Entrada: "{text}"

Responda APENAS com um objeto JSON neste formato:
{{"tipoQuery": "TIPO", "categoria": "Categoria ou null"}}

Inclua "categoria" somente para TOTAL_CATEGORIA, usando exatamente um dos nomes válidos."""

        data = await self._generate_json(prompt, "interpret_intent")
        if data is None:
            return ParsedQuery(tipo_query=QueryType.DESCONHECIDO)

        try:
            return ParsedQuery.model_validate(data)
        except ValidationError as e:
            logger.warning("gemini_invalid_intent", error=str(e))
            return ParsedQuery(tipo_query=QueryType.DESCONHECIDO)

    async def parse_expense(
        self,
        text: str,
        today: Optional[date] = None,
    ) -> Optional[ParsedExpenseData]:
        """
        Extract value, description and date from an expense text.

        Relative dates are resolved against today in the configured
        timezone. Returns None when extraction failed entirely; fields
        the model couldn't find come back as None.
        """
        prompt = f"""Extraia os dados de uma despesa a partir do texto do usuário.

{self._today_line(today)}

Texto: "{text}"

Regras:
- "valor": número positivo em reais, com ponto decimal (ex.: 30.5). Sem "R$".
- "descricao": descrição curta do gasto (ex.: "Lanche").
- "data": data do gasto no formato AAAA-MM-DD. Resolva datas relativas
  ("hoje", "ontem", "anteontem", "dia 15", "sexta passada") a partir da data de hoje.
  Se nenhuma data for mencionada, use a data de hoje.
- Use null para o que não for possível identificar.

Responda APENAS com um objeto JSON:
{{"valor": 30.0, "descricao": "Lanche", "data": "AAAA-MM-DD"}}"""

        data = await self._generate_json(prompt, "parse_expense")
        if data is None:
            return None

        try:
            return ParsedExpenseData.model_validate(data)
        except ValidationError as e:
            logger.warning("gemini_invalid_expense", error=str(e))
            return None

    async def categorize(self, description: str) -> Optional[CategorizedData]:
        """
        Pick a category for an expense description.

        Returns None on failure; an unrecognized label comes back as
        CategorizedData(categoria=None). Callers default to Outros.
        """
        prompt = f"""Classifique a despesa abaixo em UMA das categorias:
{', '.join(CATEGORY_NAMES)}

Despesa: "{description}"

Exemplos: "Lanche" → Alimentação; "Uber" → Transporte; "Cinema" → Lazer;
"Aluguel" → Contas Fixas; "Farmácia" → Saúde; "Tesouro Direto" → Investimentos;
"Curso de inglês" → Educação; "Camiseta" → Compras.

Na dúvida, use "Outros".

Responda APENAS com um objeto JSON:
{{"categoria": "Nome da categoria"}}"""

        data = await self._generate_json(prompt, "categorize")
        if data is None:
            return None

        try:
            return CategorizedData.model_validate(data)
        except ValidationError as e:
            logger.warning("gemini_invalid_category", error=str(e))
            return None
