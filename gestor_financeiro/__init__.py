"""
Gestor Financeiro Pessoal - Source Package

A personal expense tracker driven by free-form Portuguese text.
The user writes "Lanche R$30 ontem"; Gemini interprets it; the
app stores the expense and shows a monthly summary.

DESIGN PRINCIPLES:
1. AI interprets → Validator checks → Store persists
2. Invalid data never reaches the store
3. Summaries are always recomputed from the stored records
4. A missing API key disables AI, never the app
"""

__version__ = "1.0.0"
__author__ = "Gestor Financeiro Team"
