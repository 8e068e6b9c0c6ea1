"""
Prompt Assembly

The model is told to answer only from the ledger data it is given.
Each request action maps to one user message template; the system
prompt is shared.
"""

import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


SYSTEM_PROMPT = """You are the native AI agent of Comptara. You act as an expert accountant and Web3 auditor.

CAPABILITIES:
1. Voice-to-text: analyze audio transcriptions and extract structured data (JSON) including amount, currency, category, counterparty, and transaction hash when mentioned.

2. Real audit: you have access to the on-chain ledger data. Detect anomalies, double entries and cash-flow breaks. Base your answers only on the JSON/Excel data provided.

3. Spreadsheet analysis: receive structured files, compute solvency ratios and propose tax or burn-rate optimizations.

RULES:
- Always answer concisely and technically.
- Provide analyses based on real data, never simulations.
- For accounting entries, return structured JSON when asked.
- Detect anomalies: double entry, cash-flow breaks, inconsistencies.
- For financial analysis, compute: solvency ratio, burn-rate, tax optimizations."""

DEFAULT_CHAT_PROMPT = "Hello, how can I help you?"
DEFAULT_FILE_PROMPT = "Compute the solvency ratios and propose tax optimizations."


class AnalysisAction(str, Enum):
    CHAT = "chat"
    AUDIT = "audit"
    ANALYZE_FILE = "analyze-file"
    VOICE_TO_ENTRY = "voice-to-entry"


class AnalysisRequest(BaseModel):
    """Body of a request to the AI accountant endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    action: AnalysisAction = AnalysisAction.CHAT
    prompt: Optional[str] = None
    ledger_data: Optional[Any] = Field(default=None, alias="ledgerData")
    transcription: Optional[str] = None
    file_data: Optional[Any] = Field(default=None, alias="fileData")

    def to_body(self) -> dict:
        """JSON body in the endpoint's wire format, without unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _pretty(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def build_user_message(request: AnalysisRequest) -> str:
    """Build the user message for a request."""
    if request.action == AnalysisAction.VOICE_TO_ENTRY:
        return f"""Analyze this voice transcription and extract the accounting data as JSON:
Transcription: "{request.transcription or ''}"

Return a JSON object with: {{ montant, devise, categorie, tiers, description, type: "debit" | "credit", txHash (if mentioned) }}"""

    if request.action == AnalysisAction.AUDIT:
        return f"""Run a complete audit of this on-chain ledger:
{_pretty(request.ledger_data)}

Analyze:
1. Detect anomalies (double entries, inconsistencies)
2. Assess financial health
3. Identify potential cash-flow breaks
4. Propose optimizations"""

    if request.action == AnalysisAction.ANALYZE_FILE:
        return f"""Analyze this financial data:
{_pretty(request.file_data)}

{request.prompt or DEFAULT_FILE_PROMPT}"""

    message = request.prompt or DEFAULT_CHAT_PROMPT
    if request.ledger_data:
        message += f"\n\nContext - ledger data:\n{_pretty(request.ledger_data)}"
    return message
