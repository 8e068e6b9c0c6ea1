"""
AI Analysis Client

Calls the hosted AI accountant endpoint and consumes its SSE stream.

The endpoint is authorized with the signed-in session's bearer token, or
the publishable key when no session token exists.
"""

import json
from decimal import Decimal
from typing import AsyncIterator, Optional

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from comptara.ai.prompts import AnalysisAction, AnalysisRequest
from comptara.ai.stream import StreamDone, parse_sse_line
from comptara.audit import AuditLogger
from comptara.config import AIClientSettings, get_settings
from comptara.models.ledger import EntryDraft
from comptara.sync.errors import NetworkUnavailableError
from comptara.sync.session import Session


logger = structlog.get_logger(__name__)

RATE_LIMITED_MESSAGE = "Request limit reached. Try again later."
CREDITS_EXHAUSTED_MESSAGE = "Insufficient AI credits."


class AIRequestError(Exception):
    """The endpoint answered with an error status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ExtractedEntry(BaseModel):
    """Accounting data pulled from a voice-to-entry answer."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    montant: Optional[Decimal] = None
    devise: Optional[str] = None
    categorie: Optional[str] = None
    tiers: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    tx_hash: Optional[str] = Field(default=None, alias="txHash")

    def to_entry_draft(self, default_currency: str = "HBAR") -> EntryDraft:
        """
        Journal entry draft for this extraction.

        The counterparty goes on the side named by `type`.
        """
        return EntryDraft(
            libelle=self.description or "New entry",
            debit=(self.tiers or "") if self.type == "debit" else "",
            credit=(self.tiers or "") if self.type == "credit" else "",
            montant=self.montant or Decimal("0"),
            devise=self.devise or default_currency,
            tx_hash=self.tx_hash or "",
            description=self.description,
            category=self.categorie,
        )


def extract_entry(text: str) -> Optional[ExtractedEntry]:
    """
    Find the JSON object in a model answer.

    Returns None when the answer holds no parsable object.
    """
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        return None
    try:
        data = json.loads(text[start:end])
        return ExtractedEntry.model_validate(data)
    except (ValueError, ValidationError) as e:
        logger.debug("entry_extraction_failed", error=str(e))
        return None


class AIAnalysisClient:
    """HTTP client for the AI accountant endpoint."""

    def __init__(
        self,
        session: Session,
        settings: Optional[AIClientSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._session = session
        self._settings = settings or get_settings().ai_client
        self._transport = transport
        self._audit_logger = audit_logger

    @property
    def endpoint(self) -> str:
        return f"{self._settings.functions_url}/{self._settings.function_name}"

    def get_auth_header(self) -> str:
        token = self._session.access_token or self._settings.publishable_key
        return f"Bearer {token}"

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": self.get_auth_header(),
        }

    async def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code < 400:
            return
        await response.aread()
        if response.status_code == 429:
            message = RATE_LIMITED_MESSAGE
        elif response.status_code == 402:
            message = CREDITS_EXHAUSTED_MESSAGE
        else:
            try:
                message = response.json().get("error") or "AI request failed"
            except (ValueError, AttributeError):
                message = "AI request failed"
        logger.warning("ai_request_failed", status=response.status_code, error=message)
        if self._audit_logger:
            await self._audit_logger.log_external_service_error(
                "ai_accountant", f"{response.status_code}: {message}"
            )
        raise AIRequestError(response.status_code, message)

    async def stream(self, request: AnalysisRequest) -> AsyncIterator[str]:
        """
        Yield content deltas as they arrive.

        Raises:
            AIRequestError: On an error status
            NetworkUnavailableError: When the endpoint cannot be reached
        """
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._settings.timeout_seconds,
            ) as client:
                async with client.stream(
                    "POST",
                    self.endpoint,
                    json=request.to_body(),
                    headers=self._headers(),
                ) as response:
                    await self._raise_for_status(response)
                    async for line in response.aiter_lines():
                        try:
                            content = parse_sse_line(line)
                        except StreamDone:
                            return
                        if content:
                            yield content
        except httpx.TransportError as e:
            logger.warning("ai_endpoint_unreachable", error=str(e))
            raise NetworkUnavailableError(str(e)) from e

    async def analyze(self, request: AnalysisRequest) -> str:
        """Full answer for a request."""
        logger.info("ai_analysis_requested", action=request.action.value)
        parts = [chunk async for chunk in self.stream(request)]
        return "".join(parts)

    async def chat(self, prompt: str, ledger_data: Optional[dict] = None) -> str:
        return await self.analyze(
            AnalysisRequest(action=AnalysisAction.CHAT, prompt=prompt, ledger_data=ledger_data)
        )

    async def audit(self, ledger_data: dict) -> str:
        return await self.analyze(
            AnalysisRequest(action=AnalysisAction.AUDIT, ledger_data=ledger_data)
        )

    async def analyze_file(self, file_data, prompt: Optional[str] = None) -> str:
        return await self.analyze(
            AnalysisRequest(action=AnalysisAction.ANALYZE_FILE, file_data=file_data, prompt=prompt)
        )

    async def voice_to_entry(self, transcription: str) -> Optional[ExtractedEntry]:
        """Extract a journal entry from a transcription; None if the answer has none."""
        answer = await self.analyze(
            AnalysisRequest(action=AnalysisAction.VOICE_TO_ENTRY, transcription=transcription)
        )
        return extract_entry(answer)
