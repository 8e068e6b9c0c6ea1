"""
AI Accountant Gateway

Server side of the analysis endpoint: builds the prompt for a request,
streams the model's answer and reframes it as SSE chunks.

BOUNDARIES:
- The gateway never stores anything and never touches the ledger.
- The model only sees the data sent with the request.
"""

from typing import AsyncIterator, Optional

import google.generativeai as genai
import structlog
from google.api_core import exceptions as google_exceptions

from comptara.ai.prompts import SYSTEM_PROMPT, AnalysisRequest, build_user_message
from comptara.ai.stream import format_sse_chunk, format_sse_done
from comptara.config import GeminiSettings, get_settings


logger = structlog.get_logger(__name__)

RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please try again later."
CREDITS_EXHAUSTED_MESSAGE = "Payment required. Please add credits to your workspace."


class GatewayError(Exception):
    """Failure to produce a stream, with the HTTP status to answer with."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def to_body(self) -> dict:
        return {"error": self.message}


def _map_error(error: Exception) -> GatewayError:
    code = getattr(error, "code", None)
    if code == 429:
        return GatewayError(429, RATE_LIMITED_MESSAGE)
    if code == 402:
        return GatewayError(402, CREDITS_EXHAUSTED_MESSAGE)
    return GatewayError(500, str(error) or "AI gateway error")


class AIAccountantGateway:
    """
    Streams accounting analyses from a Gemini model.

    A model object can be injected (anything with an async
    `generate_content_async(prompt, stream=True)`); otherwise one is
    built from the Gemini settings.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model=None,
    ):
        self._settings = settings or get_settings().gemini
        self._model = model or self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            system_instruction=SYSTEM_PROMPT,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            },
        )

    async def stream(self, request: AnalysisRequest) -> AsyncIterator[str]:
        """
        Yield SSE lines for the model's answer, then the terminator.

        Raises:
            GatewayError: 429 when rate limited, 402 when credits are
                exhausted, 500 for anything else
        """
        message = build_user_message(request)
        logger.info("ai_request", action=request.action.value, prompt_length=len(message))

        try:
            response = await self._model.generate_content_async(message, stream=True)
            async for chunk in response:
                try:
                    text = chunk.text
                except ValueError:
                    # Chunks without text parts (safety blocks, finish markers)
                    logger.warning("ai_chunk_without_text")
                    continue
                if text:
                    yield format_sse_chunk(text)
        except google_exceptions.GoogleAPICallError as e:
            logger.error("ai_gateway_error", status=getattr(e, "code", None), error=str(e))
            raise _map_error(e) from e
        except Exception as e:
            logger.error("ai_gateway_error", error=str(e))
            raise GatewayError(500, str(e) or "AI gateway error") from e

        yield format_sse_done()
