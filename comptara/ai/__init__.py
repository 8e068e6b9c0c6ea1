"""AI accountant boundary: prompts, streaming gateway, client and ledger metrics."""

from comptara.ai.client import AIAnalysisClient, AIRequestError, ExtractedEntry, extract_entry
from comptara.ai.gateway import AIAccountantGateway, GatewayError
from comptara.ai.ledger import LedgerMetric, MetricStatus, build_ledger_payload, calculate_metrics
from comptara.ai.prompts import SYSTEM_PROMPT, AnalysisAction, AnalysisRequest, build_user_message
from comptara.ai.stream import StreamDone, format_sse_chunk, iter_stream_content, parse_sse_line

__all__ = [
    "AIAccountantGateway",
    "AIAnalysisClient",
    "AIRequestError",
    "AnalysisAction",
    "AnalysisRequest",
    "ExtractedEntry",
    "GatewayError",
    "LedgerMetric",
    "MetricStatus",
    "SYSTEM_PROMPT",
    "StreamDone",
    "build_ledger_payload",
    "build_user_message",
    "calculate_metrics",
    "extract_entry",
    "format_sse_chunk",
    "iter_stream_content",
    "parse_sse_line",
]
