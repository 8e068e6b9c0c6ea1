"""Tests for prompt assembly."""

from comptara.ai.prompts import (
    DEFAULT_CHAT_PROMPT,
    DEFAULT_FILE_PROMPT,
    AnalysisAction,
    AnalysisRequest,
    build_user_message,
)


class TestAnalysisRequest:

    def test_defaults_to_chat(self):
        assert AnalysisRequest().action == AnalysisAction.CHAT

    def test_wire_body_uses_camel_case(self):
        request = AnalysisRequest(action="audit", ledger_data={"entries": []})
        assert request.to_body() == {"action": "audit", "ledgerData": {"entries": []}}

    def test_accepts_wire_names(self):
        request = AnalysisRequest.model_validate(
            {"action": "analyze-file", "fileData": [{"a": 1}]}
        )
        assert request.file_data == [{"a": 1}]


class TestBuildUserMessage:

    def test_voice_to_entry_mentions_transcription(self):
        message = build_user_message(
            AnalysisRequest(action="voice-to-entry", transcription="paid 20 HBAR to Bob")
        )
        assert '"paid 20 HBAR to Bob"' in message
        assert "txHash" in message

    def test_audit_includes_pretty_ledger(self):
        message = build_user_message(
            AnalysisRequest(action="audit", ledger_data={"entries": [{"id": "1"}]})
        )
        assert '"id": "1"' in message
        assert "cash-flow" in message

    def test_analyze_file_default_instruction(self):
        message = build_user_message(AnalysisRequest(action="analyze-file", file_data={"x": 1}))
        assert message.endswith(DEFAULT_FILE_PROMPT)

    def test_analyze_file_custom_prompt(self):
        message = build_user_message(
            AnalysisRequest(action="analyze-file", file_data={"x": 1}, prompt="Burn rate?")
        )
        assert message.endswith("Burn rate?")

    def test_chat_default_greeting(self):
        assert build_user_message(AnalysisRequest()) == DEFAULT_CHAT_PROMPT

    def test_chat_with_ledger_context(self):
        message = build_user_message(
            AnalysisRequest(prompt="Any anomalies?", ledger_data={"entries": []})
        )
        assert message.startswith("Any anomalies?")
        assert "Context - ledger data" in message
