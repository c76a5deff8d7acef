"""
Unit Tests for the Chat Model Client

Mock-mode behaviour and message handling; no network access.
"""
from unittest.mock import Mock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from app.core.llm import ChatClient, LLMConfig, LLMResponse, message_text
from app.utils import LLMError


class TestChatClientMockMode:
    """Tests for ChatClient without an API key."""

    def test_init_without_api_key(self, offline_client):
        assert not offline_client.is_available
        assert offline_client.model_name == "mock"
        assert offline_client.chat_model is None

    def test_bind_tools_unavailable(self, offline_client):
        assert offline_client.bind_tools([]) is None

    def test_mock_response_generation(self, offline_client):
        response = offline_client.generate("恶寒 头痛")
        assert isinstance(response, LLMResponse)
        assert response.is_mock
        assert response.model == "mock"
        assert "MOCK RESPONSE" in response.text
        assert "就医" in response.text

    def test_stream_yields_single_chunk(self, offline_client):
        chunks = list(offline_client.stream("恶寒 头痛"))
        assert len(chunks) == 1
        assert chunks[0] == offline_client.generate("恶寒 头痛").text

    def test_stats(self, offline_client):
        stats = offline_client.get_stats()
        assert stats["is_available"] is False
        assert stats["request_count"] == 0
        assert stats["last_request"] is None

    def test_response_to_dict(self, offline_client):
        data = offline_client.generate("test").to_dict()
        assert data["is_mock"] is True
        assert data["finish_reason"] == "MOCK"


class TestChatClientWithModel:
    """Tests for ChatClient around a stubbed chat model."""

    @pytest.fixture
    def client(self, offline_client):
        model = Mock()
        model.invoke.return_value = AIMessage(
            content="风寒束表",
            usage_metadata={"input_tokens": 12, "output_tokens": 4, "total_tokens": 16},
        )
        offline_client._llm = model
        offline_client.config.model = "gemini-test"
        return offline_client

    def test_generate_uses_model(self, client):
        response = client.generate("恶寒", system_instruction="你是中医师")
        assert response.text == "风寒束表"
        assert not response.is_mock
        assert response.prompt_tokens == 12
        assert response.completion_tokens == 4
        assert client.get_stats()["request_count"] == 1

        sent = client.chat_model.invoke.call_args[0][0]
        assert isinstance(sent[0], SystemMessage)
        assert isinstance(sent[1], HumanMessage)

    def test_generate_falls_back_on_error(self, client):
        client.chat_model.invoke.side_effect = RuntimeError("quota exceeded")
        response = client.generate("恶寒")
        assert response.is_mock
        assert "quota exceeded" in response.text

    def test_stream_failure_raises(self, client):
        client.chat_model.stream.side_effect = RuntimeError("connection reset")
        with pytest.raises(LLMError) as exc_info:
            list(client.stream("恶寒"))
        assert exc_info.value.details["model"] == "gemini-test"

    def test_stream_skips_empty_chunks(self, client):
        client.chat_model.stream.return_value = iter([AIMessage(content="风寒"), AIMessage(content=""), AIMessage(content="束表")])
        assert list(client.stream("恶寒")) == ["风寒", "束表"]

    def test_model_name(self, client):
        assert client.is_available
        assert client.model_name == "gemini-test"


class TestConfig:

    def test_env_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("GOOGLE_API_KEY", "abc")
        monkeypatch.setenv("TCM_LLM_MODEL", "gemini-custom")
        config = LLMConfig()
        assert config.api_key == "abc"
        assert config.model == "gemini-custom"

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TCM_LLM_MODEL", raising=False)
        assert LLMConfig(api_key=None).model == "gemini-2.5-flash"


class TestMessageText:

    def test_string_content(self):
        assert message_text(AIMessage(content="hello")) == "hello"

    def test_list_content(self):
        message = AIMessage(content=[{"type": "text", "text": "风寒"}, "束表", {"type": "image_url"}])
        assert message_text(message) == "风寒束表"

    def test_plain_string(self):
        assert message_text("raw") == "raw"

    def test_client_offline_with_blank_key(self):
        assert not ChatClient(LLMConfig(api_key="")).is_available
