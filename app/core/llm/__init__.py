"""
LLM Module

Gemini chat model access for the consultation agent and the safety judge.
The LLM explains and advises; pattern ranking and red-flag detection stay
in the deterministic `app.core.tcm` layer.
"""
from .chat_client import ChatClient, LLMConfig, LLMResponse, message_text

__all__ = [
    "ChatClient",
    "LLMConfig",
    "LLMResponse",
    "message_text",
]
