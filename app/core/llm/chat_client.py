"""
Chat Model Client

Wrapper around LangChain's Gemini chat model used by the consultation agent
and the safety judge.  Runs in mock mode when no API key is configured, so
the service (and its tests) work offline.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence
import os
from datetime import datetime

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from app.utils import LLMError, get_logger

logger = get_logger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
MOCK_MODEL = "mock"


def _api_key_from_env() -> Optional[str]:
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")


@dataclass
class LLMConfig:
    """Configuration for the chat model."""
    api_key: Optional[str] = field(default_factory=_api_key_from_env)
    model: str = field(default_factory=lambda: os.getenv("TCM_LLM_MODEL", DEFAULT_MODEL))
    temperature: float = 0.5
    max_output_tokens: int = 2048
    request_timeout_seconds: int = 30
    max_retries: int = 2


@dataclass
class LLMResponse:
    """Structured response from the chat model."""
    text: str
    model: str
    finish_reason: str = "STOP"
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0
    is_mock: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "model": self.model,
            "finish_reason": self.finish_reason,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "latency_ms": round(self.latency_ms, 2),
            "is_mock": self.is_mock
        }


def message_text(message: Any) -> str:
    """
    Plain text of a LangChain message or chunk.

    Gemini may return content as a list of parts; only text parts are kept.
    """
    content = message.content if hasattr(message, "content") else message
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


class ChatClient:
    """
    Client for the consultation chat model.

    Generation failures are logged and answered with a mock response rather
    than propagated, so a provider outage degrades the consultation instead
    of failing the request.
    """

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._llm: Optional[ChatGoogleGenerativeAI] = None
        self._request_count = 0
        self._last_request_time: Optional[datetime] = None
        self._initialize()

    def _initialize(self):
        if not self.config.api_key:
            logger.warning("No Gemini API key provided - mock mode enabled")
            return

        try:
            self._llm = ChatGoogleGenerativeAI(
                model=self.config.model,
                temperature=self.config.temperature,
                max_output_tokens=self.config.max_output_tokens,
                timeout=self.config.request_timeout_seconds,
                max_retries=self.config.max_retries,
                google_api_key=self.config.api_key,
            )
            logger.info(f"Gemini chat model initialized: {self.config.model}")
        except Exception as e:
            logger.error(f"Failed to initialize Gemini chat model: {e}")
            self._llm = None

    @property
    def is_available(self) -> bool:
        return self._llm is not None

    @property
    def model_name(self) -> str:
        return self.config.model if self.is_available else MOCK_MODEL

    @property
    def chat_model(self) -> Optional[ChatGoogleGenerativeAI]:
        return self._llm

    def bind_tools(self, tools: Sequence[Any]):
        """Tool-calling runnable, or None in mock mode."""
        if not self.is_available:
            return None
        return self._llm.bind_tools(list(tools))

    @staticmethod
    def _to_messages(
        prompt: Any,
        system_instruction: Optional[str] = None,
    ) -> List[BaseMessage]:
        messages: List[BaseMessage] = []
        if system_instruction:
            messages.append(SystemMessage(content=system_instruction))
        if isinstance(prompt, str):
            messages.append(HumanMessage(content=prompt))
        else:
            messages.extend(prompt)
        return messages

    def generate(
        self,
        prompt: Any,
        system_instruction: Optional[str] = None,
    ) -> LLMResponse:
        """
        Generate a response.

        Args:
            prompt: A user prompt string, or a list of LangChain messages
            system_instruction: Optional system message prepended to the prompt
        """
        if not self.is_available:
            return self._mock_response(prompt)

        start_time = datetime.now()
        try:
            response = self._llm.invoke(self._to_messages(prompt, system_instruction))
        except Exception as e:
            logger.error(f"Gemini generation failed: {e}")
            return self._mock_response(prompt, error=str(e))

        latency = (datetime.now() - start_time).total_seconds() * 1000
        usage = getattr(response, "usage_metadata", None) or {}

        self._request_count += 1
        self._last_request_time = datetime.now()

        return LLMResponse(
            text=message_text(response),
            model=self.config.model,
            prompt_tokens=usage.get("input_tokens", 0),
            completion_tokens=usage.get("output_tokens", 0),
            latency_ms=latency,
        )

    def stream(
        self,
        prompt: Any,
        system_instruction: Optional[str] = None,
    ) -> Iterator[str]:
        """
        Yield text chunks as they arrive; mock mode yields a single chunk.

        Raises:
            LLMError: if the provider fails mid-stream (no mock fallback once
                chunks may have been delivered).
        """
        if not self.is_available:
            yield self._mock_response(prompt).text
            return

        self._request_count += 1
        self._last_request_time = datetime.now()
        try:
            for chunk in self._llm.stream(self._to_messages(prompt, system_instruction)):
                text = message_text(chunk)
                if text:
                    yield text
        except Exception as e:
            logger.error(f"Gemini streaming failed: {e}")
            raise LLMError(f"Gemini streaming failed: {e}", model=self.config.model) from e

    def _mock_response(self, prompt: Any, error: Optional[str] = None) -> LLMResponse:
        """Deterministic stand-in used when Gemini is unavailable."""
        if error:
            mock_text = f"[MOCK RESPONSE - Error: {error}]\n\n"
        else:
            mock_text = "[MOCK RESPONSE - Gemini unavailable]\n\n"

        mock_text += (
            "以上内容仅供参考，不能替代执业中医师的面诊。"
            "如症状加重或出现危险征象，请及时就医。"
        )

        prompt_text = prompt if isinstance(prompt, str) else " ".join(message_text(m) for m in prompt)
        return LLMResponse(
            text=mock_text,
            model=MOCK_MODEL,
            finish_reason="MOCK",
            prompt_tokens=len(prompt_text.split()),
            completion_tokens=len(mock_text.split()),
            latency_ms=0.0,
            is_mock=True
        )

    def get_stats(self) -> Dict[str, Any]:
        return {
            "is_available": self.is_available,
            "model": self.model_name,
            "request_count": self._request_count,
            "last_request": self._last_request_time.isoformat() if self._last_request_time else None
        }


