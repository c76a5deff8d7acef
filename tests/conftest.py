"""
Pytest Configuration and Fixtures

Shared fixtures for the TCM consultation service tests.
"""
import uuid
from pathlib import Path
import sys
from unittest.mock import Mock

import pytest
from langchain_core.messages import AIMessage

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.intake import PatientIntake
from app.core.llm import ChatClient, LLMConfig
from app.core.tcm import TcmIntake


@pytest.fixture
def offline_client() -> ChatClient:
    """Chat client without an API key (mock mode)."""
    return ChatClient(LLMConfig(api_key=None))


@pytest.fixture
def wind_cold_intake() -> TcmIntake:
    return TcmIntake(key_symptoms="恶寒 头痛 无汗", duration="两天")


@pytest.fixture
def patient_intake() -> PatientIntake:
    return PatientIntake(
        key_symptoms="恶寒 头痛 无汗，鼻塞流清涕",
        name="张三",
        age=34,
        sex="male",
        onset="受凉后",
        duration="两天",
        lifestyle="经常熬夜，压力大",
    )


@pytest.fixture
def tool_calling_client():
    """
    Chat client double whose model first requests tcm_insight, then answers.

    `client.llm.invoke` records the message lists the agent sent.
    """
    llm = Mock()
    llm.invoke.side_effect = [
        AIMessage(
            content="",
            tool_calls=[{
                "name": "tcm_insight",
                "args": {"key_symptoms": "恶寒 头痛 无汗"},
                "id": "call_1",
            }],
        ),
        AIMessage(content="辨证属风寒束表，可参考荆防败毒散。如症状加重请及时就医。"),
    ]

    client = Mock(spec=ChatClient)
    client.is_available = True
    client.model_name = "fake-gemini"
    client.bind_tools.return_value = llm
    client.chat_model = llm
    client.llm = llm
    return client


@pytest.fixture
def thread_id() -> str:
    """Generate a fresh conversation thread id."""
    return f"test-{uuid.uuid4()}"
