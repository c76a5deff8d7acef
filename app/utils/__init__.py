"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    ConsultationError,
    IntakeError,
    AgentError,
    LLMError,
    ScoringError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "ConsultationError",
    "IntakeError",
    "AgentError",
    "LLMError",
    "ScoringError",
]
