"""
Custom Exception Hierarchy

Error types raised by the consultation workflow, the agent and the scorers.
The CORS resolver and the pattern scorer are total and never raise.

Every error renders the same JSON body through ``to_dict``; the HTTP layer
uses ``status_code`` for the response status.
"""
from typing import Optional, Dict, Any


class ConsultationError(Exception):
    """Base exception for all consultation service errors."""

    code: str = "UNKNOWN_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class _KeyedError(ConsultationError):
    """Error that records where it happened under ``details[context_key]``."""

    context_key: str = "source"

    def __init__(self, message: str, where: str = "unknown", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details={self.context_key: where, **(details or {})})
        setattr(self, self.context_key, where)


class IntakeError(_KeyedError):
    """Patient intake missing or unusable."""

    code = "INTAKE_ERROR"
    status_code = 422
    context_key = "step"

    def __init__(self, message: str, step: str = "unknown", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, step, details)


class AgentError(_KeyedError):
    """Consultation agent not registered or failed to produce an answer."""

    code = "AGENT_ERROR"
    status_code = 503
    context_key = "agent"

    def __init__(self, message: str, agent: str = "unknown", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, agent, details)


class LLMError(_KeyedError):
    """Gemini call failed mid-stream."""

    code = "LLM_ERROR"
    status_code = 502
    context_key = "model"

    def __init__(self, message: str, model: str = "unknown", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, model, details)


class ScoringError(_KeyedError):
    """Scorer misconfigured (e.g. sampling rate outside [0, 1])."""

    code = "SCORING_ERROR"
    context_key = "scorer"

    def __init__(self, message: str, scorer: str = "unknown", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, scorer, details)
