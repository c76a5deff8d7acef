"""
API Request/Response Models
"""
from .consultation import (
    ChatRequest,
    ChatResponse,
    ConsultationResponse,
    HealthResponse,
    InsightResponse,
    PatientIntakeRequest,
    PatternResponse,
    ScoreResponse,
    ScorerInfo,
    TcmIntakeRequest,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ConsultationResponse",
    "HealthResponse",
    "InsightResponse",
    "PatientIntakeRequest",
    "PatternResponse",
    "ScoreResponse",
    "ScorerInfo",
    "TcmIntakeRequest",
]
