"""
API Models

Request/response schemas of the consultation API.  Field names are
snake_case in Python and camelCase on the wire.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.intake import PatientIntake
from app.core.tcm import TcmIntake


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- Requests ----

class TcmIntakeRequest(CamelModel):
    """Input of the tcm-insight tool."""
    key_symptoms: str = Field(..., min_length=1, description="Primary symptoms and their progression")
    tongue: Optional[str] = Field(None, description="Tongue body or coating observations")
    pulse: Optional[str] = Field(None, description="Pulse qualities if available")
    constitution: Optional[str] = Field(None, description="Known constitution or chronic tendencies")
    lifestyle: Optional[str] = Field(None, description="Sleep, diet, stress, and work patterns")
    duration: Optional[str] = Field(None, description="Symptom duration or triggers")

    def to_intake(self) -> TcmIntake:
        return TcmIntake(**self.model_dump())


class PatientIntakeRequest(CamelModel):
    """Input of the consultation workflow."""
    name: Optional[str] = None
    age: Optional[int] = Field(None, ge=0, le=120)
    sex: Optional[Literal["male", "female", "other"]] = None
    key_symptoms: str = Field(..., min_length=1, description="Primary complaints, symptom quality, affected regions")
    onset: Optional[str] = Field(None, description="Onset time or triggers")
    duration: Optional[str] = None
    tongue: Optional[str] = None
    pulse: Optional[str] = None
    medical_history: Optional[str] = None
    medications: Optional[str] = None
    lifestyle: Optional[str] = Field(None, description="Diet, sleep, work, and stress details")
    emotional_state: Optional[str] = None

    def to_intake(self) -> PatientIntake:
        return PatientIntake(**self.model_dump())


class ChatRequest(CamelModel):
    """Message for the consultation agent."""
    query: str = Field(..., min_length=1)
    thread_id: Optional[str] = "GUEST"


# ---- Responses ----

class PatternResponse(CamelModel):
    id: str
    name: str
    description: str
    rationale: str
    classical_formula: str
    key_herbs: List[str]
    acupoints: List[str]
    lifestyle: List[str]
    score: int


class InsightResponse(CamelModel):
    primary_pattern: PatternResponse
    secondary_patterns: List[PatternResponse] = Field(
        default_factory=list, description="Other relevant patterns to rule in/out"
    )
    red_flags: List[str]
    intake_summary: str
    suggested_focus: List[str]


class ConsultationResponse(CamelModel):
    consultation: str
    summary: str
    missing_info: List[str]
    lifestyle_flags: List[str]
    risk_indicators: List[str]


class ScoreResponse(CamelModel):
    scorer: str
    score: float
    reason: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ChatResponse(CamelModel):
    answer: str
    tool_calls: List[str]
    scores: List[ScoreResponse]


class ScorerInfo(CamelModel):
    name: str
    description: str
    sampling_rate: float


class HealthResponse(CamelModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    llm_available: bool
    model: str
