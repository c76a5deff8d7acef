"""
Intake Normalizer

First workflow step: turns a raw patient intake into a structured case with
a summary line, the diagnostic information still missing, lifestyle flags
and risk indicators.  Rule-based, no LLM involved.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from app.utils import IntakeError, get_logger

logger = get_logger(__name__)

STEP_ID = "structure-intake"
SUMMARY_DELIMITER = "；"


@dataclass
class PatientIntake:
    """Intake form submitted to the consultation workflow."""
    key_symptoms: str
    name: Optional[str] = None
    age: Optional[int] = None
    sex: Optional[str] = None             # "male" | "female" | "other"
    onset: Optional[str] = None
    duration: Optional[str] = None
    tongue: Optional[str] = None
    pulse: Optional[str] = None
    medical_history: Optional[str] = None
    medications: Optional[str] = None
    lifestyle: Optional[str] = None
    emotional_state: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StructuredIntake:
    """Output of the structure-intake step."""
    case: PatientIntake
    summary: str
    missing_info: List[str] = field(default_factory=list)
    lifestyle_flags: List[str] = field(default_factory=list)
    risk_indicators: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "case": self.case.to_dict(),
            "summary": self.summary,
            "missingInfo": list(self.missing_info),
            "lifestyleFlags": list(self.lifestyle_flags),
            "riskIndicators": list(self.risk_indicators),
        }


# ── Rule tables (evaluated in order) ─────────────────────────────────────────

# (intake attribute, label reported when it is missing)
_REQUIRED_CLUES: Tuple[Tuple[str, str], ...] = (
    ("tongue", "舌质/舌苔"),
    ("pulse", "脉象"),
    ("duration", "病程时长"),
    ("medical_history", "重要既往史"),
)

# (triggers, flag): matched case-insensitively against the lifestyle text
_LIFESTYLE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("late", "熬夜"), "作息不规律"),
    (("cold", "生冷"), "偏好生冷或寒凉饮食"),
    (("spicy", "辛辣"), "辛辣/油腻摄入多"),
    (("stress", "压力"), "情志压力偏大"),
    (("sedentary", "久坐"), "久坐少动"),
)

# (triggers, indicator): matched against the key symptoms
_RISK_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("chest pain", "胸痛"), "胸痛/胸闷"),
    (("faint", "晕厥"), "晕厥或意识不清"),
    (("difficulty breathing", "呼吸困难"), "呼吸困难"),
    (("high fever", "高热"), "高热不退"),
)

# (intake attribute, label) for the summary, after the patient name
_SUMMARY_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("age", "年龄"),
    ("sex", "性别"),
    ("key_symptoms", "主诉"),
    ("onset", "起病"),
    ("duration", "病程"),
    ("tongue", "舌象"),
    ("pulse", "脉象"),
    ("medical_history", "既往史"),
    ("medications", "用药/过敏"),
    ("lifestyle", "生活方式"),
    ("emotional_state", "情绪"),
)


def _match_rules(text: str, rules) -> List[str]:
    lowered = text.lower()
    return [label for triggers, label in rules if any(t in lowered for t in triggers)]


def find_missing_info(intake: PatientIntake) -> List[str]:
    return [label for attr, label in _REQUIRED_CLUES if not getattr(intake, attr)]


def extract_lifestyle_flags(lifestyle: Optional[str]) -> List[str]:
    if not lifestyle:
        return []
    return _match_rules(lifestyle, _LIFESTYLE_RULES)


def detect_risk_indicators(key_symptoms: Optional[str]) -> List[str]:
    if not key_symptoms:
        return []
    return _match_rules(key_symptoms, _RISK_RULES)


def summarize_intake(intake: PatientIntake) -> str:
    """Labelled one-line case summary; absent fields are skipped."""
    parts = [f"患者：{intake.name}" if intake.name else "患者：未提供姓名"]
    for attr, label in _SUMMARY_FIELDS:
        value = getattr(intake, attr)
        # age 0 is a valid value
        if value is None or value == "":
            continue
        parts.append(f"{label}：{value}")
    return SUMMARY_DELIMITER.join(parts)


def structure_intake(intake: Optional[PatientIntake]) -> StructuredIntake:
    """
    Normalize a patient intake.

    Raises:
        IntakeError: if no intake was provided.
    """
    if intake is None:
        raise IntakeError("Patient intake data not provided", step=STEP_ID)

    structured = StructuredIntake(
        case=intake,
        summary=summarize_intake(intake),
        missing_info=find_missing_info(intake),
        lifestyle_flags=extract_lifestyle_flags(intake.lifestyle),
        risk_indicators=detect_risk_indicators(intake.key_symptoms),
    )
    logger.info(
        f"Intake structured: {len(structured.missing_info)} missing, "
        f"{len(structured.risk_indicators)} risk indicator(s)"
    )
    return structured
