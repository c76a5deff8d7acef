"""
TCM Consultation Agent: Tools
=============================
The `tcm_insight` tool exposed to the chat model.  It wraps the
deterministic pattern analyzer; the model decides when to call it and
weaves the result into its own answer.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field

from agent.config import INSIGHT_TOOL_NAME
from app.core.tcm import TcmIntake, analyze_presentation


class TcmInsightInput(BaseModel):
    """Arguments of the tcm_insight tool."""
    key_symptoms: str = Field(..., description="Primary symptoms and their progression")
    tongue: Optional[str] = Field(None, description="Tongue body or coating observations")
    pulse: Optional[str] = Field(None, description="Pulse qualities if available")
    constitution: Optional[str] = Field(None, description="Known constitution or chronic tendencies")
    lifestyle: Optional[str] = Field(None, description="Sleep, diet, stress, and work patterns")
    duration: Optional[str] = Field(None, description="Symptom duration or triggers")


def tcm_insight(
    key_symptoms: str,
    tongue: Optional[str] = None,
    pulse: Optional[str] = None,
    constitution: Optional[str] = None,
    lifestyle: Optional[str] = None,
    duration: Optional[str] = None,
) -> Dict[str, Any]:
    """Analyze a patient presentation and return the camelCase insight dict."""
    intake = TcmIntake(
        key_symptoms=key_symptoms,
        tongue=tongue,
        pulse=pulse,
        constitution=constitution,
        lifestyle=lifestyle,
        duration=duration,
    )
    return analyze_presentation(intake).to_dict()


tcm_insight_tool = StructuredTool.from_function(
    func=tcm_insight,
    name=INSIGHT_TOOL_NAME,
    description=(
        "Analyze patient presentation to surface likely TCM patterns, "
        "red flags, and care focuses."
    ),
    args_schema=TcmInsightInput,
)

TOOLS = {tcm_insight_tool.name: tcm_insight_tool}


def run_tool(name: str, args: Dict[str, Any]) -> str:
    """
    Execute a registered tool and serialise its result for a ToolMessage.

    Unknown tools and tool failures are reported back to the model as text
    so it can recover instead of aborting the run.
    """
    tool = TOOLS.get(name)
    if tool is None:
        return f"Error: unknown tool '{name}'. Available: {', '.join(TOOLS)}"
    try:
        result = tool.invoke(args)
    except Exception as e:
        return f"Error: {name} failed: {e}"
    return json.dumps(result, ensure_ascii=False)
