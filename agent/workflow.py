"""
TCM Consultation Workflow
=========================
Two-step LangGraph workflow:

    structure-intake ──► provide-consultation ──► END

Step 1 is the rule-based intake normalizer; step 2 prompts the
consultation agent with the structured case.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from langgraph.graph import END, StateGraph

from agent.agent_graph import TcmConsultationAgent
from agent.config import AGENT_ID, CONSULTATION_STEP_ID, STRUCTURE_STEP_ID, WORKFLOW_ID
from agent.nodes import emit_status
from agent.state import WorkflowState
from app.core.intake import (
    PatientIntake,
    StructuredIntake,
    build_consultation_prompt,
    structure_intake,
)
from app.core.tcm import TcmIntake
from app.utils import AgentError, IntakeError, get_logger

logger = get_logger(__name__)


@dataclass
class WorkflowResult:
    consultation: str
    structured: StructuredIntake

    def to_dict(self) -> Dict[str, Any]:
        return {
            "consultation": self.consultation,
            "summary": self.structured.summary,
            "missingInfo": list(self.structured.missing_info),
            "lifestyleFlags": list(self.structured.lifestyle_flags),
            "riskIndicators": list(self.structured.risk_indicators),
        }


def to_insight_intake(case: PatientIntake) -> TcmIntake:
    """Fields of the patient intake the pattern analyzer understands."""
    return TcmIntake(
        key_symptoms=case.key_symptoms,
        duration=case.duration,
        tongue=case.tongue,
        pulse=case.pulse,
        lifestyle=case.lifestyle,
    )


def structure_intake_node(state: WorkflowState) -> dict:
    emit_status(STRUCTURE_STEP_ID, "Structuring intake")
    structured = structure_intake(state.get("intake"))
    logger.debug("Intake structured", extra={"step": STRUCTURE_STEP_ID})
    return {"structured": structured}


def make_consultation_node(agent: Optional[TcmConsultationAgent]):
    """Bind the provide-consultation step to the registered agent."""

    def provide_consultation_node(state: WorkflowState) -> dict:
        structured = state.get("structured")
        if structured is None:
            raise IntakeError("Structured intake not found", step=CONSULTATION_STEP_ID)
        if agent is None:
            raise AgentError("TCM consultation agent not registered", agent=AGENT_ID)

        emit_status(CONSULTATION_STEP_ID, "Generating consultation")
        # one-shot thread; nothing reads it after this step
        thread_id = f"workflow-{uuid.uuid4()}"
        try:
            run = agent.generate(
                build_consultation_prompt(structured),
                thread_id=thread_id,
                intake=to_insight_intake(structured.case),
                score=False,
            )
        finally:
            agent.forget(thread_id)
        return {"consultation": run.answer}

    return provide_consultation_node


def build_workflow(agent: Optional[TcmConsultationAgent]):
    graph = StateGraph(WorkflowState)
    graph.add_node(STRUCTURE_STEP_ID, structure_intake_node)
    graph.add_node(CONSULTATION_STEP_ID, make_consultation_node(agent))

    graph.set_entry_point(STRUCTURE_STEP_ID)
    graph.add_edge(STRUCTURE_STEP_ID, CONSULTATION_STEP_ID)
    graph.add_edge(CONSULTATION_STEP_ID, END)

    return graph.compile()


def run_consultation_workflow(
    intake: Optional[PatientIntake],
    agent: Optional[TcmConsultationAgent],
    workflow=None,
) -> WorkflowResult:
    """
    Run both steps for one patient intake.

    Raises:
        IntakeError: intake missing.
        AgentError: no agent registered, or the agent failed.
    """
    workflow = workflow or build_workflow(agent)
    result = workflow.invoke({"intake": intake})
    logger.info(f"Workflow [{WORKFLOW_ID}] complete", extra={"step": CONSULTATION_STEP_ID})
    return WorkflowResult(consultation=result["consultation"], structured=result["structured"])
