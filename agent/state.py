"""
TCM Consultation Agent: Graph State
===================================
State schemas shared by the agent graph and the consultation workflow.
"""

from typing import Annotated, Dict, List, Optional, TypedDict

from langchain_core.messages import BaseMessage
from langgraph.graph.message import add_messages

from app.core.intake import PatientIntake, StructuredIntake


class AgentState(TypedDict, total=False):
    """Conversation state of the consultation agent (checkpointed per thread)."""
    messages: Annotated[List[BaseMessage], add_messages]
    tool_calls: List[str]          # names of tools executed this run, in order
    tool_rounds: int
    final_answer: str
    # Structured intake fields for the offline consultation, when the caller
    # has them (plain dict so the checkpointer can serialise it)
    insight_intake: Optional[Dict[str, Optional[str]]]


class WorkflowState(TypedDict, total=False):
    """State threaded through structure-intake → provide-consultation."""
    intake: Optional[PatientIntake]
    structured: Optional[StructuredIntake]
    consultation: str
