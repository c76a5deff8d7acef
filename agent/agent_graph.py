"""
TCM Consultation Agent: Graph
=============================
LangGraph state machine of the consultation agent:

    consult ──(tool calls?)──► tools ──► consult
       │
       └──(answer)──► END

`TcmConsultationAgent` wraps the compiled graph, keeps per-thread memory in
a LangGraph checkpointer, and grades every run with the registered scorers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.messages import BaseMessage, HumanMessage
from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph import END, StateGraph

from agent.config import AGENT_ID, AGENT_NAME, SCORER_SAMPLING_RATE
from agent.nodes import consult_node, route_after_consult, set_client, tools_node
from agent.state import AgentState
from app.core.llm import ChatClient
from app.core.scorers import (
    ScoreResult,
    ScorerBinding,
    ScoringRun,
    default_scorer_bindings,
    run_scorers,
)
from app.core.tcm import TcmIntake
from app.utils import AgentError, get_logger

logger = get_logger(__name__)


def build_graph(checkpointer=None):
    """Compile the consult/tools loop."""
    graph = StateGraph(AgentState)
    graph.add_node("consult", consult_node)
    graph.add_node("tools", tools_node)

    graph.set_entry_point("consult")
    graph.add_conditional_edges("consult", route_after_consult, {"tools": "tools", END: END})
    graph.add_edge("tools", "consult")

    return graph.compile(checkpointer=checkpointer)


@dataclass
class AgentRun:
    """Outcome of one agent turn."""
    query: str
    answer: str
    tool_calls: List[str] = field(default_factory=list)
    scores: List[ScoreResult] = field(default_factory=list)
    # Full thread history after this turn (not serialised)
    messages: List[BaseMessage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "answer": self.answer,
            "toolCalls": list(self.tool_calls),
            "scores": [s.to_dict() for s in self.scores],
        }


class TcmConsultationAgent:
    """
    The TCM consultation specialist.

    Conversation memory lives in the checkpointer, keyed by thread id; it is
    in-process only and lost on restart.
    """

    id = AGENT_ID
    name = AGENT_NAME

    def __init__(
        self,
        client: Optional[ChatClient] = None,
        scorers: Optional[Sequence[ScorerBinding]] = None,
        checkpointer=None,
    ):
        self.client = client or ChatClient()
        if scorers is None:
            scorers = default_scorer_bindings(self.client, SCORER_SAMPLING_RATE)
        self.scorers = list(scorers)
        self.checkpointer = checkpointer or MemorySaver()
        self.graph = build_graph(self.checkpointer)
        set_client(self.client)

    def generate(
        self,
        query: str,
        thread_id: str = "default",
        intake: Optional[TcmIntake] = None,
        score: bool = True,
    ) -> AgentRun:
        """
        Run one agent turn.

        Args:
            query: The user message.
            thread_id: Conversation id for memory.
            intake: Structured intake, used by the offline consultation.
            score: Grade the run with the registered scorers.

        Raises:
            AgentError: if the graph fails or produces no answer.
        """
        set_client(self.client)
        initial: Dict[str, Any] = {
            "messages": [HumanMessage(content=query)],
            "tool_calls": [],
            "tool_rounds": 0,
            "final_answer": "",
            "insight_intake": vars(intake).copy() if intake is not None else None,
        }
        try:
            result = self.graph.invoke(initial, config={"configurable": {"thread_id": thread_id}})
        except Exception as exc:
            logger.error(f"Agent [{self.id}] failed: {exc}", exc_info=True, extra={"thread_id": thread_id})
            raise AgentError(f"Consultation agent failed: {exc}", agent=self.id) from exc

        answer = result.get("final_answer", "")
        if not answer:
            raise AgentError("Consultation agent produced no answer", agent=self.id)

        run = AgentRun(
            query=query,
            answer=answer,
            tool_calls=list(result.get("tool_calls", [])),
            messages=list(result.get("messages", [])),
        )
        if score and self.scorers:
            run.scores = run_scorers(ScoringRun(query, answer, run.tool_calls), self.scorers)
            logger.info(
                f"Agent [{self.id}] scores: "
                + ", ".join(f"{s.scorer}={s.score:.2f}" for s in run.scores),
                extra={"thread_id": thread_id},
            )
        return run

    def forget(self, thread_id: str) -> None:
        """Drop the stored history of a thread."""
        self.checkpointer.delete_thread(thread_id)

    def scorer_names(self) -> List[str]:
        return [binding.scorer.name for binding in self.scorers]
