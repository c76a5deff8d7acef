"""
TCM Consultation Agent: Graph Nodes
===================================
Node functions for the LangGraph agent:
  1. consult_node: the chat model answers, or asks for tcm_insight
  2. tools_node: executes the requested tool calls
Offline (no API key) the consult node runs tcm_insight itself and renders a
templated consultation from the result.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional

import json
import uuid
from contextvars import ContextVar

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage
from langgraph.graph import END

from agent.config import (
    DISCLAIMER,
    INSIGHT_TOOL_NAME,
    MAX_TOOL_ROUNDS,
    SYSTEM_PROMPT,
    URGENT_CARE_NOTICE,
)
from agent.state import AgentState
from agent.tools import TOOLS, run_tool, tcm_insight
from app.core.llm import ChatClient, message_text
from app.utils import get_logger

logger = get_logger(__name__)


# ── Shared client reference (set at agent-build time) ─────────────────
_client: Optional[ChatClient] = None
_token_callback_var: ContextVar[Optional[Callable[[str], None]]] = ContextVar("_token_callback", default=None)
_status_callback_var: ContextVar[Optional[Callable[[dict], None]]] = ContextVar("_status_callback", default=None)


def set_client(client: Optional[ChatClient]):
    """Inject the chat client so nodes can share it."""
    global _client
    _client = client


def set_token_callback(callback):
    """Set a function to be called for every generated text chunk (for streaming)."""
    _token_callback_var.set(callback)


def set_status_callback(callback):
    """Set a function to be called for agent status updates."""
    _status_callback_var.set(callback)


def emit_status(stage: str, message: str):
    cb = _status_callback_var.get()
    if cb:
        cb({"stage": stage, "message": message})


def _emit_token(text: str):
    cb = _token_callback_var.get()
    if cb and text:
        cb(text)


def _get_latest_query(state: AgentState) -> str:
    for msg in reversed(state.get("messages", [])):
        if isinstance(msg, HumanMessage):
            return message_text(msg)
    return ""


# ═══════════════════════════════════════════════════════════════════════
# Offline consultation (mock mode)
# ═══════════════════════════════════════════════════════════════════════

def render_offline_consultation(insight: Dict[str, Any]) -> str:
    """Render a tcm_insight result in the consultation answer layout."""
    primary = insight["primaryPattern"]
    secondary = insight["secondaryPatterns"]

    lines = ["📋 辨证要点", f"- 主要证型：{primary['name']}", f"- 依据：{primary['rationale']}"]
    if secondary:
        lines.append("- 需鉴别：" + "、".join(p["name"] for p in secondary))
    lines.append(f"- 病历摘要：{insight['intakeSummary']}")

    lines += [
        "",
        "🪄 治则与方药思路",
        f"- 可参考方：{primary['classicalFormula']}",
        "- 常用药材：" + "、".join(primary["keyHerbs"]),
        "",
        "🎯 穴位与外治",
        "- " + "、".join(primary["acupoints"]),
        "",
        "🥗 生活与饮食调护",
    ]
    lines += [f"- {advice}" for advice in insight["suggestedFocus"]]

    lines += ["", "⚠️ 安全提醒"]
    if insight["redFlags"]:
        lines += [f"- {flag}" for flag in insight["redFlags"]]
    else:
        lines.append(f"- {URGENT_CARE_NOTICE}")
    lines.append(f"- {DISCLAIMER}")
    return "\n".join(lines)


def _offline_consult(state: AgentState) -> dict:
    intake_fields = dict(state.get("insight_intake") or {})
    if not intake_fields.get("key_symptoms"):
        intake_fields["key_symptoms"] = _get_latest_query(state)

    emit_status("analyzing", "Running tcm_insight")
    insight = tcm_insight(**intake_fields)
    answer = render_offline_consultation(insight)
    _emit_token(answer)

    return {
        "messages": [AIMessage(content=answer)],
        "tool_calls": list(state.get("tool_calls", [])) + [INSIGHT_TOOL_NAME],
        "final_answer": answer,
    }


# ═══════════════════════════════════════════════════════════════════════
# Node 1: Consult
# ═══════════════════════════════════════════════════════════════════════

def consult_node(state: AgentState) -> dict:
    """Let the chat model answer, or request tcm_insight.

    Tools stay bound until MAX_TOOL_ROUNDS tool rounds have run; after that
    the model must answer with what it has.
    """
    if _client is None or not _client.is_available:
        return _offline_consult(state)

    rounds = state.get("tool_rounds", 0)
    if rounds < MAX_TOOL_ROUNDS:
        llm = _client.bind_tools(list(TOOLS.values()))
    else:
        llm = _client.chat_model

    messages = [SystemMessage(content=SYSTEM_PROMPT)] + list(state["messages"])
    emit_status("thinking", "Consulting")

    if _token_callback_var.get():
        merged = None
        for chunk in llm.stream(messages):
            _emit_token(message_text(chunk))
            merged = chunk if merged is None else merged + chunk
        response = AIMessage(
            content=merged.content if merged is not None else "",
            tool_calls=list(getattr(merged, "tool_calls", None) or []),
        )
    else:
        response = llm.invoke(messages)

    update: Dict[str, Any] = {"messages": [response]}
    if not getattr(response, "tool_calls", None):
        update["final_answer"] = message_text(response).strip()
    return update


# ═══════════════════════════════════════════════════════════════════════
# Node 2: Tools
# ═══════════════════════════════════════════════════════════════════════

def tools_node(state: AgentState) -> dict:
    """Execute every tool call requested by the last model message."""
    last = state["messages"][-1]
    executed: List[str] = []
    results: List[ToolMessage] = []

    for call in getattr(last, "tool_calls", None) or []:
        name = call["name"]
        emit_status("tool", f"Running {name}")
        logger.info(f"Agent tool call: {name} {json.dumps(call.get('args', {}), ensure_ascii=False)}")
        results.append(ToolMessage(
            content=run_tool(name, call.get("args", {})),
            tool_call_id=call.get("id") or str(uuid.uuid4()),
            name=name,
        ))
        executed.append(name)

    return {
        "messages": results,
        "tool_calls": list(state.get("tool_calls", [])) + executed,
        "tool_rounds": state.get("tool_rounds", 0) + 1,
    }


def route_after_consult(state: AgentState) -> str:
    """Go to the tools node while the model keeps requesting tools."""
    last = state["messages"][-1] if state.get("messages") else None
    if last is not None and getattr(last, "tool_calls", None):
        return "tools"
    return END
