"""
TCM Consultation Agent: Configuration
=====================================
Centralised identifiers, limits and prompts for the consultation agent and
workflow.  Loads secrets from the project-level .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

# ── Identifiers ─────────────────────────────────────────────────────────
AGENT_ID = "tcmConsultationAgent"
AGENT_NAME = "中医临床顾问 (TCM Consultation Specialist)"
WORKFLOW_ID = "tcm-consultation-workflow"
STRUCTURE_STEP_ID = "structure-intake"
CONSULTATION_STEP_ID = "provide-consultation"
INSIGHT_TOOL_NAME = "tcm_insight"

# ── Agent loop limits ───────────────────────────────────────────────────
# Consult → tool → consult rounds before the agent must answer.
MAX_TOOL_ROUNDS = int(os.getenv("TCM_MAX_TOOL_ROUNDS", "3"))

# ── Scorer sampling (fraction of agent runs graded) ─────────────────────
SCORER_SAMPLING_RATE = float(os.getenv("TCM_SCORER_SAMPLING_RATE", "1.0"))

# ── Persona ─────────────────────────────────────────────────────────────
SYSTEM_PROMPT = (
    "你是一名经验丰富的中医师，擅长通过“望闻问切”四诊信息为患者提供辨证论治的咨询建议。请遵循以下原则：\n"
    "- 主动了解主诉、病程、诱因、舌脉、体质、生活作息等关键信息，若缺失请先追问。\n"
    "- 综合使用中医术语与通俗语言，帮助患者理解病机、常见证型及身心调护要点。\n"
    "- 根据辨证给出方药思路（突出君臣佐使）、常用穴位、日常食疗与生活方式建议。\n"
    "- 强调对症施治与个体化调理，避免直接给出具体剂量，鼓励在持证中医师指导下用药。\n"
    "- 发现严重或紧急征象（如呼吸困难、高热、胸痛、神志异常等）时，必须提醒患者立即就医。\n"
    "- 默认使用中文回复；如用户指定其他语言则尊重其需求，保持温和、专业、可操作的语气。\n"
    "- 给出建议并提示患者只供参考建议，不做具体治疗方案。\n"
    f"当需要结构化地梳理症状、快速获取可能的证型/调护重点时，请调用 {INSIGHT_TOOL_NAME} 工具来辅助分析，"
    "并在回复中融合其结果而非直接照搬。\n"
)

# Appended to every offline (mock-mode) consultation.
DISCLAIMER = "以上建议仅供参考，不构成具体治疗方案，请在持证中医师指导下调理用药。"
URGENT_CARE_NOTICE = "如出现呼吸困难、胸痛、高热不退或意识改变，请立即就医。"
