"""
Consultation Prompt

Prompt handed to the consultation agent by the provide-consultation step.
"""
from __future__ import annotations

from .normalizer import StructuredIntake

NO_LIFESTYLE_FLAGS = "未提及明显不良习惯"
NO_RISK_INDICATORS = "暂未发现明显危险征象"
NO_MISSING_INFO = "关键诊断信息基本齐全"

CONSULTATION_PROMPT_TEMPLATE = """
你收到一份患者的初步问诊资料，请以资深中医师的身份给予咨询建议。

【病历摘要】
{summary}

【生活方式提示】
{lifestyle_flags}

【潜在风险征象】
{risk_indicators}

【缺失信息】
{missing_info}

请输出结构化建议，模板如下：

📋 辨证要点
- 说明可能的1~2个证型、病位、病机及依据（引用症状/舌脉描述）

🪄 治则与方药思路
- 治法与调理原则
- 可借鉴的代表方或加减方向（说明目的，不给具体剂量）
- 常用中药材或成分，用中文名称

🎯 穴位与外治
- 推荐2~4个核心穴位，并标注功效或手法

🥗 生活与饮食调护
- 饮食、情志、作息、运动方面的可操作建议

⚠️ 安全提醒
- 若存在风险征象或缺失关键信息，明确提醒何时需要线下就医或完善检查

要求：
- 默认使用中文，语气温和、专业。
- 结合 tcm_insight 工具提供的内容，但需用自己的语言综合描述。
- 如信息不足以辨证，请说明需要补充的内容与临时调理建议。"""


def build_consultation_prompt(data: StructuredIntake) -> str:
    return CONSULTATION_PROMPT_TEMPLATE.format(
        summary=data.summary,
        lifestyle_flags="、".join(data.lifestyle_flags) or NO_LIFESTYLE_FLAGS,
        risk_indicators="、".join(data.risk_indicators) or NO_RISK_INDICATORS,
        missing_info="、".join(data.missing_info) or NO_MISSING_INFO,
    )
