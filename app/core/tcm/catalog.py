"""
TCM Pattern Catalog

Static pattern entries, red-flag rules and the general-regulation fallback.

Declaration order is significant: when two patterns score the same, the one
declared first ranks higher.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .base import RedFlagRule, TcmPattern

GENERAL_REGULATION_ID = "generalRegulation"


@dataclass(frozen=True)
class PatternCatalog:
    """Immutable bundle handed to the analyzer."""
    patterns: Tuple[TcmPattern, ...]
    red_flags: Tuple[RedFlagRule, ...]
    fallback: TcmPattern


# ── Patterns ─────────────────────────────────────────────────────────────────

WIND_COLD = TcmPattern(
    id="windCold",
    name="风寒束表 (Wind-Cold Invasion)",
    description="Aversion to wind/cold with superficial obstruction, often early-stage external pathogen.",
    classical_formula="荆防败毒散 或 桂枝汤加减",
    key_herbs=("荆芥", "防风", "桂枝", "白芍", "薄荷"),
    acupoints=("LI4 合谷", "LU7 列缺", "GB20 风池", "DU14 大椎"),
    lifestyle=("保暖避风，避免冷饮", "多饮温姜茶或葱白水", "充分休息，避免汗出过多"),
    keywords=(
        "chill", "chills", "aversion to wind", "stiff neck", "body ache",
        "无汗", "恶寒", "头痛", "clear mucus", "sneezing",
    ),
)

WIND_HEAT = TcmPattern(
    id="windHeat",
    name="风热犯表 (Wind-Heat Invasion)",
    description="Heat signs with sore throat, thirst, or yellow nasal discharge.",
    classical_formula="银翘散 或 桑菊饮",
    key_herbs=("金银花", "连翘", "桑叶", "菊花", "薄荷"),
    acupoints=("LI4 合谷", "LI11 曲池", "LU10 鱼际", "DU14 大椎"),
    lifestyle=("多饮温水，可用菊花薄荷茶缓解", "避免辛辣炸物与酒精", "保持充足睡眠，利于正气恢复"),
    keywords=(
        "sore throat", "throat pain", "red eyes", "yellow mucus", "fever",
        "发热", "咽喉痛", "咽痛", "口渴",
    ),
)

QI_DEFICIENCY = TcmPattern(
    id="qiDeficiency",
    name="脾肺气虚 (Spleen/Lung Qi Deficiency)",
    description="Fatigue, low voice, tendency to catch colds, loose stools, spontaneous sweating.",
    classical_formula="玉屏风散 或 补中益气汤",
    key_herbs=("黄芪", "白术", "防风", "党参", "陈皮"),
    acupoints=("ST36 足三里", "RN6 气海", "RN12 中脘", "BL13 肺俞"),
    lifestyle=("规律进餐，温食为主", "适度运动如太极或散步", "避免过劳，保持情绪平稳"),
    keywords=(
        "fatigue", "low appetite", "loose stool", "spontaneous sweat", "tired",
        "乏力", "食欲差", "大便稀", "怕风",
    ),
)

LIVER_QI_STAGNATION = TcmPattern(
    id="liverQiStagnation",
    name="肝气郁结 (Liver Qi Stagnation)",
    description="Stress-related distention, mood swings, PMS, sighing.",
    classical_formula="逍遥散 或 柴胡疏肝散",
    key_herbs=("柴胡", "白芍", "香附", "薄荷", "炙甘草"),
    acupoints=("LR3 太冲", "PC6 内关", "GB34 阳陵泉", "RN17 膻中"),
    lifestyle=("深呼吸练习或八段锦", "保持情绪抒发，可写日记或与人交流", "减少油腻与酒精摄入"),
    keywords=("stress", "irritability", "pms", "distention", "胀痛", "情绪", "胸闷", " sigh "),
)

GENERAL_REGULATION = TcmPattern(
    id=GENERAL_REGULATION_ID,
    name="一般调理 (General Regulation)",
    description="未出现典型辨证线索，以扶正祛邪、调和脏腑为主的综合调理建议。",
    classical_formula="可依体质选择四君子汤、六味地黄丸等基础方加减",
    key_herbs=("黄芪", "党参", "茯苓", "白术", "麦冬"),
    acupoints=("ST36 足三里", "RN6 气海", "SP6 三阴交"),
    lifestyle=("保证睡眠，规律饮食", "适量温和运动，保持情绪稳定"),
    keywords=(),
)


# ── Red flags ────────────────────────────────────────────────────────────────

CARDIOPULMONARY_RED_FLAG = RedFlagRule(
    id="cardiopulmonary",
    keywords=(
        "difficulty breathing", "喘不过气", "呼吸困难",
        "chest pain", "胸痛",
        "晕厥", "意识模糊",
    ),
    message="出现呼吸困难、胸痛或意识改变，应立即就医或拨打急救电话。",
)

SEVERE_SYSTEMIC_RED_FLAG = RedFlagRule(
    id="severeSystemic",
    keywords=("high fever", "高热", "39", "persistent vomiting", "呕血", "血便"),
    message="持续高热或伴有出血、剧烈呕吐需及时到医院排查严重感染或内科问题。",
)


DEFAULT_CATALOG = PatternCatalog(
    patterns=(WIND_COLD, WIND_HEAT, QI_DEFICIENCY, LIVER_QI_STAGNATION),
    red_flags=(CARDIOPULMONARY_RED_FLAG, SEVERE_SYSTEMIC_RED_FLAG),
    fallback=GENERAL_REGULATION,
)
