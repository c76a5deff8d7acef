"""
Unit Tests for the TCM Pattern Analyzer

Keyword scoring, ranking, fallback, red flags and summary rendering.
"""
from app.core.tcm import (
    DEFAULT_CATALOG,
    GENERAL_REGULATION_ID,
    PatternCatalog,
    RedFlagRule,
    TcmIntake,
    TcmPattern,
    analyze_presentation,
    detect_red_flags,
    rank_patterns,
)
from app.core.tcm.analyzer import (
    MAX_SUGGESTED_FOCUS,
    build_intake_summary,
    build_narrative,
    score_pattern,
)
from app.core.tcm.catalog import LIVER_QI_STAGNATION, WIND_COLD


def _pattern(pattern_id, keywords, lifestyle=()):
    return TcmPattern(
        id=pattern_id,
        name=pattern_id.upper(),
        description="",
        classical_formula="",
        lifestyle=lifestyle,
        keywords=keywords,
    )


class TestScoring:
    """Tests for keyword scoring and ranking."""

    def test_wind_cold_keywords(self):
        assert score_pattern(WIND_COLD, "恶寒 头痛 无汗") == 3

    def test_keywords_are_case_insensitive(self):
        narrative = build_narrative(TcmIntake(key_symptoms="Chills and STIFF NECK"))
        assert score_pattern(WIND_COLD, narrative) >= 2

    def test_spaced_keyword_needs_word_boundary(self):
        liver = LIVER_QI_STAGNATION
        assert score_pattern(liver, "i often sigh when tired") == 1
        assert score_pattern(liver, "insight") == 0

    def test_ranking_is_stable_on_ties(self):
        catalog = PatternCatalog(
            patterns=(_pattern("first", ("cough",)), _pattern("second", ("cough",))),
            red_flags=(),
            fallback=_pattern("fallback", ()),
        )
        ranked = rank_patterns("cough", catalog)
        assert [m.pattern.id for m in ranked] == ["first", "second"]

    def test_ranking_orders_by_score(self):
        ranked = rank_patterns("咽痛 口渴 发热 恶寒")
        assert ranked[0].pattern.id == "windHeat"
        assert ranked[1].pattern.id == "windCold"


class TestAnalyzePresentation:
    """Tests for analyze_presentation."""

    def test_wind_cold_primary(self):
        insight = analyze_presentation(TcmIntake(key_symptoms="恶寒 头痛 无汗"))
        assert insight.primary_pattern.id == "windCold"
        assert insight.primary_pattern.score >= 3
        assert "恶寒 头痛 无汗" in insight.primary_pattern.rationale

    def test_red_flags_for_chest_pain_and_dyspnea(self):
        insight = analyze_presentation(TcmIntake(key_symptoms="胸痛 呼吸困难"))
        assert len(insight.red_flags) >= 1

    def test_fallback_for_unspecific_complaint(self):
        insight = analyze_presentation(TcmIntake(key_symptoms="一般不适"))
        assert insight.primary_pattern.id == GENERAL_REGULATION_ID
        assert insight.primary_pattern.score == 0
        assert insight.secondary_patterns == []
        assert insight.red_flags == []
        assert "一般不适" in insight.primary_pattern.rationale

    def test_secondary_patterns_need_positive_score(self):
        insight = analyze_presentation(TcmIntake(key_symptoms="恶寒 头痛"))
        assert insight.secondary_patterns == []

    def test_secondary_patterns_are_capped(self):
        insight = analyze_presentation(TcmIntake(
            key_symptoms="恶寒 头痛 无汗 咽痛 发热 乏力 食欲差 胀痛 胸闷",
        ))
        assert len(insight.secondary_patterns) == 2
        ids = {insight.primary_pattern.id} | {p.id for p in insight.secondary_patterns}
        assert len(ids) == 3

    def test_suggested_focus_bounded_and_unique(self):
        insight = analyze_presentation(TcmIntake(
            key_symptoms="恶寒 头痛 无汗 咽痛 发热 乏力 食欲差",
        ))
        assert len(insight.suggested_focus) <= MAX_SUGGESTED_FOCUS
        assert len(insight.suggested_focus) == len(set(insight.suggested_focus))
        # primary pattern advice comes first
        assert insight.suggested_focus[0] == insight.primary_pattern.lifestyle[0]

    def test_red_flags_follow_rule_order_one_message_each(self):
        flags = detect_red_flags("胸痛 晕厥 高热 呕血")
        assert flags == [rule.message for rule in DEFAULT_CATALOG.red_flags]

    def test_other_fields_contribute_to_narrative(self):
        insight = analyze_presentation(TcmIntake(
            key_symptoms="最近不舒服",
            lifestyle="工作 stress 很大",
        ))
        assert insight.primary_pattern.id == "liverQiStagnation"

    def test_never_raises_on_empty_symptoms(self):
        insight = analyze_presentation(TcmIntake(key_symptoms=""))
        assert insight.primary_pattern.id == GENERAL_REGULATION_ID
        assert insight.intake_summary == ""

    def test_custom_catalog(self):
        catalog = PatternCatalog(
            patterns=(_pattern("damp", ("heavy",), lifestyle=("少食甜腻",)),),
            red_flags=(RedFlagRule(id="x", keywords=("blood",), message="see a doctor"),),
            fallback=_pattern("general", ()),
        )
        insight = analyze_presentation(TcmIntake(key_symptoms="heavy limbs, blood in stool"), catalog)
        assert insight.primary_pattern.id == "damp"
        assert insight.red_flags == ["see a doctor"]
        assert insight.suggested_focus == ["少食甜腻"]

    def test_red_flags_not_merged_by_message(self):
        catalog = PatternCatalog(
            patterns=(),
            red_flags=(
                RedFlagRule(id="a", keywords=("x",), message="same"),
                RedFlagRule(id="b", keywords=("y",), message="same"),
            ),
            fallback=_pattern("general", ()),
        )
        assert detect_red_flags("x y", catalog) == ["same", "same"]

    def test_red_flag_rule_counted_once_for_many_hits(self):
        catalog = PatternCatalog(
            patterns=(),
            red_flags=(RedFlagRule(id="a", keywords=("x", "y"), message="once"),),
            fallback=_pattern("general", ()),
        )
        assert detect_red_flags("x y", catalog) == ["once"]

    def test_suggested_focus_dedupe_is_case_sensitive(self):
        catalog = PatternCatalog(
            patterns=(
                _pattern("first", ("x",), lifestyle=("Rest early",)),
                _pattern("second", ("y",), lifestyle=("rest early", "Rest early")),
            ),
            red_flags=(),
            fallback=_pattern("general", ()),
        )
        insight = analyze_presentation(TcmIntake(key_symptoms="x y"), catalog)
        assert insight.suggested_focus == ["Rest early", "rest early"]


class TestSummary:
    """Tests for narrative and summary building."""

    def test_absent_fields_omitted(self):
        intake = TcmIntake(key_symptoms="恶寒 头痛", duration="两天", pulse="")
        assert build_intake_summary(intake) == "主诉：恶寒 头痛；病程：两天"
        assert "脉象" not in build_intake_summary(intake)

    def test_field_order(self):
        intake = TcmIntake(
            key_symptoms="A",
            lifestyle="F",
            constitution="E",
            pulse="D",
            tongue="C",
            duration="B",
        )
        assert build_narrative(intake) == "a b c d e f"
        assert build_intake_summary(intake) == "主诉：A；病程：B；舌象：C；脉象：D；体质：E；生活方式：F"


class TestWireShape:
    """Tests for the camelCase serialisation."""

    def test_to_dict_keys(self):
        data = analyze_presentation(TcmIntake(key_symptoms="恶寒 头痛 无汗")).to_dict()
        assert set(data) == {
            "primaryPattern", "secondaryPatterns", "redFlags", "intakeSummary", "suggestedFocus",
        }
        assert data["primaryPattern"]["classicalFormula"]
        assert isinstance(data["primaryPattern"]["keyHerbs"], list)
