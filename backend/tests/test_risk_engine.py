"""
Risk engine tests.

Pure functions, no database: score composition, classification, reasons,
threshold precedence and the stored-score override.
"""
import math

import pytest

from sbri_api.services.risk_engine import (
    FinancialSnapshot,
    RiskThresholds,
    SectorBenchmark,
    StoredScore,
    ThresholdRecord,
    classify,
    compute_score,
    explain,
    failure_penalty,
    gross_margin,
    margin_penalty,
    resolve_thresholds,
    score_company,
    to_number,
)


class TestScenarios:
    """Worked examples with known answers."""

    def test_healthy_margin_low_failure(self):
        """1,000,000 turnover, 150,000 profit, 1.8% failure => 1, low."""
        result = score_company(FinancialSnapshot(1_000_000, 150_000), SectorBenchmark(0.018))
        assert result.score == 1
        assert result.level == "low"
        assert result.reasons == ["Gross margin ~ 15.0%", "Sector failure ~ 1.8%", "Low risk band"]
        assert result.source == "computed"

    def test_zero_profit(self):
        """Zero profit with 5% failure => 67, medium."""
        result = score_company(FinancialSnapshot(1_000_000, 0), SectorBenchmark(0.05))
        assert result.score == 67
        assert result.level == "medium"
        assert result.reasons == ["Gross margin ~ 0.0%", "Sector failure ~ 5.0%", "Medium risk band"]

    def test_zero_turnover_rounds_half_up(self):
        """No turnover with 10% failure gives 68.5, which rounds to 69."""
        result = score_company(FinancialSnapshot(0, 123_456), SectorBenchmark(0.10))
        assert result.score == 69
        assert result.level == "medium"
        assert result.reasons[0] == "Gross margin ~ 0.0%"

    def test_stored_score_overrides(self):
        """A stored score passes through with its reasons."""
        result = score_company(
            FinancialSnapshot(1_000_000, 150_000),
            SectorBenchmark(0.018),
            stored=StoredScore(score=85, reasons=["x"]),
        )
        assert result.score == 85
        assert result.reasons == ["x"]
        assert result.level == classify(85)
        assert result.source == "stored"


class TestMargin:
    """Gross margin and its penalty."""

    def test_margin_ratio(self):
        """margin = profit / turnover."""
        assert gross_margin(FinancialSnapshot(200, 50)) == 0.25

    def test_zero_turnover_gives_zero_margin(self):
        """No division by zero."""
        assert gross_margin(FinancialSnapshot(0, 50)) == 0.0

    def test_negative_turnover_gives_zero_margin(self):
        """Only positive turnover counts."""
        assert gross_margin(FinancialSnapshot(-100, 50)) == 0.0

    def test_missing_snapshot(self):
        """None snapshot is all zeros."""
        assert gross_margin(None) == 0.0

    @pytest.mark.parametrize("margin,expected", [
        (-0.5, 1.0),
        (0.0, 1.0),
        (0.075, 0.5),
        (0.15, 0.0),
        (0.4, 0.0),
    ])
    def test_penalty_points(self, margin, expected):
        """1 at or below zero, 0 at or above target, linear between."""
        assert margin_penalty(margin) == pytest.approx(expected)

    def test_penalty_non_increasing(self):
        """Penalty never rises as margin rises."""
        margins = [i / 1000 for i in range(-50, 200)]
        penalties = [margin_penalty(m) for m in margins]
        assert all(a >= b for a, b in zip(penalties, penalties[1:]))

    def test_negative_profit(self):
        """Losses get the full penalty."""
        breakdown = compute_score(FinancialSnapshot(1_000_000, -250_000), SectorBenchmark(0))
        assert breakdown.margin_penalty == 1.0
        assert breakdown.score == 65


class TestFailurePenalty:
    """Sector failure normalization."""

    def test_fraction_passes_through(self):
        assert failure_penalty(SectorBenchmark(0.05)) == pytest.approx(0.05)

    def test_percentage_is_divided(self):
        """Values above 1 are percentages."""
        assert failure_penalty(SectorBenchmark(5)) == pytest.approx(0.05)

    def test_exactly_one_is_a_fraction(self):
        """1 means 100% as a fraction, not 1%."""
        assert failure_penalty(SectorBenchmark(1)) == 1.0

    def test_clamped(self):
        """Out-of-range values are clamped to [0, 1]."""
        assert failure_penalty(SectorBenchmark(250)) == 1.0
        assert failure_penalty(SectorBenchmark(-0.2)) == 0.0

    @pytest.mark.parametrize("raw", [None, "n/a", float("nan"), float("inf"), {}])
    def test_unusable_values_count_as_zero(self, raw):
        """Missing or non-numeric failure rates count as 0."""
        assert failure_penalty(SectorBenchmark(raw)) == 0.0

    def test_missing_benchmark(self):
        assert failure_penalty(None) == 0.0


class TestComputeScore:
    """Score composition."""

    def test_score_is_bounded_integer(self):
        """Any numeric input yields an int in [0, 100]."""
        samples = [
            (0, 0, 0), (1, 1, 1), (10, -10, 99), (1e9, 1e8, 0.5),
            (1000, 100, 3.2), (-5, -5, -5), (1000, 999, 1000),
        ]
        for turnover, profit, failure in samples:
            breakdown = compute_score(FinancialSnapshot(turnover, profit), SectorBenchmark(failure))
            assert isinstance(breakdown.score, int)
            assert 0 <= breakdown.score <= 100

    def test_worst_case_is_100(self):
        """Full margin and failure penalties give 100."""
        assert compute_score(FinancialSnapshot(0, 0), SectorBenchmark(1)).score == 100

    def test_best_case_is_0(self):
        assert compute_score(FinancialSnapshot(100, 50), SectorBenchmark(0)).score == 0

    def test_string_numbers_are_accepted(self):
        """Numeric strings from loose documents still count."""
        breakdown = compute_score(FinancialSnapshot("1000000", "150000"), SectorBenchmark("0.018"))
        assert breakdown.score == 1

    def test_idempotent(self):
        """Same inputs, same result."""
        snapshot, benchmark = FinancialSnapshot(750_000, 30_000), SectorBenchmark(0.041)
        assert compute_score(snapshot, benchmark) == compute_score(snapshot, benchmark)


class TestClassify:
    """Default and custom cut-points."""

    @pytest.mark.parametrize("score,level", [
        (100, "high"), (70, "high"), (69, "medium"), (40, "medium"), (39, "low"), (0, "low"),
    ])
    def test_default_boundaries(self, score, level):
        """Cut-points are inclusive lower bounds."""
        assert classify(score) == level

    def test_custom_thresholds(self):
        thresholds = RiskThresholds(high=30, medium=10)
        assert classify(31, thresholds) == "high"
        assert classify(10, thresholds) == "medium"
        assert classify(9, thresholds) == "low"

    def test_partial_thresholds_fall_back_per_field(self):
        """A missing field uses the global default."""
        assert classify(50, RiskThresholds(high=50)) == "high"
        assert classify(45, RiskThresholds(high=50)) == "medium"
        assert classify(45, RiskThresholds(medium=50)) == "low"


class TestExplain:
    """Reason strings."""

    def test_three_reasons_in_order(self):
        assert explain(0.1234, 0.05, "medium") == [
            "Gross margin ~ 12.3%",
            "Sector failure ~ 5.0%",
            "Medium risk band",
        ]

    def test_negative_margin(self):
        assert explain(-0.25, 0, "high")[0] == "Gross margin ~ -25.0%"

    def test_high_band(self):
        assert explain(0, 1, "high")[2] == "High risk band"


class TestResolveThresholds:
    """Threshold record precedence."""

    RECORDS = [
        ThresholdRecord("62020", None, high=80, medium=50),
        ThresholdRecord("62020", "London", high=60, medium=30),
        ThresholdRecord("28290", None, high=None, medium=20),
    ]

    def test_region_specific_wins(self):
        assert resolve_thresholds(self.RECORDS, "62020", "London") == RiskThresholds(60, 30)

    def test_code_only_when_region_differs(self):
        assert resolve_thresholds(self.RECORDS, "62020", "Wales") == RiskThresholds(80, 50)

    def test_code_only_when_no_region(self):
        assert resolve_thresholds(self.RECORDS, "62020", None) == RiskThresholds(80, 50)

    def test_default_when_code_unknown(self):
        assert resolve_thresholds(self.RECORDS, "11111", "London") == RiskThresholds(70, 40)

    def test_default_when_no_code(self):
        assert resolve_thresholds(self.RECORDS, None, "London") == RiskThresholds(70, 40)

    def test_missing_field_uses_default(self):
        """Fields absent on the chosen record fall back individually."""
        assert resolve_thresholds(self.RECORDS, "28290", "London") == RiskThresholds(70, 20)


class TestStoredScore:
    """Edge cases of the override branch."""

    def test_level_uses_current_thresholds(self):
        result = score_company(None, None, RiskThresholds(high=90, medium=80), StoredScore(85, ["x"]))
        assert result.level == "medium"

    def test_out_of_range_score_is_clamped(self):
        assert score_company(None, None, stored=StoredScore(140, [])).score == 100
        assert score_company(None, None, stored=StoredScore(-3, [])).score == 0

    def test_fractional_score_rounds_half_up(self):
        assert score_company(None, None, stored=StoredScore(84.5, [])).score == 85

    def test_non_numeric_score_is_zero(self):
        result = score_company(None, None, stored=StoredScore("abc", ["x"]))
        assert result.score == 0
        assert result.level == "low"

    def test_non_list_reasons_become_empty(self):
        assert score_company(None, None, stored=StoredScore(50, "not a list")).reasons == []

    def test_empty_reasons_stay_empty(self):
        """Stored reasons are never topped up with computed ones."""
        assert score_company(None, None, stored=StoredScore(50, [])).reasons == []


class TestToNumber:
    @pytest.mark.parametrize("raw,expected", [
        (None, 0.0), ("12.5", 12.5), (3, 3.0), ("x", 0.0), (math.nan, 0.0), (-math.inf, 0.0),
    ])
    def test_coercion(self, raw, expected):
        assert to_number(raw) == expected
