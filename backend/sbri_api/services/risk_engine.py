"""
Risk scoring engine for company risk profiles.

Pure functions only: callers resolve the financial snapshot, sector benchmark,
thresholds and any stored score, then hand the already-normalized values in.
Nothing here touches the database and nothing here raises on bad numbers:
missing or non-numeric inputs count as 0.

Score = 100 * (0.65 * margin_penalty + 0.35 * failure_penalty), clamped to
[0, 100] and rounded half-up to an integer.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable

from ..config.constants import (
    DEFAULT_RISK_THRESHOLDS,
    FAILURE_WEIGHT,
    MARGIN_WEIGHT,
    RISK_BAND_LABELS,
    SCORE_MAX,
    SCORE_MIN,
    TARGET_MARGIN,
)


@dataclass(frozen=True)
class FinancialSnapshot:
    """Most recent reporting period for a company."""
    turnover: Any = 0
    profit: Any = 0


@dataclass(frozen=True)
class SectorBenchmark:
    """Historical failure rate for an industry code (and region)."""
    failure_rate: Any = None


@dataclass(frozen=True)
class RiskThresholds:
    """Score cut-points. A None field means "use the global default"."""
    high: float | None = None
    medium: float | None = None

    def effective(self) -> RiskThresholds:
        return RiskThresholds(
            high=DEFAULT_RISK_THRESHOLDS['high'] if self.high is None else self.high,
            medium=DEFAULT_RISK_THRESHOLDS['medium'] if self.medium is None else self.medium,
        )


@dataclass(frozen=True)
class ThresholdRecord:
    """A thresholds row keyed by industry code and optional region."""
    sic_code: str
    region: str | None
    high: float | None = None
    medium: float | None = None


@dataclass(frozen=True)
class StoredScore:
    """A previously computed score that overrides fresh computation."""
    score: Any
    reasons: Any = None
    updated_at: str | None = None


@dataclass(frozen=True)
class ScoreBreakdown:
    score: int
    margin: float
    margin_penalty: float
    failure_penalty: float


@dataclass(frozen=True)
class RiskResult:
    score: int
    level: str
    reasons: list[str] = field(default_factory=list)
    source: str = "computed"

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "level": self.level,
            "reasons": list(self.reasons),
            "source": self.source,
        }


def to_number(value: Any) -> float:
    """Coerce a value to a finite float; anything else becomes 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    # 68.5 -> 69; built-in round() would give 68
    return int(math.floor(value + 0.5))


def _fixed1(value: float) -> str:
    """Format with one decimal, rounding half away from zero on the exact value."""
    if abs(value) >= 1e21:
        return str(value)
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def gross_margin(snapshot: FinancialSnapshot | None) -> float:
    """profit / turnover, or 0 when there is no positive turnover."""
    if snapshot is None:
        return 0.0
    turnover = to_number(snapshot.turnover)
    profit = to_number(snapshot.profit)
    return profit / turnover if turnover > 0 else 0.0


def margin_penalty(margin: float) -> float:
    """0 at or above the target margin, 1 at or below zero, linear between."""
    if margin >= TARGET_MARGIN:
        return 0.0
    if margin <= 0:
        return 1.0
    return (TARGET_MARGIN - margin) / TARGET_MARGIN


def failure_penalty(benchmark: SectorBenchmark | None) -> float:
    """Normalized sector failure rate in [0, 1].

    Percentage-style values (> 1) are divided by 100 first.
    """
    raw = to_number(benchmark.failure_rate) if benchmark is not None else 0.0
    rate = raw / 100 if raw > 1 else raw
    return _clamp(rate, 0.0, 1.0)


def compute_score(
    snapshot: FinancialSnapshot | None,
    benchmark: SectorBenchmark | None,
) -> ScoreBreakdown:
    """Compute the 0-100 risk score from financials and the sector benchmark."""
    margin = gross_margin(snapshot)
    m_penalty = margin_penalty(margin)
    f_penalty = failure_penalty(benchmark)

    score_float = 100 * (MARGIN_WEIGHT * m_penalty + FAILURE_WEIGHT * f_penalty)
    score = _round_half_up(_clamp(score_float, SCORE_MIN, SCORE_MAX))

    return ScoreBreakdown(
        score=score,
        margin=margin,
        margin_penalty=m_penalty,
        failure_penalty=f_penalty,
    )


def classify(score: float, thresholds: RiskThresholds | None = None) -> str:
    """Map a score onto low/medium/high. Cut-points are inclusive lower bounds."""
    cut = (thresholds or RiskThresholds()).effective()
    if score >= cut.high:
        return 'high'
    if score >= cut.medium:
        return 'medium'
    return 'low'


def explain(margin: float, failure_pen: float, level: str) -> list[str]:
    return [
        f"Gross margin ~ {_fixed1(margin * 100)}%",
        f"Sector failure ~ {_fixed1(failure_pen * 100)}%",
        RISK_BAND_LABELS.get(level, RISK_BAND_LABELS['low']),
    ]


def resolve_thresholds(
    records: Iterable[ThresholdRecord],
    industry_code: str | None,
    region: str | None,
) -> RiskThresholds:
    """
    Pick the thresholds that apply to an industry code and region.

    Precedence: record for (code, region) > record for code with no region >
    global default. Fields missing on the chosen record fall back to the
    global default individually.
    """
    if not industry_code:
        return RiskThresholds().effective()

    code_only = None
    for record in records:
        if str(record.sic_code) != str(industry_code):
            continue
        if region is not None and record.region == region:
            return RiskThresholds(high=record.high, medium=record.medium).effective()
        if record.region is None and code_only is None:
            code_only = record

    if code_only is not None:
        return RiskThresholds(high=code_only.high, medium=code_only.medium).effective()
    return RiskThresholds().effective()


def score_company(
    snapshot: FinancialSnapshot | None,
    benchmark: SectorBenchmark | None,
    thresholds: RiskThresholds | None = None,
    stored: StoredScore | None = None,
) -> RiskResult:
    """
    Produce the RiskResult for one company.

    A stored score wins over fresh computation: its score and reasons pass
    through and only the level is recomputed against the current thresholds.
    """
    if stored is not None:
        score = _round_half_up(_clamp(to_number(stored.score), SCORE_MIN, SCORE_MAX))
        reasons = []
        if isinstance(stored.reasons, (list, tuple)):
            reasons = [r if isinstance(r, str) else str(r) for r in stored.reasons]
        return RiskResult(
            score=score,
            level=classify(score, thresholds),
            reasons=reasons,
            source="stored",
        )

    breakdown = compute_score(snapshot, benchmark)
    level = classify(breakdown.score, thresholds)
    return RiskResult(
        score=breakdown.score,
        level=level,
        reasons=explain(breakdown.margin, breakdown.failure_penalty, level),
        source="computed",
    )
