# stockscope/fundamentals.py
"""Fundamental scoring on a 0-10 scale.

Each sub-score starts from a neutral 5.0, adds the adjustments of its rule
chains and is clamped to [0, 10]. Within a chain only the first matching
threshold applies, so the more extreme thresholds are listed first.
"""
from __future__ import annotations
from typing import Iterable, List, Sequence, Union
from stockscope.models import DividendGrowth, DividendPoint, FundamentalsRecord, ScoreSet
from stockscope.rules import Chain, Rule, clamp, evaluate

NEUTRAL_SCORE = 5.0

VALUE_RULES: Sequence[Chain] = (
    (
        Rule(lambda f: f.pe < 10, 2.0, "P/E below 10"),
        Rule(lambda f: f.pe < 15, 1.0, "P/E below 15"),
        Rule(lambda f: f.pe > 50, -2.0, "P/E above 50"),
        Rule(lambda f: f.pe > 30, -1.0, "P/E above 30"),
    ),
    (Rule(lambda f: f.eps > 5, 1.0, "EPS above 5"),),
    (Rule(lambda f: f.eps > 10, 0.5, "EPS above 10"),),
    (
        Rule(lambda f: f.dividend_yield > 0.05, 1.5, "Dividend yield above 5%"),
        Rule(lambda f: f.dividend_yield > 0.03, 1.0, "Dividend yield above 3%"),
        Rule(lambda f: f.dividend_yield > 0.01, 0.5, "Dividend yield above 1%"),
    ),
)

GROWTH_RULES: Sequence[Chain] = (
    (
        Rule(lambda f: f.roe > 0.20, 2.0, "ROE above 20%"),
        Rule(lambda f: f.roe > 0.15, 1.5, "ROE above 15%"),
        Rule(lambda f: f.roe > 0.10, 1.0, "ROE above 10%"),
        Rule(lambda f: f.roe < 0.05, -1.0, "ROE below 5%"),
    ),
    (
        Rule(lambda f: f.profit_margin > 0.20, 2.0, "Profit margin above 20%"),
        Rule(lambda f: f.profit_margin > 0.10, 1.0, "Profit margin above 10%"),
        Rule(lambda f: f.profit_margin < 0, -1.5, "Negative profit margin"),
        Rule(lambda f: f.profit_margin < 0.05, -0.5, "Profit margin below 5%"),
    ),
)

STABILITY_RULES: Sequence[Chain] = (
    (
        Rule(lambda f: f.debt_to_equity < 0.3, 2.0, "Debt/equity below 0.3"),
        Rule(lambda f: f.debt_to_equity < 0.5, 1.0, "Debt/equity below 0.5"),
        Rule(lambda f: f.debt_to_equity > 1.5, -2.0, "Debt/equity above 1.5"),
        Rule(lambda f: f.debt_to_equity > 1.0, -1.0, "Debt/equity above 1.0"),
    ),
    (
        Rule(lambda f: f.current_ratio > 2, 1.5, "Current ratio above 2"),
        Rule(lambda f: f.current_ratio > 1.5, 1.0, "Current ratio above 1.5"),
        Rule(lambda f: f.current_ratio < 1, -1.0, "Current ratio below 1"),
    ),
    (
        Rule(lambda f: f.quick_ratio > 1.5, 1.5, "Quick ratio above 1.5"),
        Rule(lambda f: f.quick_ratio > 1, 1.0, "Quick ratio above 1"),
        Rule(lambda f: f.quick_ratio < 0.7, -1.0, "Quick ratio below 0.7"),
    ),
)


def _sub_score(chains: Sequence[Chain], record: FundamentalsRecord) -> float:
    adjustment, _ = evaluate(chains, record)
    return clamp(NEUTRAL_SCORE + adjustment, 0.0, 10.0)


def value_score(record: FundamentalsRecord) -> float:
    return _sub_score(VALUE_RULES, record)


def growth_score(record: FundamentalsRecord) -> float:
    return _sub_score(GROWTH_RULES, record)


def stability_score(record: FundamentalsRecord) -> float:
    return _sub_score(STABILITY_RULES, record)


def score_fundamentals(record: FundamentalsRecord) -> ScoreSet:
    value = value_score(record)
    growth = growth_score(record)
    stability = stability_score(record)
    return ScoreSet(
        value_score=round(value, 1),
        growth_score=round(growth, 1),
        stability_score=round(stability, 1),
        overall_score=round((value + growth + stability) / 3, 1),
    )


def intrinsic_value(
    record: FundamentalsRecord,
    growth_rate: float = 0.07,
    discount_rate: float = 0.09,
    terminal_multiple: float = 15,
    years: int = 10,
) -> float:
    """Discounted EPS stream over ``years`` plus a discounted terminal value.

    The terminal value is the final projected EPS times ``terminal_multiple``.
    """
    present_value = sum(
        record.eps * (1 + growth_rate) ** year / (1 + discount_rate) ** year
        for year in range(1, years + 1)
    )
    terminal_eps = record.eps * (1 + growth_rate) ** years
    terminal_value = terminal_eps * terminal_multiple / (1 + discount_rate) ** years
    return round(present_value + terminal_value, 2)


def analyze_dividend_growth(
    history: Iterable[Union[DividendPoint, dict]],
    sustainable_cap: float = 0.15,
) -> DividendGrowth:
    points: List[DividendPoint] = [
        p if isinstance(p, DividendPoint) else DividendPoint.model_validate(p) for p in (history or [])
    ]
    if len(points) < 2 or points[0].dividend <= 0:
        return DividendGrowth(growth_rate=0.0, sustainable_rate=0.0, rating="Poor")

    years = len(points) - 1
    # a cut to zero or below counts as a total loss
    ratio = max(points[-1].dividend / points[0].dividend, 0.0)
    cagr = ratio ** (1 / years) - 1
    sustainable = min(cagr, sustainable_cap)

    if cagr > 0.08:
        rating = "Excellent"
    elif cagr > 0.05:
        rating = "Good"
    elif cagr > 0.02:
        rating = "Fair"
    else:
        rating = "Poor"

    return DividendGrowth(
        growth_rate=round(cagr, 4),
        sustainable_rate=round(sustainable, 4),
        rating=rating,
    )
