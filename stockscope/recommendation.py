# stockscope/recommendation.py
"""Recommendation engine.

Confidence starts at 0.5 and moves with each piece of evidence in
``EVIDENCE_RULES``; the direction of the call comes from a separate composite
score::

    score = overall/10 + change/100 - 0.2*[RSI > 70] + 0.2*[RSI < 30]

    score >  0.8 -> STRONG BUY      score < -0.8 -> STRONG SELL
    score >  0.3 -> BUY             score < -0.3 -> SELL
    otherwise    -> HOLD

Confidence is clamped to [0.3, 0.9]. The engine never raises: missing input
and internal failures both come back as a HOLD.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Sequence
from stockscope.formatting import plain_number
from stockscope.fundamentals import score_fundamentals
from stockscope.indicators import rsi as compute_rsi
from stockscope.models import (
    MAX_CONFIDENCE,
    MIN_CONFIDENCE,
    FundamentalsRecord,
    Observation,
    Recommendation,
    SentimentSummary,
)
from stockscope.rules import Chain, Rule, clamp, evaluate
from stockscope.sanitizer import as_number, ensure_valid_data

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.5
TREND_WINDOW = 20
NEUTRAL_RSI = 50.0

EVIDENCE_RULES: Sequence[Chain] = (
    (
        Rule(lambda c: c["overall"] > 7, 0.10, "Strong fundamental indicators"),
        Rule(lambda c: c["overall"] > 5, 0.05, "Decent fundamental health"),
        Rule(lambda c: c["overall"] < 4, -0.10, "Weak fundamental indicators"),
    ),
    (
        Rule(lambda c: 0 < c["pe"] < 15, 0.05, "Attractive P/E ratio of {pe_text}"),
        Rule(lambda c: c["pe"] > 30, -0.05, "High P/E ratio of {pe_text}"),
    ),
    (
        Rule(lambda c: c["debt_to_equity"] < 0.5, 0.05, "Low debt-to-equity ratio"),
        Rule(lambda c: c["debt_to_equity"] > 1.2, -0.05, "High debt-to-equity ratio"),
    ),
    (
        Rule(lambda c: c["dividend_yield"] > 0.04, 0.05, "Strong dividend yield of {dividend_pct:.2f}%"),
    ),
    (
        Rule(lambda c: c["change"] > 10, 0.10, "Strong recent uptrend ({change:.2f}% in {period} days)"),
        Rule(lambda c: c["change"] > 5, 0.05, "Positive price momentum ({change:.2f}% in {period} days)"),
        Rule(lambda c: c["change"] < -10, -0.10, "Sharp recent decline ({change:.2f}% in {period} days)"),
        Rule(lambda c: c["change"] < -5, -0.05, "Negative price action ({change:.2f}% in {period} days)"),
    ),
    (
        Rule(lambda c: c["rsi"] > 70, -0.10, "Overbought conditions (RSI: {rsi:.1f})"),
        Rule(lambda c: c["rsi"] < 30, 0.10, "Oversold conditions (RSI: {rsi:.1f})"),
    ),
)

# (threshold, label) checked top-down; below every threshold the call is HOLD
BUY_SIDE = ((0.8, "STRONG BUY"), (0.3, "BUY"))
SELL_SIDE = ((-0.8, "STRONG SELL"), (-0.3, "SELL"))


def _fallback(reason: str, summary: str) -> Recommendation:
    return Recommendation(
        recommendation="HOLD",
        confidence=BASE_CONFIDENCE,
        positive_points=[],
        negative_points=[reason],
        summary=summary,
    )


def price_change(data: Sequence[Observation], window: int = TREND_WINDOW) -> float:
    """Percent change across the trailing ``window`` points, 0 when undefined."""
    recent = list(data[-min(window, len(data)):]) if data else []
    if len(recent) < 2:
        return 0.0
    first = as_number(recent[0].close)
    last = as_number(recent[-1].close)
    if first is None or last is None or first == 0:
        return 0.0
    return (last / first - 1) * 100


def latest_rsi(data: Sequence[Observation], period: int = 14) -> float:
    values = compute_rsi(data, period)
    return values[-1] if values else NEUTRAL_RSI


def classify(score: float) -> str:
    for threshold, label in BUY_SIDE:
        if score > threshold:
            return label
    for threshold, label in SELL_SIDE:
        if score < threshold:
            return label
    return "HOLD"


def _context(data: Sequence[Observation], fundamentals: FundamentalsRecord, overall: float) -> Dict[str, Any]:
    return {
        "overall": overall,
        "pe": fundamentals.pe,
        "pe_text": plain_number(fundamentals.pe),
        "debt_to_equity": fundamentals.debt_to_equity,
        "dividend_yield": fundamentals.dividend_yield,
        "dividend_pct": fundamentals.dividend_yield * 100,
        "change": price_change(data),
        "period": min(TREND_WINDOW, len(data)),
        "rsi": latest_rsi(data),
    }


def generate_recommendation(
    data: Optional[Sequence[Observation]],
    fundamentals: Optional[FundamentalsRecord],
) -> Recommendation:
    if not data or fundamentals is None:
        return _fallback("Insufficient data for analysis", "Unable to analyze due to insufficient data.")
    data = ensure_valid_data(data)

    try:
        overall = score_fundamentals(fundamentals).overall_score
        ctx = _context(data, fundamentals, overall)

        adjustment, fired = evaluate(EVIDENCE_RULES, ctx)
        positives = [r.describe(ctx) for r in fired if r.adjustment > 0]
        negatives = [r.describe(ctx) for r in fired if r.adjustment < 0]

        score = overall / 10 + ctx["change"] / 100
        if ctx["rsi"] > 70:
            score -= 0.2
        elif ctx["rsi"] < 30:
            score += 0.2
        label = classify(score)

        confidence = round(clamp(BASE_CONFIDENCE + adjustment, MIN_CONFIDENCE, MAX_CONFIDENCE), 2)
        summary = (
            f"Based on {len(positives)} positive and {len(negatives)} negative factors, "
            f"we {label.lower()} this stock with {round(confidence * 100)}% confidence."
        )
        logger.debug(f"Composite score {score:.3f} -> {label} ({confidence:.2f})")
        return Recommendation(
            recommendation=label,
            confidence=confidence,
            positive_points=positives,
            negative_points=negatives,
            summary=summary,
        )
    except Exception:
        logger.exception("Recommendation failed")
        return _fallback("Error during analysis", "An error occurred while analyzing the data.")


def document_recommendation(sentiment: SentimentSummary) -> Recommendation:
    """HOLD call for document-only inputs, where there are no prices to trade on."""
    positives = []
    negatives = ["Limited market data for comprehensive analysis"]
    if sentiment.overall_sentiment > 0.55:
        positives.append("Document sentiment analysis is positive")
        outlook = "cautiously optimistic"
    elif sentiment.overall_sentiment < 0.35:
        negatives.append("Document sentiment analysis is negative")
        outlook = "cautious"
    else:
        outlook = "neutral"
    if sentiment.trend == "improving":
        positives.append("Sentiment is improving over time")
    elif sentiment.trend == "declining":
        negatives.append("Sentiment is declining over time")

    return Recommendation(
        recommendation="HOLD",
        confidence=0.6,
        positive_points=positives,
        negative_points=negatives,
        summary=f"Based on document analysis, the outlook is {outlook}.",
    )
