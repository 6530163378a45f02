# stockscope/sentiment.py
from __future__ import annotations
import logging
from collections import Counter
from typing import List, Sequence
import pandas as pd
from stockscope.models import Observation, SentimentSummary
from stockscope.sanitizer import as_number, ensure_valid_data

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 0.1
MIN_TREND_POINTS = 3
TOP_KEYWORDS = 3


def _neutral(insight: str) -> SentimentSummary:
    return SentimentSummary(overall_sentiment=0.5, trend="stable", key_insights=[insight])


def top_keywords(data: Sequence[Observation], limit: int = TOP_KEYWORDS) -> List[str]:
    """Most frequent keywords, ties kept in first-seen order."""
    counts: Counter = Counter()
    for d in data:
        counts.update(d.keywords or [])
    return [k for k, _ in counts.most_common(limit)]


def _level_insight(score: float) -> str:
    if score > 0.7:
        return "Strongly positive sentiment throughout the analyzed content."
    if score > 0.55:
        return "Moderately positive sentiment in the analyzed content."
    if score < 0.35:
        return "Negative sentiment detected; caution is advised."
    return "Neutral sentiment with no strong directional bias."


def _trend_insight(trend: str) -> str:
    return {
        "improving": "Sentiment is improving over the analyzed period.",
        "declining": "Sentiment is declining over the analyzed period.",
    }.get(trend, "Sentiment has remained stable over the analyzed period.")


def summarize_sentiment(data: Sequence[Observation]) -> SentimentSummary:
    try:
        scored = [d for d in ensure_valid_data(data or []) if as_number(d.sentiment) is not None]
        if not scored:
            return _neutral("No sentiment data available; assuming neutral sentiment.")

        df = pd.DataFrame({
            "date": pd.to_datetime([d.date for d in scored], errors="coerce"),
            "sentiment": [float(d.sentiment) for d in scored],
        })
        order = df.sort_values("date", kind="stable").index
        values = df.loc[order, "sentiment"].tolist()
        ordered = [scored[i] for i in order]

        overall = round(sum(values) / len(values), 4)

        trend = "stable"
        if len(values) >= MIN_TREND_POINTS:
            mid = len(values) // 2
            first = sum(values[:mid]) / mid
            second = sum(values[mid:]) / (len(values) - mid)
            if second - first > TREND_THRESHOLD:
                trend = "improving"
            elif second - first < -TREND_THRESHOLD:
                trend = "declining"

        insights = [_level_insight(overall), _trend_insight(trend)]
        topics = top_keywords(ordered)
        if topics:
            insights.append(f"Key topics: {', '.join(topics)}.")

        return SentimentSummary(overall_sentiment=overall, trend=trend, key_insights=insights)
    except Exception:
        logger.exception("Sentiment summary failed")
        return _neutral("Sentiment analysis encountered an error; assuming neutral sentiment.")
