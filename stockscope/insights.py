# stockscope/insights.py
from __future__ import annotations
import logging
from typing import List, Optional, Sequence
from stockscope.models import FundamentalsRecord, Observation
from stockscope.sanitizer import as_number, ensure_valid_data
from stockscope.sentiment import top_keywords

logger = logging.getLogger(__name__)


def market_insights(data: Sequence[Observation]) -> List[str]:
    prices = [p for p in (as_number(d.close) for d in data) if p is not None and p > 0]
    if not prices:
        return []
    out: List[str] = []
    avg = sum(prices) / len(prices)

    if prices[-1] > avg:
        out.append("Current price is above the average price, indicating potential strength.")
    else:
        out.append("Current price is below the average price, indicating potential weakness.")

    volatility = (max(prices) - min(prices)) / avg * 100
    if volatility > 20:
        out.append(f"High price volatility detected ({volatility:.1f}%), suggesting increased risk.")
    elif volatility < 5:
        out.append(f"Low price volatility detected ({volatility:.1f}%), suggesting stable price action.")

    volumes = [v for v in (as_number(d.volume) for d in data) if v is not None and v > 0]
    if volumes:
        avg_volume = sum(volumes) / len(volumes)
        if volumes[-1] > avg_volume * 1.5:
            out.append("Recent volume is significantly higher than average, indicating increased interest.")
        elif volumes[-1] < avg_volume * 0.5:
            out.append("Recent volume is significantly lower than average, indicating decreased interest.")
    return out


def document_insights(data: Sequence[Observation]) -> List[str]:
    sentiments = [s for s in (as_number(d.sentiment) for d in data) if s is not None and s > 0]
    if not sentiments:
        return []
    out: List[str] = []
    avg = sum(sentiments) / len(sentiments)
    if avg > 0.7:
        out.append("Document analysis reveals strong positive sentiment in the content.")
    elif avg < 0.4:
        out.append("Document analysis reveals cautious or negative sentiment in the content.")
    else:
        out.append("Document analysis reveals balanced sentiment in the content.")

    topics = top_keywords(data)
    if topics:
        out.append(f"Frequently mentioned topics include: {', '.join(topics)}.")
    return out


def fundamental_insights(record: FundamentalsRecord) -> List[str]:
    out: List[str] = []
    if record.pe < 15:
        out.append(f"P/E ratio of {record.pe:.2f} suggests the stock may be undervalued.")
    elif record.pe > 25:
        out.append(f"P/E ratio of {record.pe:.2f} suggests the stock may be overvalued.")
    if record.dividend_yield > 0.03:
        out.append(f"Dividend yield of {record.dividend_yield * 100:.2f}% is above average.")
    return out


def generate_insights(
    data: Sequence[Observation],
    fundamentals: Optional[FundamentalsRecord],
    data_type: str = "marketData",
) -> List[str]:
    """Narrative observations for the dashboard; always returns at least one line."""
    insights: List[str] = []
    try:
        data = ensure_valid_data(data or [])
        if data_type == "documentAnalysis":
            insights.extend(document_insights(data))
        else:
            insights.extend(market_insights(data))
        if fundamentals is not None:
            insights.extend(fundamental_insights(fundamentals))
    except Exception:
        logger.exception("Insight generation failed")
        insights.append("Insights generation encountered an error. Please check your data.")

    if not insights:
        insights.append("Analysis complete. Review the detailed metrics for more information.")
    return insights
