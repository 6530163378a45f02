# stockscope/processor.py
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional
import numpy as np
import pandas as pd
from stockscope.config import Settings
from stockscope.fundamentals import intrinsic_value, score_fundamentals
from stockscope.indicators import align_to_dates, bollinger_bands, macd, rsi, sma, volume_profile
from stockscope.insights import generate_insights
from stockscope.models import AnalysisReport, FundamentalsRecord, IndicatorBlock, Observation
from stockscope.recommendation import document_recommendation, generate_recommendation
from stockscope.sanitizer import ensure_valid_data
from stockscope.sentiment import summarize_sentiment

logger = logging.getLogger(__name__)

_KEYWORDS = ["earnings", "guidance", "margins", "buyback", "regulation", "demand", "supply chain"]


def compute_indicators(data: List[Observation], settings: Settings) -> IndicatorBlock:
    m = macd(data)
    # histogram, signal and the tail of the MACD line share these dates
    macd_dates = [p.date for p in align_to_dates(data, m.histogram)]
    return IndicatorBlock(
        sma={f"sma{p}": sma(data, p) for p in settings.sma_periods},
        rsi=align_to_dates(data, rsi(data, settings.rsi_period)),
        macd=m,
        macd_dates=macd_dates,
        bollinger=bollinger_bands(data, settings.bollinger_period, settings.bollinger_std_dev),
        volume_profile=volume_profile(data, settings.volume_levels),
    )


def analyze(
    raw: Any,
    fundamentals: Optional[FundamentalsRecord] = None,
    *,
    ticker: str = "UNKNOWN",
    data_type: str = "marketData",
    settings: Optional[Settings] = None,
) -> AnalysisReport:
    settings = settings or Settings()
    data = ensure_valid_data(raw)
    if fundamentals is None:
        logger.info("No fundamentals supplied; using configured defaults")
        fundamentals = settings.default_fundamentals

    logger.info(f"Analyzing {len(data)} observations for {ticker} ({data_type})")
    indicators = compute_indicators(data, settings)
    scores = score_fundamentals(fundamentals)
    value = intrinsic_value(
        fundamentals,
        growth_rate=settings.dcf_growth_rate,
        discount_rate=settings.dcf_discount_rate,
        terminal_multiple=settings.dcf_terminal_multiple,
    )

    sentiment = None
    if data_type == "documentAnalysis":
        sentiment = summarize_sentiment(data)
        recommendation = document_recommendation(sentiment)
    else:
        recommendation = generate_recommendation(data, fundamentals)
    logger.info(f"{ticker}: {recommendation.recommendation} ({recommendation.confidence:.0%})")

    return AnalysisReport(
        ticker=ticker,
        data_type=data_type,
        generated_at=datetime.now(timezone.utc).isoformat(),
        observations=len(data),
        indicators=indicators,
        scores=scores,
        intrinsic_value=value,
        recommendation=recommendation,
        sentiment=sentiment,
        insights=generate_insights(data, fundamentals, data_type),
    )


def sample_observations(
    data_type: str = "marketData",
    periods: int = 60,
    start: str = "2023-01-02",
    seed: int = 7,
) -> List[dict]:
    """Synthetic input in the shape an upload would deliver: a random-walk price series or scored document snippets."""
    rng = np.random.default_rng(seed)
    dates = [d.date().isoformat() for d in pd.bdate_range(start, periods=periods)]

    if data_type == "documentAnalysis":
        sentiment = np.clip(0.6 + np.cumsum(rng.normal(0, 0.04, periods)), 0.0, 1.0)
        return [
            {
                "date": dt,
                "sentiment": round(float(s), 2),
                "confidence": round(float(rng.uniform(0.6, 0.95)), 2),
                "keywords": [str(k) for k in rng.choice(_KEYWORDS, size=2, replace=False)],
            }
            for dt, s in zip(dates, sentiment)
        ]

    close = 150 * np.exp(np.cumsum(rng.normal(0.001, 0.015, periods)))
    rows = []
    for dt, c in zip(dates, close):
        spread = c * rng.uniform(0.002, 0.02)
        rows.append({
            "date": dt,
            "open": round(float(c + rng.uniform(-spread, spread)), 2),
            "high": round(float(c + spread), 2),
            "low": round(float(c - spread), 2),
            "close": round(float(c), 2),
            "volume": int(rng.integers(200_000, 2_000_000)),
        })
    return rows
