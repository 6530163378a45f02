# stockscope/models.py
from __future__ import annotations
from typing import Dict, List, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

RecommendationLabel = Literal["STRONG BUY", "BUY", "HOLD", "SELL", "STRONG SELL"]
SentimentTrend = Literal["improving", "declining", "stable"]
DividendRating = Literal["Excellent", "Good", "Fair", "Poor"]
DataType = Literal["marketData", "documentAnalysis"]

MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 0.9


class _Record(BaseModel):
    # camelCase on the wire, snake_case in Python; immutable once built
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Observation(_Record):
    date: str
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None
    volume: Optional[float] = None
    sentiment: Optional[float] = None  # 0..1
    confidence: Optional[float] = None  # 0..1
    keywords: Optional[List[str]] = None


class FundamentalsRecord(_Record):
    pe: float
    eps: float
    roe: float
    debt_to_equity: float
    current_ratio: float
    quick_ratio: float
    profit_margin: float
    dividend_yield: float


class ScoreSet(_Record):
    value_score: float = Field(ge=0, le=10)
    growth_score: float = Field(ge=0, le=10)
    stability_score: float = Field(ge=0, le=10)
    overall_score: float = Field(ge=0, le=10)


class Recommendation(_Record):
    recommendation: RecommendationLabel
    confidence: float
    positive_points: List[str] = Field(default_factory=list)
    negative_points: List[str] = Field(default_factory=list)
    summary: str

    @field_validator("confidence")
    def confidence_in_range(cls, v):
        if not MIN_CONFIDENCE <= v <= MAX_CONFIDENCE:
            raise ValueError(f"confidence must be within [{MIN_CONFIDENCE}, {MAX_CONFIDENCE}]")
        return v


class BollingerBands(_Record):
    upper: List[float] = Field(default_factory=list)
    middle: List[float] = Field(default_factory=list)
    lower: List[float] = Field(default_factory=list)


class MACDResult(_Record):
    macd: List[float] = Field(default_factory=list)
    signal: List[float] = Field(default_factory=list)
    histogram: List[float] = Field(default_factory=list)


class VolumeLevel(_Record):
    price: float
    volume: float


class DatedValue(_Record):
    date: str
    value: float


class SentimentSummary(_Record):
    overall_sentiment: float
    trend: SentimentTrend
    key_insights: List[str] = Field(default_factory=list)


class DividendPoint(_Record):
    year: int
    dividend: float


class DividendGrowth(_Record):
    growth_rate: float
    sustainable_rate: float
    rating: DividendRating


class IndicatorBlock(_Record):
    sma: Dict[str, List[float]] = Field(default_factory=dict)  # "sma20" -> series
    rsi: List[DatedValue] = Field(default_factory=list)
    macd: MACDResult = Field(default_factory=MACDResult)
    macd_dates: List[str] = Field(default_factory=list)
    bollinger: BollingerBands = Field(default_factory=BollingerBands)
    volume_profile: List[VolumeLevel] = Field(default_factory=list)


class AnalysisReport(_Record):
    ticker: str
    data_type: DataType
    generated_at: str
    observations: int
    indicators: IndicatorBlock
    scores: ScoreSet
    intrinsic_value: float
    recommendation: Recommendation
    sentiment: Optional[SentimentSummary] = None
    insights: List[str] = Field(default_factory=list)
