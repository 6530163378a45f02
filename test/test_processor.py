import json

from stockscope.config import DEFAULT_FUNDAMENTALS, Settings
from stockscope.fundamentals import score_fundamentals
from stockscope.models import FundamentalsRecord
from stockscope.processor import analyze, sample_observations

REFERENCE = FundamentalsRecord(pe=16.8, eps=4.2, roe=0.15, debtToEquity=0.45, currentRatio=2.1,
                               quickRatio=1.7, profitMargin=0.14, dividendYield=0.025)

def test_market_report_indicator_shapes():
    raw = sample_observations("marketData", periods=60)
    report = analyze(raw, REFERENCE, ticker="SMPL")
    ind = report.indicators

    assert report.observations == 60
    assert len(ind.sma["sma20"]) == 41
    assert len(ind.sma["sma50"]) == 11
    assert ind.sma["sma200"] == []
    assert len(ind.rsi) == 60 - 14
    assert ind.rsi[-1].date == raw[-1]["date"]
    assert len(ind.macd.macd) == 35
    assert len(ind.macd_dates) == len(ind.macd.histogram) == 27
    assert ind.macd_dates[-1] == raw[-1]["date"]
    assert len(ind.bollinger.middle) == 41
    assert len(ind.volume_profile) == 10
    assert report.scores.overall_score == 7.2
    assert report.sentiment is None
    assert 0.3 <= report.recommendation.confidence <= 0.9
    assert report.insights

def test_missing_fundamentals_use_defaults():
    report = analyze(sample_observations(periods=30))
    assert report.scores == score_fundamentals(DEFAULT_FUNDAMENTALS)

def test_settings_drive_indicator_periods():
    settings = Settings(sma_periods=[5], rsi_period=5, volume_levels=4)
    report = analyze(sample_observations(periods=30), REFERENCE, settings=settings)
    assert list(report.indicators.sma) == ["sma5"]
    assert len(report.indicators.sma["sma5"]) == 26
    assert len(report.indicators.rsi) == 25
    assert len(report.indicators.volume_profile) == 4

def test_document_report_has_sentiment():
    raw = sample_observations("documentAnalysis", periods=12)
    report = analyze(raw, ticker="DOCU", data_type="documentAnalysis")
    assert report.sentiment is not None
    assert report.sentiment.trend in {"improving", "declining", "stable"}
    assert report.recommendation.recommendation == "HOLD"
    assert report.recommendation.confidence == 0.6

def test_empty_input_report():
    report = analyze([], REFERENCE)
    assert report.observations == 0
    assert report.recommendation.negative_points == ["Insufficient data for analysis"]
    assert report.indicators.macd.macd == []

def test_report_serializes_with_camel_case_keys():
    report = analyze(sample_observations(periods=25), REFERENCE, ticker="SMPL")
    payload = json.loads(json.dumps(report.model_dump(by_alias=True)))
    assert "positivePoints" in payload["recommendation"]
    assert "overallScore" in payload["scores"]
    assert "volumeProfile" in payload["indicators"]

def test_sample_observations_is_deterministic():
    assert sample_observations(periods=5) == sample_observations(periods=5)
    docs = sample_observations("documentAnalysis", periods=5)
    assert all(0 <= d["sentiment"] <= 1 and len(d["keywords"]) == 2 for d in docs)
