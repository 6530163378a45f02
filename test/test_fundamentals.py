import pytest

from stockscope.fundamentals import (
    analyze_dividend_growth, growth_score, intrinsic_value, score_fundamentals, stability_score, value_score,
)
from stockscope.models import FundamentalsRecord

# every metric sits between thresholds, so all sub-scores stay at the 5.0 baseline
NEUTRAL = dict(pe=20, eps=1, roe=0.07, debt_to_equity=0.7, current_ratio=1.2,
               quick_ratio=0.8, profit_margin=0.07, dividend_yield=0.0)

def _rec(**overrides):
    return FundamentalsRecord(**{**NEUTRAL, **overrides})

def test_neutral_baseline():
    scores = score_fundamentals(_rec())
    assert (scores.value_score, scores.growth_score, scores.stability_score, scores.overall_score) == (5.0, 5.0, 5.0, 5.0)

def test_reference_company_scores():
    rec = FundamentalsRecord(pe=16.8, eps=4.2, roe=0.15, debtToEquity=0.45, currentRatio=2.1,
                             quickRatio=1.7, profitMargin=0.14, dividendYield=0.025)
    scores = score_fundamentals(rec)
    assert scores.value_score == 5.5
    assert scores.growth_score == 7.0
    assert scores.stability_score == 9.0
    assert scores.overall_score == 7.2

@pytest.mark.parametrize("pe,expected", [(8, 7.0), (12, 6.0), (20, 5.0), (40, 4.0), (60, 3.0), (10000, 3.0)])
def test_pe_chain_checks_extreme_thresholds_first(pe, expected):
    assert value_score(_rec(pe=pe)) == expected

def test_eps_rules_stack():
    assert value_score(_rec(eps=6)) == 6.0
    assert value_score(_rec(eps=12)) == 6.5

@pytest.mark.parametrize("dy,expected", [(0.06, 6.5), (0.04, 6.0), (0.02, 5.5), (0.005, 5.0)])
def test_dividend_chain(dy, expected):
    assert value_score(_rec(dividend_yield=dy)) == expected

@pytest.mark.parametrize("margin,expected", [(0.25, 7.0), (0.15, 6.0), (0.03, 4.5), (-0.1, 3.5)])
def test_negative_margin_checked_before_low_margin(margin, expected):
    assert growth_score(_rec(profit_margin=margin)) == expected

@pytest.mark.parametrize("roe,expected", [(0.25, 7.0), (0.18, 6.5), (0.12, 6.0), (0.01, 4.0)])
def test_roe_chain(roe, expected):
    assert growth_score(_rec(roe=roe)) == expected

@pytest.mark.parametrize("de,expected", [(0.2, 7.0), (0.4, 6.0), (1.2, 4.0), (2.0, 3.0)])
def test_debt_chain(de, expected):
    assert stability_score(_rec(debt_to_equity=de)) == expected

def test_liquidity_chains():
    assert stability_score(_rec(current_ratio=2.5, quick_ratio=2.0)) == 8.0
    assert stability_score(_rec(current_ratio=1.6, quick_ratio=1.2)) == 7.0
    assert stability_score(_rec(current_ratio=0.5, quick_ratio=0.5)) == 3.0

@pytest.mark.parametrize("overrides", [
    dict(pe=10000, eps=-5, roe=-3, profit_margin=-9, debt_to_equity=50, current_ratio=0, quick_ratio=0),
    dict(pe=1, eps=100, dividend_yield=0.5, roe=5, profit_margin=5, debt_to_equity=0, current_ratio=9, quick_ratio=9),
])
def test_scores_bounded_and_overall_is_mean(overrides):
    s = score_fundamentals(_rec(**overrides))
    for v in (s.value_score, s.growth_score, s.stability_score, s.overall_score):
        assert 0 <= v <= 10
    assert s.overall_score == round((s.value_score + s.growth_score + s.stability_score) / 3, 1)

def test_intrinsic_value():
    # growth equal to discount leaves ten undiscounted years plus a 15x terminal
    assert intrinsic_value(_rec(eps=4), growth_rate=0.09, discount_rate=0.09) == pytest.approx(100.0)
    assert intrinsic_value(_rec(eps=0)) == 0.0
    one = intrinsic_value(_rec(eps=1))
    assert intrinsic_value(_rec(eps=2)) == pytest.approx(2 * one, abs=0.01)
    assert 20 < one < 25

def test_dividend_growth_ratings():
    excellent = analyze_dividend_growth([{"year": 2020, "dividend": 1.0}, {"year": 2021, "dividend": 1.1},
                                         {"year": 2022, "dividend": 1.21}])
    assert excellent.rating == "Excellent"
    assert excellent.growth_rate == pytest.approx(0.1)
    assert excellent.sustainable_rate == pytest.approx(0.1)

    assert analyze_dividend_growth([{"year": 1, "dividend": 1.0}, {"year": 2, "dividend": 1.06}]).rating == "Good"
    assert analyze_dividend_growth([{"year": 1, "dividend": 1.0}, {"year": 2, "dividend": 1.03}]).rating == "Fair"
    assert analyze_dividend_growth([{"year": 1, "dividend": 1.0}, {"year": 2, "dividend": 1.01}]).rating == "Poor"

def test_dividend_growth_caps_sustainable_rate():
    fast = analyze_dividend_growth([{"year": 1, "dividend": 1.0}, {"year": 2, "dividend": 1.5}])
    assert fast.growth_rate == pytest.approx(0.5)
    assert fast.sustainable_rate == 0.15

def test_dividend_growth_degenerate_history():
    for history in ([], [{"year": 2020, "dividend": 1.0}], [{"year": 1, "dividend": 0}, {"year": 2, "dividend": 1}]):
        g = analyze_dividend_growth(history)
        assert (g.growth_rate, g.sustainable_rate, g.rating) == (0.0, 0.0, "Poor")
    cut = analyze_dividend_growth([{"year": 1, "dividend": 1.0}, {"year": 2, "dividend": 0.0}])
    assert cut.growth_rate == -1.0 and cut.rating == "Poor"
