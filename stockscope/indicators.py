# stockscope/indicators.py
"""Technical indicators over an observation sequence.

Points may be ``Observation`` models or raw mappings with the same keys.

Every function is pure and returns a fresh list. A result of length ``L``
computed from ``N`` observations lines up with the source tail: element ``i``
belongs to observation ``i + (N - L)``.
"""
from __future__ import annotations
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence
import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from stockscope.models import BollingerBands, DatedValue, MACDResult, Observation, VolumeLevel
from stockscope.sanitizer import as_number

def _field(point: Any, name: str) -> Any:
    if isinstance(point, Mapping):
        return point.get(name)
    return getattr(point, name, None)

def _closes(data: Sequence[Observation]) -> np.ndarray:
    """Close prices as floats, NaN where a point has no usable close."""
    vals = [as_number(_field(d, "close")) for d in data]
    return np.array([np.nan if v is None else v for v in vals], dtype=float)

def _r2(x: float) -> float:
    return round(float(x), 2)

def _window_means(closes: np.ndarray, period: int):
    windows = sliding_window_view(closes, period)
    valid = ~np.isnan(windows)
    counts = valid.sum(axis=1)
    sums = np.where(valid, windows, 0.0).sum(axis=1)
    return windows, valid, counts, sums

def sma(data: Sequence[Observation], period: int) -> List[float]:
    if not data or period <= 0 or len(data) < period:
        return []
    _, _, counts, sums = _window_means(_closes(data), period)
    return [_r2(s / c) for s, c in zip(sums, counts) if c > 0]

def ema(values: Sequence[Optional[float]], period: int) -> List[float]:
    """Exponential moving average seeded with the simple mean of the first ``period`` values.

    Missing values count as 0. Each step is rounded to 2 decimals before
    feeding the next one, so rounding compounds along the series.
    """
    if period <= 0 or len(values) < period:
        return []
    raw = [as_number(v) or 0.0 for v in values]
    k = 2 / (period + 1)
    out = [_r2(sum(raw[:period]) / period)]
    for v in raw[period:]:
        out.append(_r2(v * k + out[-1] * (1 - k)))
    return out

def rsi(data: Sequence[Observation], period: int = 14) -> List[float]:
    if not data or period <= 0 or len(data) <= period:
        return []
    closes = _closes(data)
    # a change touching an unusable close counts as flat
    changes = np.nan_to_num(np.diff(closes), nan=0.0)
    gains = sliding_window_view(np.where(changes > 0, changes, 0.0), period).sum(axis=1) / period
    losses = sliding_window_view(np.where(changes < 0, -changes, 0.0), period).sum(axis=1) / period

    out: List[float] = []
    for avg_gain, avg_loss in zip(gains, losses):
        if avg_loss == 0:
            out.append(100.0)
        else:
            out.append(_r2(100 - 100 / (1 + avg_gain / avg_loss)))
    return out

def macd(data: Sequence[Observation], fast: int = 12, slow: int = 26, signal: int = 9) -> MACDResult:
    closes = [_field(d, "close") for d in data]
    ema_fast = ema(closes, fast)
    ema_slow = ema(closes, slow)
    if not ema_slow:
        return MACDResult()

    offset = len(ema_fast) - len(ema_slow)
    line = [_r2(ema_fast[i + offset] - s) for i, s in enumerate(ema_slow)]
    sig = ema(line, signal)
    lag = len(line) - len(sig)
    hist = [_r2(line[i + lag] - s) for i, s in enumerate(sig)]
    return MACDResult(macd=line, signal=sig, histogram=hist)

def bollinger_bands(data: Sequence[Observation], period: int = 20, std_dev: float = 2) -> BollingerBands:
    if not data or period <= 0 or len(data) < period:
        return BollingerBands()
    windows, valid, counts, sums = _window_means(_closes(data), period)
    keep = counts > 0
    middle = [_r2(s / c) for s, c in zip(sums[keep], counts[keep])]

    upper: List[float] = []
    lower: List[float] = []
    for mid, window, mask in zip(middle, windows[keep], valid[keep]):
        # population deviation around the published (rounded) middle band
        sigma = float(np.sqrt(np.mean((window[mask] - mid) ** 2)))
        upper.append(_r2(mid + std_dev * sigma))
        lower.append(_r2(mid - std_dev * sigma))
    return BollingerBands(upper=upper, middle=middle, lower=lower)

def volume_profile(data: Sequence[Observation], levels: int = 10) -> List[VolumeLevel]:
    """Volume summed into ``levels`` equal-width price bins.

    Bins are half-open ``[lower, upper)``, so a close exactly at the highest
    price falls outside the top bin.
    """
    pairs = ((as_number(_field(d, "close")), as_number(_field(d, "volume"))) for d in data)
    points = [(p, v) for p, v in pairs if p is not None and p > 0 and v is not None and v > 0]
    if not points or levels <= 0:
        return []
    prices = np.array([p for p, _ in points])
    volumes = np.array([v for _, v in points])
    lo, hi = prices.min(), prices.max()
    step = (hi - lo) / levels

    profile: List[VolumeLevel] = []
    for i in range(levels):
        lower = lo + step * i
        upper = lo + step * (i + 1)
        in_bin = (prices >= lower) & (prices < upper)
        profile.append(VolumeLevel(price=_r2((lower + upper) / 2), volume=float(volumes[in_bin].sum())))
    return profile

def align_to_dates(data: Sequence[Observation], series: Sequence[float]) -> List[DatedValue]:
    """Pair an indicator series with the dates of the observations it ends on."""
    offset = len(data) - len(series)
    if offset < 0:
        return []
    return [DatedValue(date=str(_field(data[i + offset], "date")), value=v) for i, v in enumerate(series)]
