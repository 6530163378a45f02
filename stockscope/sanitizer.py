# stockscope/sanitizer.py
from __future__ import annotations
import logging
import math
import numbers
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, List, Optional
from stockscope.models import Observation

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS = ("open", "high", "low", "close", "volume", "sentiment", "confidence")


def is_number(value: Any) -> bool:
    """True for finite real numbers. None, bools, strings, NaN and inf are not numbers."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        # ints past the float range, e.g. long integer literals from json
        return False


def as_number(value: Any) -> Optional[float]:
    return float(value) if is_number(value) else None


def is_valid_data_point(item: Any) -> bool:
    if isinstance(item, Observation):
        return True
    return isinstance(item, Mapping) and "date" in item


def _today() -> str:
    return date.today().isoformat()


def _placeholder() -> Observation:
    return Observation(date=_today(), close=0.0)


def _keywords(raw: Any) -> Optional[List[str]]:
    if raw is None or isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        return None
    return [k for k in raw if isinstance(k, str)]


def _sanitize_one(item: Any) -> Observation:
    if isinstance(item, Observation):
        item = item.model_dump()
    elif not isinstance(item, Mapping):
        logger.debug(f"Replacing malformed observation {item!r} with placeholder")
        return _placeholder()

    fields = {name: as_number(item.get(name)) for name in _NUMERIC_FIELDS}

    raw_date = item.get("date")
    fields["date"] = str(raw_date) if raw_date not in (None, "") else _today()
    fields["keywords"] = _keywords(item.get("keywords"))

    # close falls back to sentiment (document mode), then to zero
    if fields["close"] is None:
        fields["close"] = fields["sentiment"] if fields["sentiment"] is not None else 0.0

    return Observation(**fields)


def ensure_valid_data(raw: Any) -> List[Observation]:
    """Normalize a raw observation sequence so every element has a date and a numeric close.

    Always returns a list of the same length and order as the input; a
    non-sequence input yields an empty list. Never raises.
    """
    if raw is None or isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
        logger.warning("Invalid data provided to ensure_valid_data; expected a sequence")
        return []
    return [_sanitize_one(item) for item in raw]
