# stockscope/config.py
from __future__ import annotations
import os
from typing import List
import yaml
from pydantic import BaseModel, Field, field_validator
from stockscope.models import FundamentalsRecord

# Used when an analysis run comes without a fundamentals snapshot
DEFAULT_FUNDAMENTALS = FundamentalsRecord(
    pe=18.5,
    eps=3.75,
    roe=0.14,
    debt_to_equity=0.65,
    current_ratio=1.8,
    quick_ratio=1.2,
    profit_margin=0.12,
    dividend_yield=0.03,
)


class Settings(BaseModel):
    log_level: str = "INFO"
    output_dir: str = "out"
    sma_periods: List[int] = Field(default_factory=lambda: [20, 50, 200])
    rsi_period: int = 14
    bollinger_period: int = 20
    bollinger_std_dev: float = 2.0
    volume_levels: int = 10
    dcf_growth_rate: float = 0.07
    dcf_discount_rate: float = 0.09
    dcf_terminal_multiple: float = 15.0
    default_fundamentals: FundamentalsRecord = DEFAULT_FUNDAMENTALS

    @field_validator("log_level")
    def known_level(cls, v):
        v = str(v).upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return v

    @field_validator("rsi_period", "bollinger_period", "volume_levels")
    def positive(cls, v):
        if v <= 0:
            raise ValueError("must be positive")
        return v


def load_cfg(path: str) -> Settings:
    if not path or not os.path.exists(path):
        return Settings()
    with open(path, "r", encoding="utf-8") as f:
        return Settings.model_validate(yaml.safe_load(f) or {})
