# stockscope/main.py
import os
import json
import logging
from typing import Any, Optional, Tuple
import typer
from pydantic import ValidationError

from stockscope.config import load_cfg
from stockscope.formatting import format_number, percentage_change
from stockscope.models import FundamentalsRecord
from stockscope.processor import analyze as run_analysis, sample_observations
from stockscope.sanitizer import ensure_valid_data

app = typer.Typer(add_completion=False)

DATA_TYPES = ("marketData", "documentAnalysis")


def _ensure_parent(path: str):
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def _read_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise typer.BadParameter(f"Cannot read {path}: {e}")


def _unpack(payload: Any) -> Tuple[Any, Optional[dict], Optional[str], Optional[str]]:
    """Accept either a bare observation list or an upload-style object."""
    if isinstance(payload, dict):
        return (
            payload.get("data", []),
            payload.get("fundamentalData"),
            payload.get("ticker"),
            payload.get("dataType"),
        )
    return payload, None, None, None


def _validate_data_type(value: str) -> str:
    if value not in DATA_TYPES:
        raise typer.BadParameter(f"data type must be one of {', '.join(DATA_TYPES)}")
    return value


@app.command()
def analyze(
    input: str = typer.Option(..., "--input", "-i", help="Observations JSON file"),
    fundamentals: str = typer.Option(None, "--fundamentals", "-f", help="Fundamentals JSON file"),
    ticker: str = typer.Option(None, "--ticker", "-t", help="Stock symbol"),
    data_type: str = typer.Option(None, "--data-type", help="marketData or documentAnalysis"),
    output: str = typer.Option(None, "--output", "-o", help="Output JSON file"),
    config: str = typer.Option("config.yaml", "--config"),
):
    # Load config
    try:
        cfg = load_cfg(config)
    except ValidationError as e:
        raise typer.BadParameter(f"Invalid config {config}: {e}")
    logging.basicConfig(level=getattr(logging, cfg.log_level))

    data, embedded_funds, embedded_ticker, embedded_type = _unpack(_read_json(input))
    ticker = (ticker or embedded_ticker or "UNKNOWN").upper()
    data_type = _validate_data_type(data_type or embedded_type or "marketData")
    logging.info(f"Starting analysis for {ticker}")

    funds_raw = _read_json(fundamentals) if fundamentals else embedded_funds
    record = None
    if funds_raw is not None:
        try:
            record = FundamentalsRecord.model_validate(funds_raw)
        except ValidationError as e:
            raise typer.BadParameter(f"Invalid fundamentals: {e}")

    if output is None:
        output = os.path.join(cfg.output_dir, f"{ticker}.json")
    _ensure_parent(output)

    report = run_analysis(data, record, ticker=ticker, data_type=data_type, settings=cfg)

    logging.info(f"Writing JSON to {output}")
    with open(output, "w", encoding="utf-8") as f:
        json.dump(report.model_dump(by_alias=True), f, ensure_ascii=False, indent=2)

    # Console summary
    rec = report.recommendation
    typer.echo(f" Saved: {output}")
    typer.echo(f" {ticker}: {rec.recommendation} ({format_number(rec.confidence * 100, 0)}% confidence)")
    typer.echo(f" Fundamental score: {format_number(report.scores.overall_score, 1)}/10")
    rows = ensure_valid_data(data) if data_type == "marketData" else []
    if len(rows) >= 2:
        change = percentage_change(rows[-1].close, rows[-2].close)
        typer.echo(f" Last close: {format_number(rows[-1].close)}" + (f" ({change} vs previous)" if change else ""))
    for point in rec.positive_points:
        typer.echo(f"  + {point}")
    for point in rec.negative_points:
        typer.echo(f"  - {point}")


@app.command()
def sample(
    output: str = typer.Option(..., "--output", "-o", help="Where to write the synthetic input"),
    data_type: str = typer.Option("marketData", "--data-type"),
    periods: int = typer.Option(60, "--periods", min=1),
    ticker: str = typer.Option("SMPL", "--ticker", "-t"),
    seed: int = typer.Option(7, "--seed"),
):
    data_type = _validate_data_type(data_type)
    payload = {
        "ticker": ticker.upper(),
        "dataType": data_type,
        "data": sample_observations(data_type, periods=periods, seed=seed),
    }
    _ensure_parent(output)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    typer.echo(f" Saved {periods} synthetic observations to {output}")


if __name__ == "__main__":
    app()
