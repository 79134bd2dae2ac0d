from __future__ import annotations

import functools
import json
import logging
import os
import sys
from datetime import date
from typing import Any

import click
from dotenv import load_dotenv

from intraday_chart.adapter import to_chart_payload
from intraday_chart.catalog import InstrumentCatalog, default_catalog
from intraday_chart.client import API_BASE_ENV_VAR, DashboardApiError, DashboardClient
from intraday_chart.models import ChartView, InstrumentSpec, Source
from intraday_chart.normalizer import normalize_candles
from intraday_chart.pipeline import build_chart_view
from intraday_chart.utils.savers import save_to_csv, save_to_json

# --- Setup ---
logging.basicConfig(
  level=logging.INFO,
  format="%(asctime)s - %(levelname)s - %(message)s",
  stream=sys.stdout,
)

# --- Error Handling Decorator ---


def cli_error_handler(func):
  """Decorator to handle common CLI errors, log them, and exit."""

  @functools.wraps(func)
  def wrapper(*args, **kwargs):
    try:
      return func(*args, **kwargs)
    except (ValueError, TypeError, DashboardApiError) as e:
      logging.error(f"Error: {e}")
      sys.exit(1)
    except Exception as e:
      logging.error(f"An unexpected error occurred: {e}", exc_info=True)
      sys.exit(1)

  return wrapper


# --- Private Helpers ---


def _load_json_file(path: str | None) -> Any:
  if path is None:
    return None
  with open(path, encoding="utf-8") as f:
    return json.load(f)


def _resolve_instrument(catalog: InstrumentCatalog, symbol: str) -> InstrumentSpec:
  spec = catalog.lookup(symbol)
  if spec.symbol != symbol:
    logging.warning(f"Unknown instrument '{symbol}', falling back to {spec.symbol}.")
  return spec


def _fetch_inputs(
  api_base: str, spec: InstrumentSpec, day: str
) -> tuple[Any, Any, Any]:
  """Fetches candles, trades and opening range for one selection."""
  client = DashboardClient(api_base)

  logging.info(f"Fetching {spec.symbol} candles for {day} from {client.api_base}")
  candles = client.get_candles(spec, day)
  trades = client.get_trades()
  opening_range = None
  if spec.source is Source.EQUITY_INDEX:
    opening_range = client.get_opening_range(day, spec.symbol)
  return candles, trades, opening_range


def _build_view(
  ctx_obj: dict[str, Any],
  instrument: str,
  day: str,
  api_base: str | None,
  candles_file: str | None,
  trades_file: str | None,
  opening_range_file: str | None,
  tolerance: int | None,
) -> ChartView:
  catalog: InstrumentCatalog = ctx_obj["catalog"]
  spec = _resolve_instrument(catalog, instrument)

  if candles_file:
    candles = _load_json_file(candles_file)
    trades = _load_json_file(trades_file)
    opening_range = _load_json_file(opening_range_file)
  else:
    candles, trades, opening_range = _fetch_inputs(
      api_base or os.getenv(API_BASE_ENV_VAR, ""), spec, day
    )

  return build_chart_view(
    spec,
    day,
    candles,
    trades,
    opening_range,
    catalog,
    tolerance=tolerance,
  )


def _selection_options(func):
  """Input options for commands that build a full chart view."""
  options = [
    click.option(
      "--instrument", default="SPX", show_default=True, help="UI symbol (e.g., SPX, EUR_USD)."
    ),
    click.option(
      "--day", default=date.today().isoformat(), help="Trading day (YYYY-MM-DD)."
    ),
    click.option("--api-base", help=f"Dashboard API base URL (defaults to ${API_BASE_ENV_VAR})."),
    click.option(
      "--candles-file",
      type=click.Path(exists=True, dir_okay=False),
      help="Read the raw candle batch from a JSON file instead of the API.",
    ),
    click.option(
      "--trades-file",
      type=click.Path(exists=True, dir_okay=False),
      help="Trade history JSON file (used with --candles-file).",
    ),
    click.option(
      "--opening-range-file",
      type=click.Path(exists=True, dir_okay=False),
      help="Opening-range JSON file (used with --candles-file).",
    ),
    click.option(
      "--tolerance",
      type=click.IntRange(min=0),
      default=None,
      help="Trade snap tolerance in seconds. Defaults to the bar granularity, at most 300.",
    ),
  ]
  for option in reversed(options):
    func = option(func)
  return func


# --- CLI Commands ---


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx, verbose):
  """Builds intraday chart data for the trading dashboard."""
  load_dotenv()
  if verbose:
    logging.getLogger().setLevel(logging.DEBUG)
  ctx.ensure_object(dict)
  ctx.obj.setdefault("catalog", default_catalog())


@cli.command()
@click.pass_context
def instruments(ctx):
  """List the chartable instruments."""
  catalog: InstrumentCatalog = ctx.obj["catalog"]
  for spec in catalog:
    click.echo(
      f"{spec.symbol:<8} {spec.label:<12} {spec.source.value:<8} "
      f"decimals={spec.decimals} broker={catalog.to_broker_symbol(spec.symbol)}"
    )


@cli.command()
@_selection_options
@click.option("--output", help="Write the chart payload to this file under output/.")
@click.pass_context
@cli_error_handler
def build_chart(
  ctx,
  instrument,
  day,
  api_base,
  candles_file,
  trades_file,
  opening_range_file,
  tolerance,
  output,
):
  """Build the chart payload (bars, markers, price lines, legend)."""
  logging.info(f"Executing 'build-chart' for {instrument} on {day}")
  view = _build_view(
    ctx.obj, instrument, day, api_base, candles_file, trades_file, opening_range_file, tolerance
  )
  if view.is_empty:
    logging.warning("No candle data was found; the chart would be empty.")

  payload = to_chart_payload(view)
  if output:
    save_to_json(payload, output)
  else:
    click.echo(json.dumps(payload, indent=2))


@cli.command()
@click.option("--instrument", default="SPX", show_default=True, help="UI symbol.")
@click.option("--day", default=date.today().isoformat(), help="Trading day (YYYY-MM-DD).")
@click.option("--api-base", help=f"Dashboard API base URL (defaults to ${API_BASE_ENV_VAR}).")
@click.option(
  "--candles-file",
  type=click.Path(exists=True, dir_okay=False),
  help="Read the raw candle batch from a JSON file instead of the API.",
)
@click.pass_context
@cli_error_handler
def export_candles(ctx, instrument, day, api_base, candles_file):
  """Normalize one day of candles and save them as CSV."""
  logging.info(f"Executing 'export-candles' for {instrument} on {day}")
  spec = _resolve_instrument(ctx.obj["catalog"], instrument)

  if candles_file:
    raw = _load_json_file(candles_file)
  else:
    client = DashboardClient(api_base or os.getenv(API_BASE_ENV_VAR, ""))
    raw = client.get_candles(spec, day)

  bars = normalize_candles(raw, spec)
  if not bars:
    logging.warning("No candle data was fetched.")
    return

  filename = f"{spec.symbol}_candles_{day}.csv"
  logging.info(f"Saving {len(bars)} candles to {filename}...")
  save_to_csv([bar.model_dump() for bar in bars], filename)


if __name__ == "__main__":
  cli()
