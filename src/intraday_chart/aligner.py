from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import ValidationError

from intraday_chart.models import (
  CandleBar,
  Direction,
  LineStyle,
  Marker,
  MarkerPosition,
  MarkerShape,
  PriceLine,
  TradeExecution,
  TradeOverlay,
)
from intraday_chart.utils.parsers import to_unix_seconds

# --- Module-level Constants ---
DEFAULT_SNAP_TOLERANCE_SECONDS = 300  # one M5 bar

LONG_COLOR = "#26a69a"
SHORT_COLOR = "#ef5350"
ENTRY_COLOR = "#2962ff"


def parse_trades(raw_trades: Iterable[Any] | None) -> list[TradeExecution]:
  """Validates trade-history records, skipping the ones that don't parse."""
  trades: list[TradeExecution] = []
  for raw in raw_trades or []:
    if isinstance(raw, TradeExecution):
      trades.append(raw)
      continue
    try:
      trades.append(TradeExecution.model_validate(raw))
    except ValidationError as e:
      logging.warning(f"Skipping trade record due to validation error: {e}")
  return trades


def select_day_trades(
  trades: Iterable[TradeExecution], day: str, broker_symbol: str
) -> list[TradeExecution]:
  """Keeps the executions of one trading day (YYYY-MM-DD) on one instrument."""
  return [
    t
    for t in trades
    if t.timestamp.startswith(day) and t.instrument == broker_symbol
  ]


def snap_tolerance_for(
  bars: Sequence[CandleBar], default: int = DEFAULT_SNAP_TOLERANCE_SECONDS
) -> int:
  """Derives the snap tolerance from the feed granularity.

  The granularity is the smallest positive gap between bars; missing bars
  only widen gaps, so they can't loosen the tolerance. The result never
  exceeds `default`.
  """
  granularity = min(
    (
      later.time - earlier.time
      for earlier, later in zip(bars, bars[1:])
      if later.time > earlier.time
    ),
    default=None,
  )
  if granularity is None:
    return default
  return min(granularity, default)


def _nearest_bar(bars: Sequence[CandleBar], ts: int) -> tuple[CandleBar, int]:
  best = bars[0]
  best_distance = abs(best.time - ts)
  for bar in bars[1:]:
    distance = abs(bar.time - ts)
    if distance < best_distance:
      best, best_distance = bar, distance
  return best, best_distance


def _marker_for(trade: TradeExecution, time: int, decimals: int) -> Marker:
  price = trade.price
  text = trade.direction.value
  if price is not None:
    text = f"{text} @ {price:.{decimals}f}"

  if trade.direction is Direction.LONG:
    return Marker(
      time=time,
      position=MarkerPosition.BELOW_BAR,
      color=LONG_COLOR,
      shape=MarkerShape.ARROW_UP,
      text=text,
    )
  return Marker(
    time=time,
    position=MarkerPosition.ABOVE_BAR,
    color=SHORT_COLOR,
    shape=MarkerShape.ARROW_DOWN,
    text=text,
  )


def _price_lines_for(trade: TradeExecution) -> list[PriceLine]:
  lines = []
  if trade.price is not None:
    lines.append(PriceLine(price=trade.price, title="Entry", color=ENTRY_COLOR))
  if trade.sl is not None:
    lines.append(
      PriceLine(
        price=trade.sl, title="SL", color=SHORT_COLOR, line_style=LineStyle.DOTTED
      )
    )
  if trade.tp is not None:
    lines.append(
      PriceLine(
        price=trade.tp, title="TP", color=LONG_COLOR, line_style=LineStyle.DOTTED
      )
    )
  return lines


def align_trades(
  bars: Sequence[CandleBar],
  trades: Iterable[TradeExecution],
  decimals: int,
  tolerance: int = DEFAULT_SNAP_TOLERANCE_SECONDS,
) -> TradeOverlay:
  """Snaps executions onto the nearest bar and builds their chart annotations.

  An execution further than `tolerance` seconds from every bar is left
  off the chart: it most likely belongs to another day or instrument.
  Each placed execution yields one marker plus entry/SL/TP price lines
  for whichever of those prices it carries.

  Args:
    bars: Canonical series, ascending by time.
    trades: Executions already narrowed to the selected day and instrument.
    decimals: Price precision used in marker labels.
    tolerance: Maximum distance in seconds between execution and bar.

  Returns:
    TradeOverlay with markers sorted by time.
  """
  if not bars:
    return TradeOverlay()

  markers: list[Marker] = []
  price_lines: list[PriceLine] = []
  for trade in trades:
    ts = to_unix_seconds(trade.timestamp)
    if ts is None:
      logging.debug(f"Dropping trade with unparseable timestamp {trade.timestamp!r}")
      continue

    bar, distance = _nearest_bar(bars, ts)
    if distance > tolerance:
      logging.debug(
        f"Dropping {trade.direction.value} trade at {trade.timestamp}: "
        f"nearest bar is {distance}s away (tolerance {tolerance}s)"
      )
      continue

    markers.append(_marker_for(trade, bar.time, decimals))
    price_lines.extend(_price_lines_for(trade))

  markers.sort(key=lambda m: m.time)
  return TradeOverlay(markers=markers, price_lines=price_lines)
