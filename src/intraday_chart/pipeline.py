from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from intraday_chart.aligner import (
  align_trades,
  parse_trades,
  select_day_trades,
  snap_tolerance_for,
)
from intraday_chart.catalog import InstrumentCatalog
from intraday_chart.legend import legend_for
from intraday_chart.models import CandleBar, ChartView, InstrumentSpec, OpeningRange
from intraday_chart.normalizer import normalize_candles
from intraday_chart.overlay import overlay_for

T = TypeVar("T")


def build_chart_view(
  spec: InstrumentSpec,
  day: str,
  raw_candles: Iterable[Any] | None,
  trades: Iterable[Any] | None,
  opening_range: OpeningRange | Mapping[str, Any] | None,
  catalog: InstrumentCatalog,
  hovered: CandleBar | None = None,
  tolerance: int | None = None,
) -> ChartView:
  """Runs the whole chart pipeline for one (day, instrument) selection.

  The result is rebuilt from scratch on every call; nothing from a
  previous selection is reused. When no tolerance is given it is derived
  from the bar granularity, capped at one M5 bar.
  """
  bars = normalize_candles(raw_candles, spec)
  if not bars:
    logging.info(f"No {spec.symbol} candle data for {day}.")
    return ChartView(instrument=spec, day=day)

  broker_symbol = catalog.to_broker_symbol(spec.symbol)
  day_trades = select_day_trades(parse_trades(trades), day, broker_symbol)
  if tolerance is None:
    tolerance = snap_tolerance_for(bars)

  overlay = align_trades(bars, day_trades, spec.decimals, tolerance=tolerance)
  logging.debug(
    f"{spec.symbol} {day}: {len(bars)} bars, "
    f"{len(overlay.markers)}/{len(day_trades)} trades placed"
  )

  return ChartView(
    instrument=spec,
    day=day,
    bars=bars,
    overlay=overlay,
    legend=legend_for(hovered, bars),
    range_overlay=overlay_for(spec, opening_range),
  )


@dataclass(frozen=True)
class SelectionKey:
  """Identifies the chart selection a fetch was issued for."""

  day: str
  instrument: str


class SelectionGuard:
  """Drops fetch results that arrive after the selection has moved on.

  Call `begin()` when the user picks a day/instrument and tag each fetch
  with the returned key; pass results through `accept()` when they land.
  """

  def __init__(self) -> None:
    self._current: SelectionKey | None = None

  @property
  def current(self) -> SelectionKey | None:
    return self._current

  def begin(self, day: str, instrument: str) -> SelectionKey:
    self._current = SelectionKey(day=day, instrument=instrument)
    return self._current

  def is_current(self, key: SelectionKey) -> bool:
    return key == self._current

  def accept(self, key: SelectionKey, result: T) -> T | None:
    if not self.is_current(key):
      logging.info(
        f"Discarding stale result for {key.instrument} {key.day} "
        f"(current selection: {self._current})"
      )
      return None
    return result
