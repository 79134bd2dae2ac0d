from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from intraday_chart.factory import ParserFactory
from intraday_chart.models import CandleBar, InstrumentSpec


def _as_record(item: Any) -> Mapping[str, Any] | None:
  if isinstance(item, CandleBar):
    return item.model_dump()
  if isinstance(item, Mapping):
    return item
  return None


def normalize_candles(
  raw_batch: Iterable[Any] | None,
  spec: InstrumentSpec,
  factory: ParserFactory | None = None,
) -> list[CandleBar]:
  """Converts a raw candle batch into an ascending canonical bar series.

  Records for other symbols, and records without a usable open or time,
  are dropped. Ties on `time` keep batch order. An empty or fully invalid
  batch yields an empty list, which callers treat as "no chart data".

  Args:
    raw_batch: Records as returned by the candle endpoint of `spec.source`.
      Already-normalized bars (or their dicts) are accepted as well.
    spec: The instrument being charted.
    factory: Parser factory override, mainly for tests.

  Returns:
    List of CandleBar objects sorted by time.
  """
  if not raw_batch:
    return []

  parser = (factory or ParserFactory()).create(spec.source)

  bars: list[CandleBar] = []
  skipped_symbol = 0
  skipped_invalid = 0
  for item in raw_batch:
    record = _as_record(item)
    if record is None:
      skipped_invalid += 1
      continue
    if not parser.accepts(record, spec):
      skipped_symbol += 1
      continue
    bar = parser.parse(record)
    if bar is None:
      skipped_invalid += 1
      continue
    bars.append(bar)

  if skipped_symbol or skipped_invalid:
    logging.debug(
      "Normalized %d %s candles (%d for other symbols, %d invalid dropped)",
      len(bars),
      spec.symbol,
      skipped_symbol,
      skipped_invalid,
    )

  # sorted() is stable, so duplicate timestamps keep their batch order.
  return sorted(bars, key=lambda bar: bar.time)
