from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from intraday_chart.interfaces import CandleParser
from intraday_chart.models import InstrumentSpec
from intraday_chart.utils.parsers import epoch_ms_to_seconds, to_unix_seconds

# --- Module-level Constants ---
_INDEX_TICKER_PREFIX = "I:"


def index_ticker(symbol: str) -> str:
  """Polygon tags index aggregates as `I:<SYMBOL>`, e.g. `I:SPX`."""
  return f"{_INDEX_TICKER_PREFIX}{symbol}"


class PolygonIndexParser(CandleParser):
  """Parses equity-index aggregates (`s` start time in epoch milliseconds).

  The index endpoint can return several indices in one batch, so records
  are filtered on their `sym` tag. Untagged records are kept.
  """

  def accepts(self, record: Mapping[str, Any], spec: InstrumentSpec) -> bool:
    tag = record.get("sym")
    return not tag or tag == index_ticker(spec.symbol)

  def parse_time(self, record: Mapping[str, Any]) -> int | None:
    start = record.get("s")
    if start is not None:
      return epoch_ms_to_seconds(start)
    # Bars that were already normalized carry `time` in seconds.
    return to_unix_seconds(record.get("time"))
