from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from intraday_chart.interfaces import CandleParser
from intraday_chart.utils.parsers import to_unix_seconds


class OandaCandleParser(CandleParser):
  """Parses currency-pair candles whose `time` is an RFC 3339 string.

  OANDA sends nanosecond fractions (`2024-03-01T14:35:00.000000000Z`);
  these are floored to whole seconds. The backend already filters the
  batch to a single instrument.
  """

  def parse_time(self, record: Mapping[str, Any]) -> int | None:
    return to_unix_seconds(record.get("time"))
