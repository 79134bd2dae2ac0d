from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from intraday_chart.models import CandleBar, InstrumentSpec
from intraday_chart.utils.parsers import first_present, to_float

OPEN_KEYS = ("o", "open")
HIGH_KEYS = ("h", "high")
LOW_KEYS = ("l", "low")
CLOSE_KEYS = ("c", "close")


class CandleParser(ABC):
  """Abstract base class for turning one feed's raw records into bars."""

  def accepts(self, record: Mapping[str, Any], spec: InstrumentSpec) -> bool:
    """Whether a record belongs to `spec` in a possibly multi-symbol batch.

    Feeds that only ever return one instrument accept everything.
    """
    return True

  @abstractmethod
  def parse_time(self, record: Mapping[str, Any]) -> int | None:
    """Resolves the record's bar time as unix seconds, or None if unusable."""
    pass

  def parse(self, record: Mapping[str, Any]) -> CandleBar | None:
    """Builds a canonical bar, or returns None for records without open/time.

    Missing high/low/close default to the open so every bar is drawable.
    """
    open_ = to_float(first_present(record, OPEN_KEYS))
    if open_ is None:
      return None
    time = self.parse_time(record)
    if time is None or time <= 0:
      return None

    high = to_float(first_present(record, HIGH_KEYS))
    low = to_float(first_present(record, LOW_KEYS))
    close = to_float(first_present(record, CLOSE_KEYS))
    return CandleBar(
      time=time,
      open=open_,
      high=open_ if high is None else high,
      low=open_ if low is None else low,
      close=open_ if close is None else close,
    )
