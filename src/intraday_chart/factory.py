from __future__ import annotations

import importlib
from dataclasses import dataclass

from intraday_chart.interfaces import CandleParser
from intraday_chart.models import Source


@dataclass(frozen=True)
class SourceMetadata:
  class_path: str


_SOURCES = {
  Source.EQUITY_INDEX: SourceMetadata(
    class_path="intraday_chart.sources.polygon.PolygonIndexParser"
  ),
  Source.CURRENCY_PAIR: SourceMetadata(
    class_path="intraday_chart.sources.oanda.OandaCandleParser"
  ),
}


class ParserFactory:
  @staticmethod
  def _import_from_string(path: str) -> type:
    """Helper to dynamically import a class from a string path."""
    module_name, class_name = path.rsplit(".", 1)
    module = importlib.import_module(module_name)
    return getattr(module, class_name)

  def create(self, source: Source) -> CandleParser:
    """Creates the record parser registered for a candle source."""
    metadata = _SOURCES.get(source)
    if not metadata:
      raise ValueError(f"No candle parser registered for source '{source}'.")

    parser_class = self._import_from_string(metadata.class_path)
    return parser_class()
