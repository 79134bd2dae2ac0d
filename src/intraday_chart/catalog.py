from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from intraday_chart.models import InstrumentSpec, Source

# --- Module-level Constants ---
_DEFAULT_DECIMALS = 5

# UI symbol -> broker symbol used by the trade/position API.
_BROKER_SYMBOLS = {
  "SPX": "SPX500_USD",
  "NDX": "NAS100_USD",
}

# Broker instruments whose quote precision differs from the FX default.
_BROKER_DECIMALS = {
  "SPX500_USD": 1,
  "NAS100_USD": 1,
  "US30_USD": 1,
  "USD_JPY": 3,
  "EUR_JPY": 3,
  "GBP_JPY": 3,
}

_INSTRUMENTS = (
  InstrumentSpec(symbol="SPX", label="S&P 500", source=Source.EQUITY_INDEX, decimals=1),
  InstrumentSpec(symbol="NDX", label="Nasdaq 100", source=Source.EQUITY_INDEX, decimals=1),
  InstrumentSpec(symbol="EUR_USD", label="EUR/USD", source=Source.CURRENCY_PAIR, decimals=5),
  InstrumentSpec(symbol="GBP_USD", label="GBP/USD", source=Source.CURRENCY_PAIR, decimals=5),
  InstrumentSpec(symbol="USD_CHF", label="USD/CHF", source=Source.CURRENCY_PAIR, decimals=5),
  InstrumentSpec(symbol="USD_JPY", label="USD/JPY", source=Source.CURRENCY_PAIR, decimals=3),
  InstrumentSpec(symbol="EUR_GBP", label="EUR/GBP", source=Source.CURRENCY_PAIR, decimals=5),
  InstrumentSpec(symbol="EUR_JPY", label="EUR/JPY", source=Source.CURRENCY_PAIR, decimals=3),
  InstrumentSpec(symbol="GBP_JPY", label="GBP/JPY", source=Source.CURRENCY_PAIR, decimals=3),
  InstrumentSpec(symbol="AUD_USD", label="AUD/USD", source=Source.CURRENCY_PAIR, decimals=5),
  InstrumentSpec(symbol="NZD_USD", label="NZD/USD", source=Source.CURRENCY_PAIR, decimals=5),
  InstrumentSpec(symbol="USD_CAD", label="USD/CAD", source=Source.CURRENCY_PAIR, decimals=5),
)


class InstrumentCatalog:
  """Read-only registry of chartable instruments.

  Lookups never fail: unknown symbols resolve to the default instrument
  (the first entry unless told otherwise) and unknown precisions to five
  decimals, since the UI only ever offers symbols from this catalog.
  """

  def __init__(
    self,
    instruments: Iterable[InstrumentSpec],
    broker_symbols: Mapping[str, str] | None = None,
    broker_decimals: Mapping[str, int] | None = None,
    default_symbol: str | None = None,
  ):
    specs: dict[str, InstrumentSpec] = {}
    for spec in instruments:
      if spec.symbol in specs:
        raise ValueError(f"Duplicate instrument symbol '{spec.symbol}'.")
      specs[spec.symbol] = spec
    if not specs:
      raise ValueError("An instrument catalog needs at least one instrument.")

    default_symbol = default_symbol or next(iter(specs))
    if default_symbol not in specs:
      raise ValueError(f"Default instrument '{default_symbol}' is not in the catalog.")

    to_broker = dict(broker_symbols or {})
    from_broker = {broker: ui for ui, broker in to_broker.items()}
    if len(from_broker) != len(to_broker):
      raise ValueError("Broker symbol mapping must be one-to-one.")

    self._specs = MappingProxyType(specs)
    self._to_broker = MappingProxyType(to_broker)
    self._from_broker = MappingProxyType(from_broker)
    self._broker_decimals = MappingProxyType(dict(broker_decimals or {}))
    self._default = specs[default_symbol]

  def __iter__(self) -> Iterator[InstrumentSpec]:
    return iter(self._specs.values())

  def __len__(self) -> int:
    return len(self._specs)

  def __contains__(self, symbol: object) -> bool:
    return symbol in self._specs

  @property
  def default(self) -> InstrumentSpec:
    return self._default

  def lookup(self, symbol: str | None) -> InstrumentSpec:
    """Returns the spec for `symbol`, or the default spec if it is unknown."""
    if symbol is None:
      return self._default
    return self._specs.get(symbol, self._default)

  def to_broker_symbol(self, ui_symbol: str) -> str:
    return self._to_broker.get(ui_symbol, ui_symbol)

  def from_broker_symbol(self, broker_symbol: str) -> str:
    return self._from_broker.get(broker_symbol, broker_symbol)

  def decimals_for(self, symbol: str) -> int:
    """Resolves price precision for either a UI or a broker symbol."""
    spec = self._specs.get(symbol) or self._specs.get(self.from_broker_symbol(symbol))
    if spec is not None:
      return spec.decimals
    broker_symbol = self.to_broker_symbol(symbol)
    return self._broker_decimals.get(broker_symbol, _DEFAULT_DECIMALS)

  def format_price(self, value: float, symbol: str) -> str:
    return f"{value:.{self.decimals_for(symbol)}f}"


def default_catalog() -> InstrumentCatalog:
  """Builds the production catalog. Call once at startup and pass it around."""
  return InstrumentCatalog(
    _INSTRUMENTS,
    broker_symbols=_BROKER_SYMBOLS,
    broker_decimals=_BROKER_DECIMALS,
    default_symbol="SPX",
  )
