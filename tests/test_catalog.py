import pytest

from intraday_chart.catalog import InstrumentCatalog
from intraday_chart.models import InstrumentSpec, Source


def test_lookup_known_symbol(catalog):
  spec = catalog.lookup("USD_JPY")
  assert spec.label == "USD/JPY"
  assert spec.source is Source.CURRENCY_PAIR
  assert spec.decimals == 3


def test_lookup_unknown_symbol_falls_back_to_default(catalog):
  assert catalog.lookup("DOGE").symbol == "SPX"
  assert catalog.lookup(None) is catalog.default


def test_broker_symbol_round_trip(catalog):
  for spec in catalog:
    assert catalog.from_broker_symbol(catalog.to_broker_symbol(spec.symbol)) == spec.symbol


def test_broker_symbol_mapping(catalog):
  assert catalog.to_broker_symbol("SPX") == "SPX500_USD"
  assert catalog.from_broker_symbol("NAS100_USD") == "NDX"
  # Unmapped symbols pass through unchanged.
  assert catalog.to_broker_symbol("EUR_USD") == "EUR_USD"
  assert catalog.from_broker_symbol("XAU_USD") == "XAU_USD"


@pytest.mark.parametrize(
  "symbol, decimals",
  [
    ("SPX", 1),
    ("SPX500_USD", 1),
    ("US30_USD", 1),
    ("USD_JPY", 3),
    ("EUR_USD", 5),
    ("XAU_USD", 5),
  ],
)
def test_decimals_for(catalog, symbol, decimals):
  assert catalog.decimals_for(symbol) == decimals


def test_format_price_and_min_move(catalog):
  assert catalog.format_price(150.1234, "USD_JPY") == "150.123"
  assert catalog.format_price(4501.26, "SPX500_USD") == "4501.3"
  assert catalog.lookup("USD_JPY").min_move == 0.001
  assert catalog.lookup("EUR_USD").min_move == 0.00001


def test_catalog_is_iterable_and_sized(catalog):
  assert len(catalog) == 12
  assert "EUR_USD" in catalog
  assert [s.symbol for s in catalog][:2] == ["SPX", "NDX"]


def test_duplicate_symbols_rejected():
  spec = InstrumentSpec(symbol="SPX", label="S&P 500", source=Source.EQUITY_INDEX, decimals=1)
  with pytest.raises(ValueError, match="Duplicate"):
    InstrumentCatalog([spec, spec])


def test_empty_catalog_rejected():
  with pytest.raises(ValueError):
    InstrumentCatalog([])


def test_unknown_default_rejected():
  spec = InstrumentSpec(symbol="SPX", label="S&P 500", source=Source.EQUITY_INDEX, decimals=1)
  with pytest.raises(ValueError, match="Default"):
    InstrumentCatalog([spec], default_symbol="NDX")


def test_instrument_spec_is_immutable(catalog):
  spec = catalog.lookup("SPX")
  with pytest.raises(Exception):
    spec.decimals = 2
