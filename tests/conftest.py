import pytest

from intraday_chart.catalog import default_catalog
from intraday_chart.models import CandleBar

# 2023-11-14T22:13:20Z
T0 = 1_700_000_000


@pytest.fixture
def catalog():
  return default_catalog()


@pytest.fixture
def spx(catalog):
  return catalog.lookup("SPX")


@pytest.fixture
def eur_usd(catalog):
  return catalog.lookup("EUR_USD")


@pytest.fixture
def two_bars():
  return [
    CandleBar(time=T0, open=100.0, high=101.0, low=99.0, close=100.5),
    CandleBar(time=T0 + 300, open=100.5, high=102.0, low=100.0, close=101.0),
  ]
