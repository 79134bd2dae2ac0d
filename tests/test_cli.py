import json

import pytest
from click.testing import CliRunner

from conftest import T0
from intraday_chart.main import cli


@pytest.fixture
def runner():
  return CliRunner()


@pytest.fixture
def input_files(tmp_path):
  candles = tmp_path / "candles.json"
  candles.write_text(
    json.dumps(
      [
        {"sym": "I:SPX", "s": T0 * 1000, "o": 4500.0, "h": 4502.0, "l": 4499.0, "c": 4501.0},
        {"sym": "I:SPX", "s": (T0 + 300) * 1000, "o": 4501.0, "h": 4503.0, "l": 4500.0, "c": 4502.0},
      ]
    )
  )
  trades = tmp_path / "trades.json"
  trades.write_text(
    json.dumps(
      [
        {
          "timestamp": "2023-11-14T22:18:30Z",
          "instrument": "SPX500_USD",
          "direction": "LONG",
          "fill_price": 4501.5,
        }
      ]
    )
  )
  opening_range = tmp_path / "opening_range.json"
  opening_range.write_text(json.dumps({"high": 4505.0, "low": 4495.0, "status": "ready"}))
  return candles, trades, opening_range


def test_instruments_lists_catalog(runner):
  result = runner.invoke(cli, ["instruments"])
  assert result.exit_code == 0
  assert "SPX500_USD" in result.output
  assert "USD/JPY" in result.output


def test_build_chart_from_files(runner, input_files, tmp_path, monkeypatch):
  monkeypatch.chdir(tmp_path)
  candles, trades, opening_range = input_files

  result = runner.invoke(
    cli,
    [
      "build-chart",
      "--instrument", "SPX",
      "--day", "2023-11-14",
      "--candles-file", str(candles),
      "--trades-file", str(trades),
      "--opening-range-file", str(opening_range),
      "--output", "chart.json",
    ],
  )

  assert result.exit_code == 0, result.output
  payload = json.loads((tmp_path / "output" / "chart.json").read_text())
  assert len(payload["bars"]) == 2
  assert payload["markers"][0]["text"] == "LONG @ 4501.5"
  assert payload["markers"][0]["time"] == T0 + 300
  assert payload["opening_range"]["range_size"] == 10.0


def test_export_candles_writes_csv(runner, input_files, tmp_path, monkeypatch):
  monkeypatch.chdir(tmp_path)
  candles, _, _ = input_files

  result = runner.invoke(
    cli, ["export-candles", "--day", "2023-11-14", "--candles-file", str(candles)]
  )

  assert result.exit_code == 0, result.output
  lines = (tmp_path / "output" / "SPX_candles_2023-11-14.csv").read_text().splitlines()
  assert lines[0] == "time,open,high,low,close"
  assert len(lines) == 3


def test_build_chart_without_api_base_fails(runner, tmp_path, monkeypatch):
  monkeypatch.chdir(tmp_path)
  monkeypatch.delenv("DASHBOARD_API_BASE", raising=False)
  result = runner.invoke(cli, ["build-chart", "--day", "2023-11-14"])
  assert result.exit_code == 1


class FakeClient:
  calls: list[str] = []

  def __init__(self, api_base):
    self.api_base = api_base

  def get_candles(self, spec, day):
    FakeClient.calls.append(f"candles {spec.symbol} {day}")
    return [
      {"sym": "I:SPX", "s": T0 * 1000, "o": 4500.0, "h": 4502.0, "l": 4499.0, "c": 4501.0},
    ]

  def get_trades(self):
    FakeClient.calls.append("trades")
    return [
      {"timestamp": "2023-11-14T22:14:00Z", "instrument": "SPX500_USD", "direction": "SHORT"},
    ]

  def get_opening_range(self, day, symbol):
    FakeClient.calls.append(f"opening_range {day} {symbol}")
    return {"high": 4505.0, "low": 4495.0}


def test_build_chart_from_api(runner, tmp_path, monkeypatch):
  monkeypatch.chdir(tmp_path)
  monkeypatch.setattr("intraday_chart.main.DashboardClient", FakeClient)
  FakeClient.calls = []

  result = runner.invoke(
    cli,
    [
      "build-chart",
      "--day", "2023-11-14",
      "--api-base", "http://dashboard.local",
      "--output", "chart.json",
    ],
  )

  assert result.exit_code == 0, result.output
  assert FakeClient.calls == [
    "candles SPX 2023-11-14",
    "trades",
    "opening_range 2023-11-14 SPX",
  ]
  payload = json.loads((tmp_path / "output" / "chart.json").read_text())
  assert len(payload["bars"]) == 1
  assert payload["markers"][0]["text"] == "SHORT"
  assert payload["opening_range"]["range_size"] == 10.0
