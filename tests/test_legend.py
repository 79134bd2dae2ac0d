from conftest import T0
from intraday_chart.legend import format_legend, legend_for, percent_change
from intraday_chart.models import BarDirection, CandleBar, LegendState


def _bar(offset, open_, close, high=None, low=None):
  return CandleBar(
    time=T0 + offset,
    open=open_,
    high=max(open_, close) if high is None else high,
    low=min(open_, close) if low is None else low,
    close=close,
  )


def test_defaults_to_last_bar(two_bars):
  state = legend_for(None, two_bars)
  assert (state.open, state.high, state.low, state.close) == (100.5, 102.0, 100.0, 101.0)
  # (101 - 100.5) / 100.5 * 100
  assert state.percent_change == 0.5
  assert state.direction is BarDirection.UP


def test_hovered_bar_uses_previous_close():
  series = [_bar(0, 100.0, 104.0), _bar(300, 104.0, 102.0)]
  state = legend_for(series[1], series)
  assert state.percent_change == round((102.0 - 104.0) / 104.0 * 100, 2)
  assert state.direction is BarDirection.DOWN


def test_first_bar_uses_its_own_open(two_bars):
  state = legend_for(two_bars[0], two_bars)
  assert state.percent_change == 0.5


def test_unchanged_bar_counts_as_up():
  series = [_bar(0, 100.0, 100.0)]
  assert legend_for(None, series).direction is BarDirection.UP


def test_empty_series_gives_no_legend():
  assert legend_for(None, []) is None


def test_zero_previous_close_does_not_crash():
  series = [_bar(0, 0.0, 1.0)]
  assert legend_for(None, series).percent_change == 0.0


def test_hovered_bar_outside_series_treated_as_first(two_bars):
  stray = _bar(9000, 50.0, 51.0)
  assert legend_for(stray, two_bars).percent_change == 2.0


def test_percent_change_rounding():
  assert percent_change(101.0, 100.0) == 1.0
  assert percent_change(1.23456, 1.2) == 2.88
  assert percent_change(1.0, None) == 0.0


def test_format_legend():
  state = LegendState(
    open=1.1, high=1.2, low=1.0, close=1.15, percent_change=0.25, direction=BarDirection.UP
  )
  assert format_legend(state, 5) == "O 1.10000 H 1.20000 L 1.00000 C 1.15000  +0.25%"

  down = state.model_copy(update={"percent_change": -1.5, "direction": BarDirection.DOWN})
  assert format_legend(down, 1).endswith("  -1.50%")
