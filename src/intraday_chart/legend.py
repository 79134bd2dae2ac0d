from __future__ import annotations

from collections.abc import Sequence

from intraday_chart.models import BarDirection, CandleBar, LegendState


def _previous_close(bar: CandleBar, series: Sequence[CandleBar]) -> float:
  # A hovered bar is matched by time; an unknown bar counts as the first one.
  idx = next((i for i, b in enumerate(series) if b.time == bar.time), 0)
  if idx > 0:
    return series[idx - 1].close
  return bar.open


def percent_change(close: float, prev_close: float | None) -> float:
  if not prev_close:
    return 0.0
  return round((close - prev_close) / prev_close * 100, 2)


def legend_for(
  hovered: CandleBar | None, series: Sequence[CandleBar]
) -> LegendState | None:
  """Computes the OHLC legend for the hovered bar, or the last bar if none.

  Returns None for an empty series so the caller can hide the legend.
  """
  if hovered is None:
    if not series:
      return None
    bar = series[-1]
  else:
    bar = hovered

  return LegendState(
    open=bar.open,
    high=bar.high,
    low=bar.low,
    close=bar.close,
    percent_change=percent_change(bar.close, _previous_close(bar, series)),
    direction=BarDirection.UP if bar.close >= bar.open else BarDirection.DOWN,
  )


def format_legend(state: LegendState, decimals: int) -> str:
  sign = "+" if state.percent_change >= 0 else ""
  return (
    f"O {state.open:.{decimals}f} H {state.high:.{decimals}f} "
    f"L {state.low:.{decimals}f} C {state.close:.{decimals}f}  "
    f"{sign}{state.percent_change:.2f}%"
  )
