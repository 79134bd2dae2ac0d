from __future__ import annotations

from typing import Any

from intraday_chart.legend import format_legend
from intraday_chart.models import ChartView, PriceLine
from intraday_chart.overlay import range_price_lines

# --- Module-level Constants ---
_TIMEFRAME_LABEL = "M5"


def _price_line_payload(line: PriceLine) -> dict[str, Any]:
  return {
    "price": line.price,
    "color": line.color,
    "lineWidth": 1,
    "lineStyle": int(line.line_style),
    "axisLabelVisible": True,
    "title": line.title,
  }


def to_chart_payload(view: ChartView) -> dict[str, Any]:
  """Translates a chart view into plain JSON for a lightweight-charts surface.

  Keys follow the charting library's option names so a front end can pass
  the blocks straight through (`setData`, `createSeriesMarkers`,
  `createPriceLine`).
  """
  spec = view.instrument
  decimals = spec.decimals
  lines = range_price_lines(view.range_overlay) + list(view.overlay.price_lines)

  opening_range = None
  if view.range_overlay is not None:
    opening_range = {
      "high": view.range_overlay.high,
      "low": view.range_overlay.low,
      "range_size": round(view.range_overlay.range_size, decimals),
      "status": view.range_overlay.status,
    }

  return {
    "title": f"{spec.label}  {_TIMEFRAME_LABEL}",
    "watermark": spec.label,
    "instrument": spec.symbol,
    "day": view.day,
    "empty": view.is_empty,
    "price_format": {"type": "price", "precision": decimals, "minMove": spec.min_move},
    "bars": [bar.model_dump() for bar in view.bars],
    "markers": [marker.model_dump(mode="json") for marker in view.overlay.markers],
    "price_lines": [_price_line_payload(line) for line in lines],
    "legend": None
    if view.legend is None
    else {
      "text": format_legend(view.legend, decimals),
      "direction": view.legend.direction.value,
    },
    "opening_range": opening_range,
  }
