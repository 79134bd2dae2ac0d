from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from intraday_chart.aligner import LONG_COLOR, SHORT_COLOR
from intraday_chart.models import (
  InstrumentSpec,
  LineStyle,
  OpeningRange,
  PriceLine,
  RangeOverlay,
  Source,
)


def _as_opening_range(data: OpeningRange | Mapping[str, Any] | None) -> OpeningRange | None:
  if data is None or isinstance(data, OpeningRange):
    return data
  try:
    return OpeningRange.model_validate(data)
  except ValidationError as e:
    logging.debug(f"Ignoring unusable opening-range payload: {e}")
    return None


def overlay_for(
  spec: InstrumentSpec, opening_range: OpeningRange | Mapping[str, Any] | None
) -> RangeOverlay | None:
  """Returns the opening-range levels to draw for `spec`, if any.

  The session opening range only exists for the equity-index feed; for
  currency pairs this is always None, even if a payload was fetched.
  """
  if spec.source is not Source.EQUITY_INDEX:
    return None

  data = _as_opening_range(opening_range)
  if data is None:
    return None
  return RangeOverlay(high=data.high, low=data.low, status=data.status)


def range_price_lines(overlay: RangeOverlay | None) -> list[PriceLine]:
  if overlay is None:
    return []
  return [
    PriceLine(
      price=overlay.high, title="OR High", color=LONG_COLOR, line_style=LineStyle.DASHED
    ),
    PriceLine(
      price=overlay.low, title="OR Low", color=SHORT_COLOR, line_style=LineStyle.DASHED
    ),
  ]
