from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from dateutil.parser import isoparse


def first_present(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
  """Returns the value of the first key in `keys` that is set and not None.

  Upstream feeds disagree on field names (`o` vs `open` and so on), so
  callers pass the alias chain in priority order.

  Example:
    >>> first_present({"o": None, "open": 1.5}, ("o", "open"))
    1.5
  """
  for key in keys:
    value = record.get(key)
    if value is not None:
      return value
  return None


def to_float(value: Any) -> float | None:
  """Coerces a price field to float, or None when it is missing or junk."""
  if value is None or isinstance(value, bool):
    return None
  try:
    result = float(value)
  except (TypeError, ValueError):
    return None
  if math.isnan(result) or math.isinf(result):
    return None
  return result


def epoch_ms_to_seconds(value: Any) -> int | None:
  millis = to_float(value)
  if millis is None:
    return None
  return math.floor(millis / 1000)


def iso_to_seconds(value: Any) -> int | None:
  """Parses an ISO-8601 timestamp to unix seconds, flooring sub-second parts.

  Nanosecond fractions (as sent by the currency feed) are accepted; naive
  timestamps are read as UTC.
  """
  if not isinstance(value, str) or not value.strip():
    return None
  try:
    parsed = isoparse(value.strip())
  except (ValueError, OverflowError):
    return None
  if parsed.tzinfo is None:
    parsed = parsed.replace(tzinfo=timezone.utc)
  return math.floor(parsed.timestamp())


def to_unix_seconds(value: Any) -> int | None:
  """Accepts either an ISO string or an already-numeric unix-seconds value."""
  if isinstance(value, datetime):
    if value.tzinfo is None:
      value = value.replace(tzinfo=timezone.utc)
    return math.floor(value.timestamp())
  if isinstance(value, str):
    return iso_to_seconds(value)
  seconds = to_float(value)
  if seconds is None:
    return None
  return math.floor(seconds)
