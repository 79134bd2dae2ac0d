from __future__ import annotations

import logging
from typing import Any

import requests

from intraday_chart.models import InstrumentSpec, Source

# --- Module-level Constants ---
_REQUEST_TIMEOUT_SECONDS = 30
API_BASE_ENV_VAR = "DASHBOARD_API_BASE"


class DashboardApiError(Exception):
  """Raised when the dashboard backend can't be reached or reports an error."""

  pass


def _error_message(data: Any, fallback: str) -> str:
  payload = data[0] if isinstance(data, list) and data else data
  if isinstance(payload, dict):
    return payload.get("error") or payload.get("message") or fallback
  return fallback


def _tuple_status(data: Any) -> int | None:
  # Some Flask handlers return `[payload, status]` with HTTP 200.
  if isinstance(data, list) and data and isinstance(data[-1], int):
    return data[-1]
  return None


class DashboardClient:
  """Read-only access to the dashboard backend's chart endpoints."""

  def __init__(self, api_base: str, session: requests.Session | None = None):
    if not api_base:
      raise ValueError(
        f"Dashboard API base URL is required (set {API_BASE_ENV_VAR} or --api-base)."
      )
    self._api_base = api_base.rstrip("/")
    self._session = session or requests.Session()
    self._session.headers.update({"Content-Type": "application/json"})

  @property
  def api_base(self) -> str:
    return self._api_base

  def _get_json(self, endpoint: str, params: dict[str, str] | None = None) -> Any:
    url = f"{self._api_base}{endpoint}"
    logging.debug(f"GET {url} params={params}")
    try:
      resp = self._session.get(url, params=params, timeout=_REQUEST_TIMEOUT_SECONDS)
    except requests.exceptions.RequestException as e:
      raise DashboardApiError(f"Request to {url} failed: {e}") from e

    try:
      data = resp.json()
    except ValueError:
      data = {}

    status = _tuple_status(data)
    if not resp.ok or (status is not None and status >= 400):
      fallback = resp.reason or f"HTTP {status or resp.status_code}"
      raise DashboardApiError(_error_message(data, fallback))
    return data

  def get_candles(self, spec: InstrumentSpec, day: str) -> list[dict[str, Any]]:
    """Fetches the raw candle batch for `spec` on `day` (YYYY-MM-DD)."""
    if spec.source is Source.CURRENCY_PAIR:
      data = self._get_json(
        "/api/candles/oanda", params={"instrument": spec.symbol, "day": day}
      )
    else:
      data = self._get_json("/api/candles", params={"day": day})
    if not isinstance(data, list):
      logging.warning(f"Unexpected candle payload type {type(data).__name__}; ignoring.")
      return []
    return data

  def get_opening_range(self, day: str, symbol: str) -> dict[str, Any] | None:
    """Fetches the opening range, or None when the backend has none to give."""
    try:
      data = self._get_json(f"/api/opening_range/{day}", params={"instrument": symbol})
    except DashboardApiError as e:
      logging.info(f"No opening range for {symbol} on {day}: {e}")
      return None
    return data or None

  def get_trades(self) -> list[dict[str, Any]]:
    data = self._get_json("/api/trades")
    if not isinstance(data, list):
      logging.warning(f"Unexpected trades payload type {type(data).__name__}; ignoring.")
      return []
    return data
