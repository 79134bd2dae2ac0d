from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class Source(str, Enum):
  """Upstream candle feed an instrument is charted from."""

  EQUITY_INDEX = "polygon"
  CURRENCY_PAIR = "oanda"


class Direction(str, Enum):
  LONG = "LONG"
  SHORT = "SHORT"


class MarkerPosition(str, Enum):
  ABOVE_BAR = "aboveBar"
  BELOW_BAR = "belowBar"


class MarkerShape(str, Enum):
  ARROW_UP = "arrowUp"
  ARROW_DOWN = "arrowDown"


class LineStyle(int, Enum):
  SOLID = 0
  DOTTED = 1
  DASHED = 2


class BarDirection(str, Enum):
  UP = "up"
  DOWN = "down"


class InstrumentSpec(BaseModel):
  """A chartable instrument as offered in the instrument picker."""

  model_config = ConfigDict(frozen=True)

  symbol: str
  label: str
  source: Source
  decimals: int = Field(ge=0, le=5)

  @property
  def min_move(self) -> float:
    """Smallest price increment shown on the price scale."""
    return round(10**-self.decimals, self.decimals)


class CandleBar(BaseModel):
  """A canonical OHLC bar; `time` is unix seconds."""

  model_config = ConfigDict(frozen=True)

  time: int = Field(gt=0)
  open: float
  high: float
  low: float
  close: float


class TradeExecution(BaseModel):
  """A trade as returned by the trade-history endpoint."""

  model_config = ConfigDict(frozen=True, extra="ignore")

  timestamp: str
  direction: Direction
  instrument: str | None = None
  entry: float | None = None
  fill_price: float | None = None
  sl: float | None = None
  tp: float | None = None

  @field_validator("direction", mode="before")
  @classmethod
  def normalize_direction(cls, v: object) -> object:  # noqa: N805
    if isinstance(v, str):
      return v.strip().upper()
    return v

  @property
  def price(self) -> float | None:
    """Fill price when the broker reported one, otherwise the planned entry."""
    return self.fill_price or self.entry


class Marker(BaseModel):
  model_config = ConfigDict(frozen=True)

  time: int
  position: MarkerPosition
  color: str
  shape: MarkerShape
  text: str


class PriceLine(BaseModel):
  """A horizontal reference line at a fixed price."""

  model_config = ConfigDict(frozen=True)

  price: float
  title: str
  color: str
  line_style: LineStyle = LineStyle.SOLID


class TradeOverlay(BaseModel):
  model_config = ConfigDict(frozen=True)

  markers: list[Marker] = Field(default_factory=list)
  price_lines: list[PriceLine] = Field(default_factory=list)


class LegendState(BaseModel):
  model_config = ConfigDict(frozen=True)

  open: float
  high: float
  low: float
  close: float
  percent_change: float
  direction: BarDirection


class OpeningRange(BaseModel):
  """Opening-range payload as delivered by the backend."""

  model_config = ConfigDict(extra="ignore")

  high: float
  low: float
  range_size: float | None = None
  status: str | None = None


class RangeOverlay(BaseModel):
  model_config = ConfigDict(frozen=True)

  high: float
  low: float
  status: str | None = None

  @computed_field
  @property
  def range_size(self) -> float:
    return self.high - self.low


class ChartView(BaseModel):
  """Everything the chart surface needs for one (day, instrument) selection."""

  model_config = ConfigDict(frozen=True)

  instrument: InstrumentSpec
  day: str
  bars: list[CandleBar] = Field(default_factory=list)
  overlay: TradeOverlay = Field(default_factory=TradeOverlay)
  legend: LegendState | None = None
  range_overlay: RangeOverlay | None = None

  @property
  def is_empty(self) -> bool:
    return not self.bars
