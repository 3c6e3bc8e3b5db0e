'''
Domain types for the reverse DCF engine.

These frozen dataclasses are the typed contracts between the data-retrieval
layer, the pure math engine, and whatever renders the results. All
percentages are plain percent numbers (6 means 6%); the engine converts them
to decimal rates on ingestion.
'''

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from math import isfinite
from numbers import Integral, Real
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

import pandas as pd

from reverse_dcf.domain.errors import DomainError

T = TypeVar('T')


class TerminalMethod(str, Enum):
  '''Formula used for value beyond the explicit horizon.'''
  EXIT_MULTIPLE = 'multiple'
  PERPETUITY_GROWTH = 'growth'


class MetricType(str, Enum):
  '''Per-share metric that seeds the projection.'''
  EPS = 'EPS'
  FCF = 'FCF'


class SolverStatus(str, Enum):
  '''How the implied growth search terminated.'''
  CONVERGED = 'converged'
  MAX_ITERATIONS = 'max_iterations'
  NON_CONVERGENT_TERMINAL = 'non_convergent_terminal'


class AxisFormat(str, Enum):
  '''Display formatting for grid axes and cells.'''
  CURRENCY = 'currency'
  PERCENT = 'percent'
  MULTIPLE = 'multiple'

  def format(self, value: float) -> str:
    '''Render a number the way this format is displayed.'''
    if self is AxisFormat.PERCENT:
      return f'{value:.1f}%'
    if self is AxisFormat.MULTIPLE:
      return f'{value:g}x'
    return f'${value:.2f}'


class Band(str, Enum):
  '''
  Five-way classification of a grid cell.

  Favorable always means "the price looks cheap": intrinsic value above the
  price in the value grid, or market-implied growth below the user's
  assumption in the implied-growth grid.
  '''
  STRONG_FAVORABLE = 'strong_favorable'
  FAVORABLE = 'favorable'
  NEUTRAL = 'neutral'
  UNFAVORABLE = 'unfavorable'
  STRONG_UNFAVORABLE = 'strong_unfavorable'


@dataclass
class PolicyOutput(Generic[T]):
  '''
  Standard output from any policy.

  Attributes:
    value: The computed value (type depends on policy)
    diag: Dictionary of diagnostic information
  '''
  value: T
  diag: Dict[str, Any] = field(default_factory=dict)


def _require_finite(name: str, value: float) -> None:
  if isinstance(value, bool) or not isinstance(value, Real):
    raise DomainError(f'{name} must be a number, got {value!r}')
  if not isfinite(value):
    raise DomainError(f'{name} must be finite, got {value}')


@dataclass(frozen=True)
class ModelParameters:
  '''
  Inputs to a single forward DCF evaluation.

  Only one of terminal_multiple / terminal_growth_rate is used, selected by
  terminal_method. The other stays on the object so callers can switch
  methods without losing the value.

  Attributes:
    discount_rate: Required return, percent. Must be above -100.
    growth_rate: Constant annual growth of the base metric, percent
    years: Length of the explicit projection horizon (>= 1)
    terminal_method: Exit multiple or perpetuity growth
    terminal_multiple: Multiple applied to the final-year value
    terminal_growth_rate: Perpetual growth rate, percent
  '''
  discount_rate: float = 6.0
  growth_rate: float = 10.0
  years: int = 10
  terminal_method: TerminalMethod = TerminalMethod.EXIT_MULTIPLE
  terminal_multiple: float = 15.0
  terminal_growth_rate: float = 2.5

  def __post_init__(self):
    try:
      method = TerminalMethod(self.terminal_method)
    except ValueError as e:
      raise DomainError(
          f'Unknown terminal method: {self.terminal_method!r}. '
          f'Available: {[m.value for m in TerminalMethod]}') from e
    object.__setattr__(self, 'terminal_method', method)

    for name in ('discount_rate', 'growth_rate', 'terminal_multiple',
                 'terminal_growth_rate'):
      _require_finite(name, getattr(self, name))

    if isinstance(self.years, bool) or not isinstance(self.years, Integral):
      raise DomainError(f'years must be an integer, got {self.years!r}')
    if self.years < 1:
      raise DomainError(f'years must be >= 1, got {self.years}')
    if self.discount_rate / 100.0 <= -1.0:
      raise DomainError(
          f'discount_rate must be above -100%, got {self.discount_rate}')

  @property
  def terminal_input(self) -> float:
    '''The terminal field selected by terminal_method.'''
    if self.terminal_method is TerminalMethod.EXIT_MULTIPLE:
      return self.terminal_multiple
    return self.terminal_growth_rate

  @property
  def is_non_convergent(self) -> bool:
    '''True if the perpetuity formula has no finite value for these inputs.'''
    return (self.terminal_method is TerminalMethod.PERPETUITY_GROWTH and
            self.discount_rate <= self.terminal_growth_rate)

  def replace(self, **changes: Any) -> 'ModelParameters':
    '''Return a validated copy with some fields substituted.'''
    return replace(self, **changes)

  def to_dict(self) -> Dict[str, Any]:
    '''Convert to a plain dictionary.'''
    result = asdict(self)
    result['terminal_method'] = self.terminal_method.value
    return result


@dataclass(frozen=True)
class ValuationResult:
  '''
  Output of a forward DCF evaluation.

  Attributes:
    value: Intrinsic value per share (pv_explicit + pv_terminal)
    flows: Undiscounted projected values for years 1..N
    terminal_value: Undiscounted terminal value at the end of year N
    pv_explicit: Sum of discounted flows
    pv_terminal: Terminal value discounted N years
    non_convergent: Perpetuity formula was undefined and the terminal value
      was set to 0
  '''
  value: float
  flows: Tuple[float, ...]
  terminal_value: float
  pv_explicit: float
  pv_terminal: float
  non_convergent: bool = False

  @property
  def final_value(self) -> float:
    '''Projected value in the last explicit year.'''
    return self.flows[-1]

  def to_dict(self) -> Dict[str, Any]:
    '''Convert to dictionary for DataFrame creation.'''
    return {
        'value': self.value,
        'pv_explicit': self.pv_explicit,
        'pv_terminal': self.pv_terminal,
        'terminal_value': self.terminal_value,
        'non_convergent': self.non_convergent,
        'years': len(self.flows),
    }


@dataclass(frozen=True)
class ImpliedGrowthResult:
  '''
  Result of inverting the DCF model for growth.

  Attributes:
    growth_rate: Implied growth, percent
    status: Why the search stopped
    iterations: Forward evaluations performed
    residual: Intrinsic value minus target at growth_rate (nan if the search
      was abandoned before any evaluation)
  '''
  growth_rate: float
  status: SolverStatus
  iterations: int
  residual: float = float('nan')

  @property
  def converged(self) -> bool:
    return self.status is SolverStatus.CONVERGED


@dataclass(frozen=True)
class GridAxis:
  '''
  One axis of a sensitivity grid.

  Attributes:
    parameter: ModelParameters field varied along this axis
    label: Human-readable axis name
    values: Axis keys in ascending offset order
    fmt: How keys are displayed
  '''
  parameter: str
  label: str
  values: Tuple[float, ...]
  fmt: AxisFormat

  @property
  def labels(self) -> Tuple[str, ...]:
    return tuple(self.fmt.format(v) for v in self.values)

  def index(self, key: float) -> int:
    try:
      return self.values.index(key)
    except ValueError as e:
      raise KeyError(f'{key} is not on the {self.parameter} axis') from e


@dataclass(frozen=True)
class SensitivityGrid:
  '''
  Two-dimensional table of model outputs over perturbed parameters.

  Attributes:
    rows: Row axis
    columns: Column axis
    values: Row-major cell values
    bands: Row-major cell classifications
    cell_format: How cell values are displayed
    reference: Value the cells were classified against (current price for
      the value grid, user growth assumption for the implied-growth grid)
  '''
  rows: GridAxis
  columns: GridAxis
  values: Tuple[Tuple[float, ...], ...]
  bands: Tuple[Tuple[Band, ...], ...]
  cell_format: AxisFormat
  reference: float

  @property
  def shape(self) -> Tuple[int, int]:
    return len(self.rows.values), len(self.columns.values)

  @property
  def center(self) -> float:
    '''Cell at the middle row and column (the base evaluation).'''
    n_rows, n_cols = self.shape
    return self.values[n_rows // 2][n_cols // 2]

  def value_at(self, row_key: float, column_key: float) -> float:
    '''Look up a cell by its axis keys.'''
    return self.values[self.rows.index(row_key)][self.columns.index(
        column_key)]

  def band_at(self, row_key: float, column_key: float) -> Band:
    return self.bands[self.rows.index(row_key)][self.columns.index(column_key)]

  def to_frame(self) -> pd.DataFrame:
    '''
    Convert to a DataFrame with formatted axis labels.

    Returns:
      DataFrame with row keys as index, column keys as columns, and raw
      numeric cell values
    '''
    df = pd.DataFrame([list(row) for row in self.values],
                      index=list(self.rows.labels),
                      columns=list(self.columns.labels))
    df.index.name = self.rows.label
    df.columns.name = self.columns.label
    return df

  def bands_frame(self) -> pd.DataFrame:
    '''Same layout as to_frame() with band names as cells.'''
    df = pd.DataFrame([[b.value for b in row] for row in self.bands],
                      index=list(self.rows.labels),
                      columns=list(self.columns.labels))
    df.index.name = self.rows.label
    df.columns.name = self.columns.label
    return df


@dataclass(frozen=True)
class HistoricalGrowth:
  '''
  Historical per-share growth rates, percent. Missing values are None.
  '''
  eps_growth_5y: Optional[float] = None
  eps_growth_3y: Optional[float] = None
  fcf_growth_5y: Optional[float] = None
  fcf_growth_3y: Optional[float] = None


@dataclass(frozen=True)
class StockSnapshot:
  '''
  Base inputs supplied by the data-retrieval layer.

  Attributes:
    ticker: Security symbol
    price: Current market price per share
    eps: Trailing earnings per share
    fcf: Trailing free cash flow per share
    growth_rate: Headline growth estimate, percent (optional)
    historical: Historical growth rates
  '''
  ticker: str
  price: float
  eps: float
  fcf: float
  growth_rate: Optional[float] = None
  historical: HistoricalGrowth = field(default_factory=HistoricalGrowth)

  def base_value(self, metric: MetricType) -> float:
    '''Per-share metric that seeds the projection.'''
    if MetricType(metric) is MetricType.EPS:
      return self.eps
    return self.fcf

  @classmethod
  def from_dict(cls, data: Dict[str, Any]) -> 'StockSnapshot':
    '''
    Create from the camelCase JSON produced by the retrieval layer.

    Args:
      data: Dict with ticker, price, eps, fcf, optional growthRate and an
        optional historical dict (epsGrowth5y, epsGrowth3y, fcfGrowth5y,
        fcfGrowth3y)

    Raises:
      KeyError: If a required field is missing
    '''
    hist = data.get('historical') or {}
    return cls(
        ticker=str(data['ticker']),
        price=float(data['price']),
        eps=float(data['eps']),
        fcf=float(data['fcf']),
        growth_rate=data.get('growthRate'),
        historical=HistoricalGrowth(
            eps_growth_5y=hist.get('epsGrowth5y'),
            eps_growth_3y=hist.get('epsGrowth3y'),
            fcf_growth_5y=hist.get('fcfGrowth5y'),
            fcf_growth_3y=hist.get('fcfGrowth3y'),
        ),
    )


@dataclass(frozen=True)
class ValuationSummary:
  '''
  Forward and reverse valuation of one snapshot.

  Attributes:
    intrinsic_value: Intrinsic value per share
    implied_growth: Growth the current price implies
    upside: (intrinsic_value - price) / price, percent
    current_price: Market price used for the comparison
    params: Parameters used for the forward evaluation
    metric: Which per-share metric seeded the projection
    result: Full forward evaluation
  '''
  intrinsic_value: float
  implied_growth: ImpliedGrowthResult
  upside: float
  current_price: float
  params: ModelParameters
  metric: MetricType
  result: ValuationResult

  def to_dict(self) -> Dict[str, Any]:
    result = {
        'intrinsic_value': self.intrinsic_value,
        'implied_growth': self.implied_growth.growth_rate,
        'implied_growth_status': self.implied_growth.status.value,
        'upside': self.upside,
        'current_price': self.current_price,
        'metric': self.metric.value,
        'terminal_value': self.result.terminal_value,
    }
    result.update(self.params.to_dict())
    return result
