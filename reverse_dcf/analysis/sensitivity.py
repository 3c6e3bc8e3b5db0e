"""
Sensitivity analysis for DCF valuation.

This module builds the 2D sensitivity grids that show how the model output
varies when two parameters move together around the user's base case:

  Value grid: discount rate (rows) x growth rate (columns) -> intrinsic value
  Implied-growth grid: discount rate (rows) x terminal multiple or terminal
    growth (columns) -> growth rate implied by the current price

Each axis is the base value plus a fixed offset sequence times a step size,
so the middle row and column reproduce the base evaluation.
"""

from collections.abc import Callable, Sequence
from concurrent.futures import as_completed
from concurrent.futures import ThreadPoolExecutor
import logging
import math
from typing import Optional

import pandas as pd

from reverse_dcf.analysis.bands import classify_implied_growth_cell
from reverse_dcf.analysis.bands import classify_value_cell
from reverse_dcf.domain.errors import DomainError
from reverse_dcf.domain.types import AxisFormat
from reverse_dcf.domain.types import GridAxis
from reverse_dcf.domain.types import ModelParameters
from reverse_dcf.domain.types import SensitivityGrid
from reverse_dcf.domain.types import TerminalMethod
from reverse_dcf.engine.dcf import compute_intrinsic_value
from reverse_dcf.engine.implied_growth import DEFAULT_BOUNDS
from reverse_dcf.engine.implied_growth import GrowthSearchBounds
from reverse_dcf.engine.implied_growth import solve_implied_growth

logger = logging.getLogger(__name__)

GRID_OFFSETS = (-2, -1, 0, 1, 2)

DISCOUNT_STEP = 1.0
GROWTH_STEP = 1.0
MULTIPLE_STEP = 2.0
TERMINAL_GROWTH_STEP = 0.5
MIN_TERMINAL_MULTIPLE = 1.0


def axis_values(
    base: float,
    step: float,
    offsets: Sequence[int] = GRID_OFFSETS,
    floor: Optional[float] = None,
) -> tuple[float, ...]:
  """
  Axis keys around a base value.

  Args:
    base: Value at offset 0
    step: Distance between neighbouring keys
    offsets: Multiples of step to apply, in display order
    floor: Optional lower limit applied to every key

  Returns:
    Tuple of base + offset * step for each offset
  """
  values = []
  for k in offsets:
    v = base + k * step
    if floor is not None:
      v = max(floor, v)
    values.append(v)
  return tuple(values)


class SensitivityGridBuilder:
  """
  Build 2D sensitivity grids for one security.

  Every cell is an independent evaluation of the pure engine with two
  parameters substituted into a copy of the base parameters. With
  max_workers set, cells are evaluated on a thread pool.
  """

  def __init__(
      self,
      base_value: float,
      current_price: float,
      params: ModelParameters,
      bounds: GrowthSearchBounds = DEFAULT_BOUNDS,
      offsets: Sequence[int] = GRID_OFFSETS,
      max_workers: Optional[int] = None,
  ):
    """
    Initialize sensitivity grid builder.

    Args:
        base_value: Trailing per-share metric
        current_price: Market price per share
        params: Base case parameters
        bounds: Implied growth search settings
        offsets: Step multiples for both axes (default: -2..2)
        max_workers: Thread pool size; None evaluates cells sequentially
    """
    if not offsets:
      raise ValueError('offsets cannot be empty')
    if not math.isfinite(current_price):
      raise DomainError(f'current_price must be finite, got {current_price}')

    lowest_rate = min(
        axis_values(params.discount_rate, DISCOUNT_STEP, offsets))
    if lowest_rate / 100.0 <= -1.0:
      raise DomainError(
          f'Discount rate axis reaches {lowest_rate}% for base '
          f'{params.discount_rate}%; every row must be above -100%')

    self.base_value = base_value
    self.current_price = current_price
    self.params = params
    self.bounds = bounds
    self.offsets = tuple(offsets)
    self.max_workers = max_workers

    logger.info('Initialized SensitivityGridBuilder')
    logger.info('  Base value: %.2f', self.base_value)
    logger.info('  Current price: %.2f', self.current_price)
    logger.info('  Discount rate: %.2f%%', self.params.discount_rate)
    logger.info('  Growth rate: %.2f%%', self.params.growth_rate)
    logger.info('  Terminal: %s (%.2f)', self.params.terminal_method.value,
                self.params.terminal_input)

  def _discount_axis(self) -> GridAxis:
    return GridAxis(
        parameter='discount_rate',
        label='Discount Rate',
        values=axis_values(self.params.discount_rate, DISCOUNT_STEP,
                           self.offsets),
        fmt=AxisFormat.PERCENT,
    )

  def _terminal_axis(self) -> GridAxis:
    if self.params.terminal_method is TerminalMethod.EXIT_MULTIPLE:
      return GridAxis(
          parameter='terminal_multiple',
          label='Terminal Multiple',
          values=axis_values(self.params.terminal_multiple,
                             MULTIPLE_STEP,
                             self.offsets,
                             floor=MIN_TERMINAL_MULTIPLE),
          fmt=AxisFormat.MULTIPLE,
      )
    return GridAxis(
        parameter='terminal_growth_rate',
        label='Terminal Growth',
        values=axis_values(self.params.terminal_growth_rate,
                           TERMINAL_GROWTH_STEP, self.offsets),
        fmt=AxisFormat.PERCENT,
    )

  def _evaluate(
      self,
      cell_fn: Callable[[float, float], float],
      rows: GridAxis,
      columns: GridAxis,
  ) -> list[list[float]]:
    """Evaluate cell_fn for every (row key, column key) pair."""
    if not self.max_workers or self.max_workers <= 1:
      return [[cell_fn(r, c) for c in columns.values] for r in rows.values]

    results = [[float('nan')] * len(columns.values) for _ in rows.values]
    with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
      futures = {
          executor.submit(cell_fn, r, c): (i, j)
          for i, r in enumerate(rows.values)
          for j, c in enumerate(columns.values)
      }
      for future in as_completed(futures):
        i, j = futures[future]
        results[i][j] = future.result()
    return results

  def build_value_grid(self) -> SensitivityGrid:
    """
    Build the discount rate x growth rate grid of intrinsic values.

    Returns:
        SensitivityGrid with intrinsic value per share in each cell, banded
        by deviation from the current price
    """
    rows = self._discount_axis()
    columns = GridAxis(
        parameter='growth_rate',
        label='Growth Rate',
        values=axis_values(self.params.growth_rate, GROWTH_STEP,
                           self.offsets),
        fmt=AxisFormat.PERCENT,
    )

    logger.info('Building value grid: %d x %d', len(rows.values),
                len(columns.values))

    def cell(discount_rate: float, growth_rate: float) -> float:
      cell_params = self.params.replace(discount_rate=discount_rate,
                                        growth_rate=growth_rate)
      return compute_intrinsic_value(self.base_value, cell_params).value

    values = self._evaluate(cell, rows, columns)
    bands = tuple(
        tuple(classify_value_cell(v, self.current_price)
              for v in row)
        for row in values)

    return SensitivityGrid(
        rows=rows,
        columns=columns,
        values=tuple(tuple(row) for row in values),
        bands=bands,
        cell_format=AxisFormat.CURRENCY,
        reference=self.current_price,
    )

  def build_implied_growth_grid(self) -> SensitivityGrid:
    """
    Build the discount rate x terminal parameter grid of implied growth.

    The column axis is the terminal multiple (step 2x, floored at 1x) or the
    terminal growth rate (step 0.5pp), following params.terminal_method.

    Returns:
        SensitivityGrid with implied growth (percent) in each cell, banded
        by its gap to the user's growth assumption
    """
    rows = self._discount_axis()
    columns = self._terminal_axis()

    logger.info('Building implied growth grid: %d x %d (%s)',
                len(rows.values), len(columns.values), columns.parameter)

    def cell(discount_rate: float, terminal_input: float) -> float:
      cell_params = self.params.replace(
          **{
              'discount_rate': discount_rate,
              columns.parameter: terminal_input,
          })
      return solve_implied_growth(self.current_price, self.base_value,
                                  cell_params, self.bounds)

    values = self._evaluate(cell, rows, columns)
    user_growth = self.params.growth_rate
    bands = tuple(
        tuple(classify_implied_growth_cell(v, user_growth)
              for v in row)
        for row in values)

    return SensitivityGrid(
        rows=rows,
        columns=columns,
        values=tuple(tuple(row) for row in values),
        bands=bands,
        cell_format=AxisFormat.PERCENT,
        reference=user_growth,
    )

  def growth_curve(
      self,
      span: int = 10,
      step: int = 2,
      min_growth: int = -10,
  ) -> pd.DataFrame:
    """
    Intrinsic value along the growth axis, other parameters fixed.

    Growth runs from max(min_growth, floor(g - span)) to ceil(g + span) in
    whole-percent steps.

    Args:
        span: Distance either side of the base growth, percent
        step: Growth increment, percent
        min_growth: Lowest growth plotted, percent

    Returns:
        DataFrame with columns growth_rate and intrinsic_value (rounded to
        cents)
    """
    if step <= 0:
      raise ValueError('step must be > 0')

    g = self.params.growth_rate
    start = max(min_growth, math.floor(g - span))
    end = math.ceil(g + span)

    records = []
    for growth in range(start, end + 1, step):
      result = compute_intrinsic_value(
          self.base_value, self.params.replace(growth_rate=float(growth)))
      records.append({
          'growth_rate': float(growth),
          'intrinsic_value': round(result.value, 2),
      })

    return pd.DataFrame(records, columns=['growth_rate', 'intrinsic_value'])
