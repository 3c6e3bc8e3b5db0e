"""
Reverse DCF: solve for the growth rate implied by a market price.

Intrinsic value is non-decreasing in the growth rate (for a positive base
value and a convergent terminal value), so a bisection over growth finds the
rate at which the forward model reproduces the target price.
"""

from dataclasses import dataclass
from math import isfinite
import logging

from reverse_dcf.domain.errors import DomainError
from reverse_dcf.domain.types import ImpliedGrowthResult
from reverse_dcf.domain.types import ModelParameters
from reverse_dcf.domain.types import SolverStatus
from reverse_dcf.engine.dcf import compute_intrinsic_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrowthSearchBounds:
  """
  Bisection settings.

  Attributes:
    low: Lowest growth searched, decimal (default: -50%)
    high: Highest growth searched, decimal (default: 100%)
    tolerance: Stop once |value - target| is below this, in price units
    max_iterations: Forward evaluations before giving up
  """
  low: float = -0.50
  high: float = 1.00
  tolerance: float = 0.01
  max_iterations: int = 100

  def __post_init__(self):
    if not (isfinite(self.low) and isfinite(self.high)):
      raise DomainError(f'Search bounds must be finite: [{self.low}, '
                        f'{self.high}]')
    if self.low >= self.high:
      raise DomainError(f'low must be below high: [{self.low}, {self.high}]')
    if not self.tolerance > 0:
      raise DomainError(f'tolerance must be > 0, got {self.tolerance}')
    if self.max_iterations < 1:
      raise DomainError(
          f'max_iterations must be >= 1, got {self.max_iterations}')


DEFAULT_BOUNDS = GrowthSearchBounds()


def solve_implied_growth_detailed(
    target_price: float,
    base_value: float,
    params: ModelParameters,
    bounds: GrowthSearchBounds = DEFAULT_BOUNDS,
) -> ImpliedGrowthResult:
  """
  Find the growth rate whose intrinsic value matches target_price.

  Args:
    target_price: Price to reproduce (usually the current market price)
    base_value: Trailing per-share metric
    params: Model parameters; growth_rate is ignored
    bounds: Search interval and stopping rules

  Returns:
    ImpliedGrowthResult. If the terminal perpetuity is undefined for params
    the search is skipped and growth_rate is 0. If the tolerance is never
    met, the last midpoint is returned with status MAX_ITERATIONS; a root
    outside the interval therefore comes back as a value near a bound.

  Raises:
    DomainError: If target_price or base_value is not finite
  """
  if not isfinite(target_price):
    raise DomainError(f'target_price must be finite, got {target_price}')
  if not isfinite(base_value):
    raise DomainError(f'base_value must be finite, got {base_value}')

  if params.is_non_convergent:
    logger.debug(
        'Skipping implied growth search: discount rate %.2f%% <= terminal '
        'growth %.2f%%', params.discount_rate, params.terminal_growth_rate)
    return ImpliedGrowthResult(growth_rate=0.0,
                               status=SolverStatus.NON_CONVERGENT_TERMINAL,
                               iterations=0)

  low = bounds.low
  high = bounds.high
  mid = 0.0
  residual = float('nan')

  for iteration in range(1, bounds.max_iterations + 1):
    mid = (low + high) / 2
    result = compute_intrinsic_value(base_value,
                                     params.replace(growth_rate=mid * 100))
    residual = result.value - target_price

    if abs(residual) < bounds.tolerance:
      return ImpliedGrowthResult(growth_rate=mid * 100,
                                 status=SolverStatus.CONVERGED,
                                 iterations=iteration,
                                 residual=residual)

    if residual > 0:
      high = mid
    else:
      low = mid

  logger.debug(
      'Implied growth search did not converge after %d iterations '
      '(growth=%.4f%%, residual=%.4f)', bounds.max_iterations, mid * 100,
      residual)
  return ImpliedGrowthResult(growth_rate=mid * 100,
                             status=SolverStatus.MAX_ITERATIONS,
                             iterations=bounds.max_iterations,
                             residual=residual)


def solve_implied_growth(
    target_price: float,
    base_value: float,
    params: ModelParameters,
    bounds: GrowthSearchBounds = DEFAULT_BOUNDS,
) -> float:
  """
  Implied growth rate in percent.

  Same search as solve_implied_growth_detailed(), returning only the rate.
  """
  return solve_implied_growth_detailed(target_price, base_value, params,
                                       bounds).growth_rate
