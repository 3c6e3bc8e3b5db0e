"""
Pure DCF math engine.

This module contains pure functions for the forward DCF model. No pandas, no
I/O, just numeric computations over a base per-share value and
ModelParameters.

Key functions:
  compute_intrinsic_value: Main entry point, computes IV per share
  compute_pv_explicit: Projection and PV of the explicit horizon
  compute_terminal_value: Undiscounted terminal value for either method
  discount_factor: 1 / (1 + r)**years without overflow errors
"""

from math import isfinite
from numbers import Real

from reverse_dcf.domain.errors import DomainError
from reverse_dcf.domain.types import ModelParameters
from reverse_dcf.domain.types import PolicyOutput
from reverse_dcf.domain.types import ValuationResult
from reverse_dcf.policies.terminal import terminal_policy_for


def discount_factor(discount_rate: float, years: int) -> float:
  """
  Present value of 1 received at the end of `years`, i.e. 1 / (1 + r)**years.

  Built as a running product, so long horizons underflow to 0.0 or overflow
  to inf rather than raising OverflowError.

  Raises:
    DomainError: If discount_rate <= -1
  """
  if discount_rate <= -1.0:
    raise DomainError(f'discount_rate must be above -100%, got '
                      f'{discount_rate * 100}')
  step = 1.0 / (1.0 + discount_rate)
  factor = 1.0
  for _ in range(years):
    factor *= step
  return factor


def compute_pv_explicit(
    base_value: float,
    growth_rate: float,
    discount_rate: float,
    years: int,
) -> tuple[float, list[float]]:
  """
  Project the base value forward and discount each year.

  Args:
    base_value: Per-share metric in year 0
    growth_rate: Annual growth as a decimal (g)
    discount_rate: Required return as a decimal (r), above -1
    years: Number of explicit years

  Returns:
    Tuple of (pv_total, flows):
    - pv_total: Sum of discounted projected values
    - flows: Undiscounted projected values for years 1..years

  Raises:
    DomainError: If discount_rate <= -1
  """
  if discount_rate <= -1.0:
    raise DomainError(f'discount_rate must be above -100%, got '
                      f'{discount_rate * 100}')

  pv = 0.0
  value = base_value
  step = 1.0 / (1.0 + discount_rate)
  factor = 1.0
  flows: list[float] = []

  for _ in range(years):
    value *= (1.0 + growth_rate)
    factor *= step
    pv += value * factor
    flows.append(value)

  return pv, flows


def compute_terminal_value(
    final_value: float,
    params: ModelParameters,
) -> PolicyOutput[float]:
  """
  Compute the undiscounted terminal value at the end of the horizon.

  Args:
    final_value: Projected value in the last explicit year
    params: Model parameters selecting the terminal method

  Returns:
    PolicyOutput with the terminal value. Under perpetuity growth with
    discount rate <= terminal growth the value is 0 and
    diag['non_convergent'] is True.
  """
  policy = terminal_policy_for(params)
  return policy.compute(final_value, params.discount_rate / 100.0)


def compute_intrinsic_value(
    base_value: float,
    params: ModelParameters,
) -> ValuationResult:
  """
  Compute intrinsic value per share with a constant-growth DCF.

  Stage 1: base_value compounds at growth_rate for `years` years, each year
  discounted at discount_rate.
  Stage 2: terminal value (exit multiple or perpetuity growth) discounted
  from the end of the horizon.

  Args:
    base_value: Trailing per-share metric (EPS or FCF per share)
    params: Model parameters (percent units)

  Returns:
    ValuationResult with value, yearly flows and terminal value. Finite
    inputs never raise; very long horizons or extreme rates can make value
    inf or NaN.

  Raises:
    DomainError: If base_value is not a finite number
  """
  if isinstance(base_value, bool) or not isinstance(base_value, Real):
    raise DomainError(f'base_value must be a number, got {base_value!r}')
  if not isfinite(base_value):
    raise DomainError(f'base_value must be finite, got {base_value}')

  r = params.discount_rate / 100.0
  g = params.growth_rate / 100.0

  pv_explicit, flows = compute_pv_explicit(base_value, g, r, params.years)

  terminal = compute_terminal_value(flows[-1], params)
  pv_terminal = terminal.value * discount_factor(r, params.years)

  return ValuationResult(
      value=pv_explicit + pv_terminal,
      flows=tuple(flows),
      terminal_value=terminal.value,
      pv_explicit=pv_explicit,
      pv_terminal=pv_terminal,
      non_convergent=bool(terminal.diag.get('non_convergent', False)),
  )


def compute_upside(intrinsic_value: float, price: float) -> float:
  """
  Percent difference between intrinsic value and price.

  Returns:
    (intrinsic_value - price) / price * 100

  Raises:
    DomainError: If price is zero or not finite
  """
  if not isfinite(price) or price == 0:
    raise DomainError(f'price must be finite and non-zero, got {price}')
  return (intrinsic_value - price) / price * 100.0
