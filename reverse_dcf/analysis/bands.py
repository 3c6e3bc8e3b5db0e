"""
Cell classification for sensitivity grids.

The two grids classify with opposite polarity. In the value grid a higher
intrinsic value than the price is favorable; in the implied-growth grid a
lower implied growth than the user's assumption is favorable (the market
expects less than the user believes achievable).
"""

from math import isfinite

from reverse_dcf.domain.errors import DomainError
from reverse_dcf.domain.types import Band

# Relative deviation of intrinsic value from price.
VALUE_STRONG_THRESHOLD = 0.15
VALUE_NEUTRAL_THRESHOLD = 0.05

# Percentage-point gap between implied and assumed growth.
GROWTH_STRONG_THRESHOLD = 5.0
GROWTH_NEUTRAL_THRESHOLD = 1.0


def classify_value_cell(cell_value: float, current_price: float) -> Band:
  """
  Classify an intrinsic value against the current price.

  d = (cell_value - price) / price:
    d > 0.15             strong favorable
    0.05 < d <= 0.15     favorable
    -0.05 <= d <= 0.05   neutral
    -0.15 <= d < -0.05   unfavorable
    d < -0.15            strong unfavorable

  Raises:
    DomainError: If current_price is zero or not finite
  """
  if not isfinite(current_price) or current_price == 0:
    raise DomainError(
        f'current_price must be finite and non-zero, got {current_price}')

  d = (cell_value - current_price) / current_price
  if d > VALUE_STRONG_THRESHOLD:
    return Band.STRONG_FAVORABLE
  if d > VALUE_NEUTRAL_THRESHOLD:
    return Band.FAVORABLE
  if d >= -VALUE_NEUTRAL_THRESHOLD:
    return Band.NEUTRAL
  if d >= -VALUE_STRONG_THRESHOLD:
    return Band.UNFAVORABLE
  return Band.STRONG_UNFAVORABLE


def classify_implied_growth_cell(implied_growth: float,
                                 user_growth: float) -> Band:
  """
  Classify implied growth against the user's growth assumption.

  diff = implied_growth - user_growth (percentage points):
    diff < -5            strong favorable
    -5 <= diff < -1      favorable
    -1 <= diff <= 1      neutral
    1 < diff < 5         unfavorable
    diff >= 5            strong unfavorable
  """
  diff = implied_growth - user_growth
  if diff < -GROWTH_STRONG_THRESHOLD:
    return Band.STRONG_FAVORABLE
  if diff < -GROWTH_NEUTRAL_THRESHOLD:
    return Band.FAVORABLE
  if diff <= GROWTH_NEUTRAL_THRESHOLD:
    return Band.NEUTRAL
  if diff < GROWTH_STRONG_THRESHOLD:
    return Band.UNFAVORABLE
  return Band.STRONG_UNFAVORABLE
