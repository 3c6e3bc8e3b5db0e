import pytest

from reverse_dcf.domain.types import HistoricalGrowth
from reverse_dcf.domain.types import ModelParameters
from reverse_dcf.domain.types import StockSnapshot
from reverse_dcf.domain.types import TerminalMethod


@pytest.fixture
def exit_multiple_params() -> ModelParameters:
  """6% discount, 10% growth, 10 years, 15x exit multiple."""
  return ModelParameters(
      discount_rate=6.0,
      growth_rate=10.0,
      years=10,
      terminal_method=TerminalMethod.EXIT_MULTIPLE,
      terminal_multiple=15.0,
      terminal_growth_rate=2.5,
  )


@pytest.fixture
def perpetuity_params() -> ModelParameters:
  """10% discount, 5% growth, 5 years, 2.5% perpetuity growth."""
  return ModelParameters(
      discount_rate=10.0,
      growth_rate=5.0,
      years=5,
      terminal_method=TerminalMethod.PERPETUITY_GROWTH,
      terminal_multiple=15.0,
      terminal_growth_rate=2.5,
  )


@pytest.fixture
def sample_snapshot() -> StockSnapshot:
  """Manual-entry style snapshot: price 100, EPS 5, FCF 4."""
  return StockSnapshot(
      ticker='TEST',
      price=100.0,
      eps=5.0,
      fcf=4.0,
      growth_rate=10.0,
      historical=HistoricalGrowth(
          eps_growth_5y=10.0,
          eps_growth_3y=12.0,
          fcf_growth_5y=9.0,
          fcf_growth_3y=11.0,
      ),
  )
