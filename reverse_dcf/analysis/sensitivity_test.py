import math

import pytest

from reverse_dcf.analysis.sensitivity import axis_values
from reverse_dcf.analysis.sensitivity import SensitivityGridBuilder
from reverse_dcf.domain.errors import DomainError
from reverse_dcf.domain.types import AxisFormat
from reverse_dcf.domain.types import Band
from reverse_dcf.engine.dcf import compute_intrinsic_value
from reverse_dcf.engine.implied_growth import solve_implied_growth

PRICE = 170.27


class TestAxisValues:
  """Tests for axis_values helper."""

  def test_default_offsets(self):
    assert axis_values(6.0, 1.0) == (4.0, 5.0, 6.0, 7.0, 8.0)

  def test_half_step(self):
    assert axis_values(2.5, 0.5) == (1.5, 2.0, 2.5, 3.0, 3.5)

  def test_floor(self):
    """Multiples below 1x are clamped, so keys may repeat."""
    assert axis_values(3.0, 2.0, floor=1.0) == (1.0, 1.0, 3.0, 5.0, 7.0)

  def test_custom_offsets(self):
    assert axis_values(10.0, 1.0, offsets=(-1, 0, 1)) == (9.0, 10.0, 11.0)


class TestValueGrid:
  """Tests for the discount rate x growth rate grid."""

  def test_shape_and_axes(self, exit_multiple_params):
    grid = SensitivityGridBuilder(5.0, PRICE,
                                  exit_multiple_params).build_value_grid()

    assert grid.shape == (5, 5)
    assert grid.rows.parameter == 'discount_rate'
    assert grid.rows.values == (4.0, 5.0, 6.0, 7.0, 8.0)
    assert grid.columns.parameter == 'growth_rate'
    assert grid.columns.values == (8.0, 9.0, 10.0, 11.0, 12.0)
    assert grid.cell_format is AxisFormat.CURRENCY
    assert grid.reference == PRICE

  def test_center_matches_base_evaluation(self, exit_multiple_params):
    grid = SensitivityGridBuilder(5.0, PRICE,
                                  exit_multiple_params).build_value_grid()

    expected = compute_intrinsic_value(5.0, exit_multiple_params).value
    assert grid.center == expected
    assert grid.value_at(6.0, 10.0) == pytest.approx(170.27, abs=0.005)

  def test_center_is_neutral(self, exit_multiple_params):
    grid = SensitivityGridBuilder(5.0, PRICE,
                                  exit_multiple_params).build_value_grid()

    assert grid.band_at(6.0, 10.0) is Band.NEUTRAL

  def test_cell_matches_engine(self, exit_multiple_params):
    grid = SensitivityGridBuilder(5.0, PRICE,
                                  exit_multiple_params).build_value_grid()

    expected = compute_intrinsic_value(
        5.0, exit_multiple_params.replace(discount_rate=4.0,
                                          growth_rate=12.0)).value
    assert grid.value_at(4.0, 12.0) == expected

  def test_monotonic(self, exit_multiple_params):
    """Value falls with discount rate and rises with growth."""
    grid = SensitivityGridBuilder(5.0, PRICE,
                                  exit_multiple_params).build_value_grid()

    for row in grid.values:
      assert list(row) == sorted(row)
    for j in range(grid.shape[1]):
      column = [row[j] for row in grid.values]
      assert column == sorted(column, reverse=True)

  def test_corner_bands(self, exit_multiple_params):
    """Low discount / high growth is far above price, the opposite far below.

    Manual calculation (approximate):
    4% / 12%: well above 1.15 x 170.27 = 195.81
    8% / 8%:  well below 0.85 x 170.27 = 144.73
    """
    grid = SensitivityGridBuilder(5.0, PRICE,
                                  exit_multiple_params).build_value_grid()

    assert grid.band_at(4.0, 12.0) is Band.STRONG_FAVORABLE
    assert grid.band_at(8.0, 8.0) is Band.STRONG_UNFAVORABLE

  def test_does_not_mutate_params(self, exit_multiple_params):
    before = exit_multiple_params.to_dict()
    SensitivityGridBuilder(5.0, PRICE, exit_multiple_params).build_value_grid()

    assert exit_multiple_params.to_dict() == before

  def test_thread_pool_matches_sequential(self, exit_multiple_params):
    sequential = SensitivityGridBuilder(5.0, PRICE,
                                        exit_multiple_params).build_value_grid()
    threaded = SensitivityGridBuilder(5.0,
                                      PRICE,
                                      exit_multiple_params,
                                      max_workers=4).build_value_grid()

    assert threaded == sequential

  def test_to_frame(self, exit_multiple_params):
    df = SensitivityGridBuilder(5.0, PRICE,
                                exit_multiple_params).build_value_grid().to_frame()

    assert df.shape == (5, 5)
    assert list(df.index) == ['4.0%', '5.0%', '6.0%', '7.0%', '8.0%']
    assert df.loc['6.0%', '10.0%'] == pytest.approx(170.27, abs=0.005)

  def test_zero_price_rejected(self, exit_multiple_params):
    builder = SensitivityGridBuilder(5.0, 0.0, exit_multiple_params)

    with pytest.raises(DomainError):
      builder.build_value_grid()

  def test_nan_price_rejected(self, exit_multiple_params):
    with pytest.raises(DomainError):
      SensitivityGridBuilder(5.0, float('nan'), exit_multiple_params)

  def test_empty_offsets_rejected(self, exit_multiple_params):
    with pytest.raises(ValueError, match='offsets'):
      SensitivityGridBuilder(5.0, PRICE, exit_multiple_params, offsets=())

  def test_discount_axis_below_minus_100_rejected(self, exit_multiple_params):
    """Base -98.5%: the lowest row would be -100.5%."""
    params = exit_multiple_params.replace(discount_rate=-98.5)

    with pytest.raises(DomainError, match='Discount rate axis reaches -100.5%'):
      SensitivityGridBuilder(5.0, PRICE, params)

  def test_discount_axis_just_above_minus_100(self, exit_multiple_params):
    """Base -97.5%: rows run from -99.5% and every cell evaluates."""
    params = exit_multiple_params.replace(discount_rate=-97.5)
    grid = SensitivityGridBuilder(5.0, PRICE, params).build_value_grid()

    assert grid.rows.values[0] == -99.5


class TestImpliedGrowthGrid:
  """Tests for the discount rate x terminal parameter grid."""

  def test_exit_multiple_axis(self, exit_multiple_params):
    grid = SensitivityGridBuilder(
        5.0, PRICE, exit_multiple_params).build_implied_growth_grid()

    assert grid.shape == (5, 5)
    assert grid.columns.parameter == 'terminal_multiple'
    assert grid.columns.values == (11.0, 13.0, 15.0, 17.0, 19.0)
    assert grid.columns.fmt is AxisFormat.MULTIPLE
    assert grid.cell_format is AxisFormat.PERCENT
    assert grid.reference == 10.0

  def test_center_recovers_base_growth(self, exit_multiple_params):
    """Price equal to the base value implies the base growth rate."""
    grid = SensitivityGridBuilder(
        5.0, PRICE, exit_multiple_params).build_implied_growth_grid()

    assert grid.center == solve_implied_growth(PRICE, 5.0,
                                               exit_multiple_params)
    assert grid.center == pytest.approx(10.0, abs=0.01)
    assert grid.band_at(6.0, 15.0) is Band.NEUTRAL

  def test_monotonic(self, exit_multiple_params):
    """Implied growth falls with the multiple and rises with discount rate."""
    grid = SensitivityGridBuilder(
        5.0, PRICE, exit_multiple_params).build_implied_growth_grid()

    for row in grid.values:
      assert list(row) == sorted(row, reverse=True)
    for j in range(grid.shape[1]):
      column = [row[j] for row in grid.values]
      assert column == sorted(column)

  def test_multiple_floor(self, exit_multiple_params):
    params = exit_multiple_params.replace(terminal_multiple=3.0)
    grid = SensitivityGridBuilder(5.0, PRICE,
                                  params).build_implied_growth_grid()

    assert grid.columns.values == (1.0, 1.0, 3.0, 5.0, 7.0)
    assert all(math.isfinite(v) for row in grid.values for v in row)

  def test_perpetuity_axis(self, exit_multiple_params):
    params = exit_multiple_params.replace(terminal_method='growth')
    grid = SensitivityGridBuilder(5.0, PRICE,
                                  params).build_implied_growth_grid()

    assert grid.columns.parameter == 'terminal_growth_rate'
    assert grid.columns.label == 'Terminal Growth'
    assert grid.columns.values == (1.5, 2.0, 2.5, 3.0, 3.5)
    assert grid.columns.fmt is AxisFormat.PERCENT

  def test_non_convergent_cells_are_zero(self, perpetuity_params):
    """Cells with discount rate <= terminal growth report 0% growth."""
    params = perpetuity_params.replace(discount_rate=3.0)
    grid = SensitivityGridBuilder(5.0, 100.0,
                                  params).build_implied_growth_grid()

    # rows 1..5%, columns 1.5..3.5%
    assert grid.value_at(1.0, 1.5) == 0.0
    assert grid.value_at(3.0, 3.0) == 0.0
    assert grid.value_at(3.0, 3.5) == 0.0
    assert grid.value_at(5.0, 1.5) != 0.0

  def test_thread_pool_matches_sequential(self, exit_multiple_params):
    sequential = SensitivityGridBuilder(
        5.0, PRICE, exit_multiple_params).build_implied_growth_grid()
    threaded = SensitivityGridBuilder(
        5.0, PRICE, exit_multiple_params,
        max_workers=3).build_implied_growth_grid()

    assert threaded == sequential


class TestGrowthCurve:
  """Tests for growth_curve."""

  def test_range(self, exit_multiple_params):
    """Growth 10%: 0% to 20% in 2pt steps."""
    df = SensitivityGridBuilder(5.0, PRICE,
                                exit_multiple_params).growth_curve()

    assert list(df.columns) == ['growth_rate', 'intrinsic_value']
    assert list(df['growth_rate']) == [float(g) for g in range(0, 21, 2)]

  def test_min_growth(self, exit_multiple_params):
    """Growth 3%: starts at -7%, above the -10% limit."""
    params = exit_multiple_params.replace(growth_rate=3.0)
    df = SensitivityGridBuilder(5.0, PRICE, params).growth_curve()

    assert df['growth_rate'].iloc[0] == -7.0
    assert df['growth_rate'].iloc[-1] == 13.0

  def test_values_rounded(self, exit_multiple_params):
    df = SensitivityGridBuilder(5.0, PRICE,
                                exit_multiple_params).growth_curve()

    row = df[df['growth_rate'] == 10.0].iloc[0]
    assert row['intrinsic_value'] == 170.27
    assert df['intrinsic_value'].is_monotonic_increasing

  def test_bad_step(self, exit_multiple_params):
    with pytest.raises(ValueError, match='step'):
      SensitivityGridBuilder(5.0, PRICE,
                             exit_multiple_params).growth_curve(step=0)
