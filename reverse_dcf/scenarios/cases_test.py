import pytest

from reverse_dcf.domain.types import TerminalMethod
from reverse_dcf.engine.dcf import compute_intrinsic_value
from reverse_dcf.scenarios.cases import case_params
from reverse_dcf.scenarios.cases import default_cases
from reverse_dcf.scenarios.cases import evaluate_cases
from reverse_dcf.scenarios.cases import ScenarioCase


class TestDefaultCases:
  """Tests for default_cases."""

  def test_exit_multiple_cases(self):
    """Base growth 8.1%, multiple 15x.

    Manual calculation:
    Conservative: floor(8.1 * 0.6) = floor(4.86) = 4, floor(15 * 0.7) = 10
    Normal:       8.1, 15
    Aggressive:   ceil(8.1 * 1.3) = ceil(10.53) = 11, ceil(15 * 1.2) = 18
    """
    conservative, normal, aggressive = default_cases(
        8.1, 15.0, TerminalMethod.EXIT_MULTIPLE)

    assert (conservative.growth_rate, conservative.terminal_input) == (4.0,
                                                                       10.0)
    assert (normal.growth_rate, normal.terminal_input) == (8.1, 15.0)
    assert (aggressive.growth_rate, aggressive.terminal_input) == (11.0, 18.0)
    assert [c.name for c in (conservative, normal, aggressive)] == [
        'Conservative', 'Normal', 'Aggressive'
    ]

  def test_multiple_floor_and_rounding(self):
    """Low multiple: conservative floors at 5x, normal rounds half up."""
    conservative, normal, aggressive = default_cases(
        2.0, 6.5, TerminalMethod.EXIT_MULTIPLE)

    assert conservative.terminal_input == 5.0
    assert normal.terminal_input == 7.0
    assert aggressive.terminal_input == 8.0
    assert conservative.growth_rate == 1.0
    assert aggressive.growth_rate == 3.0

  def test_negative_growth(self):
    """Conservative growth never drops below 0."""
    conservative, _, aggressive = default_cases(-5.0, 15.0,
                                                TerminalMethod.EXIT_MULTIPLE)

    assert conservative.growth_rate == 0.0
    assert aggressive.growth_rate == -6.0

  def test_perpetuity_cases(self):
    cases = default_cases(10.0, 15.0, TerminalMethod.PERPETUITY_GROWTH)

    assert [c.terminal_input for c in cases] == [2.0, 2.5, 3.0]
    assert [c.growth_rate for c in cases] == [6.0, 10.0, 13.0]

  def test_string_method(self):
    cases = default_cases(10.0, 15.0, 'growth')

    assert cases[1].terminal_input == 2.5


class TestCaseParams:

  def test_exit_multiple(self, exit_multiple_params):
    params = case_params(ScenarioCase('X', 4.0, 10.0), exit_multiple_params)

    assert params.growth_rate == 4.0
    assert params.terminal_multiple == 10.0
    assert params.terminal_growth_rate == 2.5
    assert params.discount_rate == 6.0

  def test_perpetuity(self, perpetuity_params):
    params = case_params(ScenarioCase('X', 4.0, 3.0), perpetuity_params)

    assert params.terminal_growth_rate == 3.0
    assert params.terminal_multiple == 15.0


class TestEvaluateCases:
  """Tests for evaluate_cases."""

  def test_frame(self, exit_multiple_params):
    cases = default_cases(10.0, 15.0, TerminalMethod.EXIT_MULTIPLE)
    df = evaluate_cases(5.0, 170.27, exit_multiple_params, cases)

    assert list(df.index) == ['Conservative', 'Normal', 'Aggressive']
    assert list(df.columns) == [
        'growth_rate', 'terminal_input', 'intrinsic_value', 'upside'
    ]
    assert df.loc['Normal', 'intrinsic_value'] == pytest.approx(170.27,
                                                                abs=0.005)
    assert df.loc['Normal', 'upside'] == pytest.approx(0.0, abs=0.01)

  def test_ordering(self, exit_multiple_params):
    cases = default_cases(10.0, 15.0, TerminalMethod.EXIT_MULTIPLE)
    df = evaluate_cases(5.0, 170.27, exit_multiple_params, cases)

    values = list(df['intrinsic_value'])
    assert values == sorted(values)
    assert df.loc['Conservative', 'upside'] < 0
    assert df.loc['Aggressive', 'upside'] > 0

  def test_matches_engine(self, exit_multiple_params):
    case = ScenarioCase('Conservative', 6.0, 10.0)
    df = evaluate_cases(5.0, 100.0, exit_multiple_params, [case])

    expected = compute_intrinsic_value(
        5.0, exit_multiple_params.replace(growth_rate=6.0,
                                          terminal_multiple=10.0)).value
    assert df.loc['Conservative', 'intrinsic_value'] == expected
