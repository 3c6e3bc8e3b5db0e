'''
Conservative / normal / aggressive valuation cases.

The three cases bracket the base growth assumption and terminal input so a
user can see the spread of intrinsic values at a single discount rate.
'''

from dataclasses import dataclass
import math
from typing import Sequence, Tuple

import pandas as pd

from reverse_dcf.domain.types import ModelParameters
from reverse_dcf.domain.types import TerminalMethod
from reverse_dcf.engine.dcf import compute_intrinsic_value
from reverse_dcf.engine.dcf import compute_upside


@dataclass(frozen=True)
class ScenarioCase:
  '''
  One valuation case.

  Attributes:
    name: Case name
    growth_rate: Growth assumption, percent
    terminal_input: Exit multiple or terminal growth (percent), depending on
      the terminal method the case is evaluated with
  '''
  name: str
  growth_rate: float
  terminal_input: float


def _round_half_up(x: float) -> int:
  return math.floor(x + 0.5)


def default_cases(
    base_growth: float,
    base_multiple: float,
    terminal_method: TerminalMethod,
) -> Tuple[ScenarioCase, ScenarioCase, ScenarioCase]:
  '''
  Derive the three cases from a base growth rate and exit multiple.

  Conservative takes 60% of base growth (floored, at least 0) and 70% of
  the multiple (floored, at least 5x). Aggressive takes 130% of growth and
  120% of the multiple, both rounded up. Under perpetuity growth the
  terminal inputs are 2.0%, 2.5% and 3.0%.

  Args:
    base_growth: Normal-case growth, percent
    base_multiple: Normal-case exit multiple
    terminal_method: Method the cases will be evaluated with
  '''
  if TerminalMethod(terminal_method) is TerminalMethod.EXIT_MULTIPLE:
    terminals = (
        max(5, math.floor(base_multiple * 0.7)),
        _round_half_up(base_multiple),
        math.ceil(base_multiple * 1.2),
    )
  else:
    terminals = (2.0, 2.5, 3.0)

  return (
      ScenarioCase('Conservative', float(max(0, math.floor(base_growth * 0.6))),
                   float(terminals[0])),
      ScenarioCase('Normal', round(base_growth, 1), float(terminals[1])),
      ScenarioCase('Aggressive', float(math.ceil(base_growth * 1.3)),
                   float(terminals[2])),
  )


def case_params(case: ScenarioCase, params: ModelParameters) -> ModelParameters:
  '''Substitute a case's growth and terminal input into params.'''
  terminal_field = ('terminal_multiple' if params.terminal_method
                    is TerminalMethod.EXIT_MULTIPLE else 'terminal_growth_rate')
  return params.replace(**{
      'growth_rate': case.growth_rate,
      terminal_field: case.terminal_input,
  })


def evaluate_cases(
    base_value: float,
    current_price: float,
    params: ModelParameters,
    cases: Sequence[ScenarioCase],
) -> pd.DataFrame:
  '''
  Value each case with the discount rate and horizon of params.

  Args:
    base_value: Trailing per-share metric
    current_price: Market price per share
    params: Base parameters (discount rate, years, terminal method)
    cases: Cases to evaluate

  Returns:
    DataFrame indexed by case name with growth_rate, terminal_input,
    intrinsic_value and upside (percent) columns
  '''
  records = []
  for case in cases:
    result = compute_intrinsic_value(base_value, case_params(case, params))
    records.append({
        'case': case.name,
        'growth_rate': case.growth_rate,
        'terminal_input': case.terminal_input,
        'intrinsic_value': result.value,
        'upside': compute_upside(result.value, current_price),
    })

  df = pd.DataFrame(records).set_index('case')
  return df
