"""
Terminal value policies.

These policies turn the final explicit-year value into the (undiscounted)
lump-sum value of everything beyond the projection horizon. The engine picks
one per evaluation from ModelParameters.terminal_method.

CappedEarningsMultiple is a defaults policy: it suggests a starting exit
multiple from the current P/E before the user adjusts it.
"""

from abc import ABC
from abc import abstractmethod

from reverse_dcf.domain.types import ModelParameters
from reverse_dcf.domain.types import PolicyOutput
from reverse_dcf.domain.types import StockSnapshot
from reverse_dcf.domain.types import TerminalMethod


class TerminalPolicy(ABC):
  """
  Base class for terminal value policies.

  Subclasses implement compute() to return the undiscounted terminal value.
  """

  @abstractmethod
  def compute(self, final_value: float,
              discount_rate: float) -> PolicyOutput[float]:
    """
    Compute terminal value at the end of the explicit horizon.

    Args:
      final_value: Undiscounted projected value in the last explicit year
      discount_rate: Required return as a decimal (r)

    Returns:
      PolicyOutput with terminal value and diagnostics
    """


class ExitMultipleTerminal(TerminalPolicy):
  """
  Exit multiple: the business is sold at a multiple of final-year value.
  """

  def __init__(self, multiple: float = 15.0):
    """
    Initialize exit multiple policy.

    Args:
      multiple: Multiple applied to the final-year value (default: 15x)
    """
    self.multiple = multiple

  def compute(self, final_value: float,
              discount_rate: float) -> PolicyOutput[float]:
    """Return final_value * multiple."""
    return PolicyOutput(value=final_value * self.multiple,
                        diag={
                            'terminal_method': 'exit_multiple',
                            'terminal_multiple': self.multiple,
                        })


class PerpetuityGrowthTerminal(TerminalPolicy):
  """
  Gordon growth perpetuity.

  TV = V * (1 + g) / (r - g). When r <= g the series diverges; the terminal
  value is then reported as 0 and flagged non_convergent in diagnostics.
  """

  def __init__(self, g_terminal: float = 0.025):
    """
    Initialize perpetuity growth policy.

    Args:
      g_terminal: Perpetual growth rate as a decimal (default: 2.5%)
    """
    self.g_terminal = g_terminal

  def compute(self, final_value: float,
              discount_rate: float) -> PolicyOutput[float]:
    """Return the Gordon growth terminal value, or 0 if undefined."""
    if discount_rate <= self.g_terminal:
      return PolicyOutput(value=0.0,
                          diag={
                              'terminal_method': 'perpetuity_growth',
                              'g_terminal': self.g_terminal,
                              'non_convergent': True,
                          })

    tv = final_value * (1.0 + self.g_terminal) / (discount_rate -
                                                  self.g_terminal)
    return PolicyOutput(value=tv,
                        diag={
                            'terminal_method': 'perpetuity_growth',
                            'g_terminal': self.g_terminal,
                            'non_convergent': False,
                        })


def terminal_policy_for(params: ModelParameters) -> TerminalPolicy:
  """Build the terminal policy selected by params.terminal_method."""
  if params.terminal_method is TerminalMethod.EXIT_MULTIPLE:
    return ExitMultipleTerminal(multiple=params.terminal_multiple)
  return PerpetuityGrowthTerminal(g_terminal=params.terminal_growth_rate /
                                  100.0)


class MultiplePolicy(ABC):
  """
  Base class for exit multiple policies.

  Subclasses implement compute() to suggest a starting exit multiple for a
  snapshot.
  """

  @abstractmethod
  def compute(self, data: StockSnapshot) -> PolicyOutput[float]:
    """
    Suggest an exit multiple.

    Args:
      data: Snapshot from the data-retrieval layer

    Returns:
      PolicyOutput with the multiple and diagnostics
    """


class CappedEarningsMultiple(MultiplePolicy):
  """
  Starting exit multiple derived from the current P/E.

  The P/E is clipped so a richly valued stock does not get an equally rich
  exit multiple, and a cheap one is not valued below a floor.
  """

  def __init__(self, floor: float = 10.0, cap: float = 20.0):
    """
    Initialize capped P/E policy.

    Args:
      floor: Lowest multiple suggested (default: 10x)
      cap: Highest multiple suggested (default: 20x)
    """
    self.floor = floor
    self.cap = cap

  def compute(self, data: StockSnapshot) -> PolicyOutput[float]:
    """Return clip(price / eps, floor, cap) rounded to 0.1."""
    # A zero EPS falls back to dividing by one.
    current_pe = data.price / (data.eps or 1.0)
    multiple = round(max(self.floor, min(current_pe, self.cap)), 1)
    return PolicyOutput(value=multiple,
                        diag={
                            'multiple_method': 'capped_pe',
                            'current_pe': current_pe,
                            'clip_range': (self.floor, self.cap),
                        })


class FixedMultiple(MultiplePolicy):
  """Constant exit multiple regardless of the snapshot."""

  def __init__(self, multiple: float = 15.0):
    self.multiple = multiple

  def compute(self, data: StockSnapshot) -> PolicyOutput[float]:  # pylint: disable=unused-argument
    return PolicyOutput(value=self.multiple,
                        diag={
                            'multiple_method': 'fixed',
                            'terminal_multiple': self.multiple,
                        })
