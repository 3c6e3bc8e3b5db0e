"""
Policies for terminal values and parameter defaults.

Terminal policies are used by the engine on every evaluation. Growth and
multiple policies only suggest starting parameters from a StockSnapshot.

To add a new policy:
1. Create a new class inheriting from the appropriate base (e.g., GrowthPolicy)
2. Implement the compute() method returning PolicyOutput
3. Register in scenarios/registry.py
"""

from reverse_dcf.policies.growth import BlendedHistoricalGrowth
from reverse_dcf.policies.growth import FixedGrowth
from reverse_dcf.policies.growth import GrowthPolicy
from reverse_dcf.policies.terminal import CappedEarningsMultiple
from reverse_dcf.policies.terminal import ExitMultipleTerminal
from reverse_dcf.policies.terminal import FixedMultiple
from reverse_dcf.policies.terminal import MultiplePolicy
from reverse_dcf.policies.terminal import PerpetuityGrowthTerminal
from reverse_dcf.policies.terminal import terminal_policy_for
from reverse_dcf.policies.terminal import TerminalPolicy

__all__ = [
  'GrowthPolicy', 'BlendedHistoricalGrowth', 'FixedGrowth',
  'TerminalPolicy', 'ExitMultipleTerminal', 'PerpetuityGrowthTerminal',
  'terminal_policy_for',
  'MultiplePolicy', 'CappedEarningsMultiple', 'FixedMultiple',
]
