"""
Policy registry for mapping string names to policy factories.

This enables scenarios to be configured with string names (JSON friendly)
while still instantiating the correct policy classes.

To add a new policy:
1. Implement the policy class in the appropriate module
   (e.g., policies/growth.py)
2. Add a factory here and register it in the matching dictionary

Example:
  GROWTH_POLICIES['blended_no_clip'] = lambda: BlendedHistoricalGrowth(
      clip_min=-100.0, clip_max=100.0)
"""

from collections.abc import Callable
from typing import Any, cast

from reverse_dcf.policies.growth import BlendedHistoricalGrowth
from reverse_dcf.policies.growth import FixedGrowth
from reverse_dcf.policies.growth import GrowthPolicy
from reverse_dcf.policies.terminal import CappedEarningsMultiple
from reverse_dcf.policies.terminal import FixedMultiple
from reverse_dcf.policies.terminal import MultiplePolicy
from reverse_dcf.scenarios.config import ScenarioConfig

GROWTH_POLICIES: dict[str, Callable[[], GrowthPolicy]] = {
    'blended_historical':
        lambda: BlendedHistoricalGrowth(
            haircut=0.85, clip_min=2.0, clip_max=18.0, fallback=8.0),
    'blended_no_haircut':
        lambda: BlendedHistoricalGrowth(
            haircut=1.0, clip_min=2.0, clip_max=18.0, fallback=8.0),
    'fixed_10pct':
        lambda: FixedGrowth(growth_rate=10.0),
}

MULTIPLE_POLICIES: dict[str, Callable[[], MultiplePolicy]] = {
    'capped_pe': lambda: CappedEarningsMultiple(floor=10.0, cap=20.0),
    'capped_pe_25x': lambda: CappedEarningsMultiple(floor=10.0, cap=25.0),
    'fixed_15x': lambda: FixedMultiple(multiple=15.0),
}

POLICY_REGISTRY = {
    'growth': GROWTH_POLICIES,
    'multiple': MULTIPLE_POLICIES,
}


def create_policies(config: ScenarioConfig) -> dict[str, Any]:
  """
  Create policy instances from scenario configuration.

  Args:
    config: ScenarioConfig with policy names

  Returns:
    Dictionary with instantiated policy objects:
    - growth: GrowthPolicy
    - multiple: exit multiple policy

  Raises:
    KeyError: If a policy name is not found in the registry
  """
  try:
    growth_factory = GROWTH_POLICIES[config.growth]
  except KeyError as e:
    raise KeyError(f"Unknown growth policy: '{config.growth}'. "
                   f'Available: {list(GROWTH_POLICIES.keys())}') from e

  try:
    multiple_factory = MULTIPLE_POLICIES[config.multiple]
  except KeyError as e:
    raise KeyError(f"Unknown multiple policy: '{config.multiple}'. "
                   f'Available: {list(MULTIPLE_POLICIES.keys())}') from e

  return {
      'growth': growth_factory(),
      'multiple': multiple_factory(),
  }


def list_policies() -> dict[str, list[str]]:
  """
  List all available policies by category.

  Returns:
    Dictionary mapping category names to list of policy names
  """
  result: dict[str, list[str]] = {}
  for category, policies_dict in POLICY_REGISTRY.items():
    policy_dict = cast(dict[str, object], policies_dict)
    result[category] = list(policy_dict.keys())
  return result
