"""Scenario configuration, policy registry and valuation cases."""

from reverse_dcf.scenarios.cases import default_cases
from reverse_dcf.scenarios.cases import evaluate_cases
from reverse_dcf.scenarios.cases import ScenarioCase
from reverse_dcf.scenarios.config import ScenarioConfig
from reverse_dcf.scenarios.registry import create_policies
from reverse_dcf.scenarios.registry import list_policies
from reverse_dcf.scenarios.registry import POLICY_REGISTRY

__all__ = [
  'ScenarioCase',
  'ScenarioConfig',
  'POLICY_REGISTRY',
  'create_policies',
  'default_cases',
  'evaluate_cases',
  'list_policies',
]
