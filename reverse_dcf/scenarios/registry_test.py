import pytest

from reverse_dcf.policies.growth import BlendedHistoricalGrowth
from reverse_dcf.policies.growth import FixedGrowth
from reverse_dcf.policies.terminal import CappedEarningsMultiple
from reverse_dcf.policies.terminal import FixedMultiple
from reverse_dcf.policies.terminal import MultiplePolicy
from reverse_dcf.scenarios.config import ScenarioConfig
from reverse_dcf.scenarios.registry import create_policies
from reverse_dcf.scenarios.registry import list_policies
from reverse_dcf.scenarios.registry import MULTIPLE_POLICIES


class TestCreatePolicies:
  """Tests for create_policies."""

  def test_default(self):
    policies = create_policies(ScenarioConfig.default())

    assert isinstance(policies['growth'], BlendedHistoricalGrowth)
    assert isinstance(policies['multiple'], CappedEarningsMultiple)

  def test_manual(self):
    policies = create_policies(ScenarioConfig.manual())

    assert isinstance(policies['growth'], FixedGrowth)
    assert isinstance(policies['multiple'], FixedMultiple)

  def test_fresh_instances(self):
    a = create_policies(ScenarioConfig.default())
    b = create_policies(ScenarioConfig.default())

    assert a['growth'] is not b['growth']

  def test_unknown_growth_policy(self):
    with pytest.raises(KeyError, match='Unknown growth policy'):
      create_policies(ScenarioConfig(growth='analyst_consensus'))

  def test_unknown_multiple_policy(self):
    with pytest.raises(KeyError, match='fixed_15x'):
      create_policies(ScenarioConfig(multiple='sector_median'))


def test_list_policies():
  policies = list_policies()

  assert set(policies) == {'growth', 'multiple'}
  assert 'blended_historical' in policies['growth']
  assert 'capped_pe' in policies['multiple']


@pytest.mark.parametrize('name', sorted(MULTIPLE_POLICIES))
def test_multiple_factories_build_multiple_policies(name):
  assert isinstance(MULTIPLE_POLICIES[name](), MultiplePolicy)
