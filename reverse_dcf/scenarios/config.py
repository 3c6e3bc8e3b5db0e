"""
Scenario configuration for valuations.

ScenarioConfig is a serializable (JSON-friendly) configuration class holding
the default model parameters and the names of the policies that suggest the
starting growth rate and exit multiple.
"""

from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
import json
from typing import Any, Optional

from reverse_dcf.domain.types import MetricType
from reverse_dcf.domain.types import ModelParameters
from reverse_dcf.engine.implied_growth import GrowthSearchBounds


@dataclass
class ScenarioConfig:
  """
  Configuration for a valuation scenario.

  Policy fields are strings that map to factories in the registry. All
  rates are percent except the search bounds, which are decimals.

  Attributes:
    name: Human-readable scenario name
    discount_rate: Required return, percent
    terminal_method: 'multiple' or 'growth'
    terminal_multiple: Exit multiple used when no multiple policy applies
    terminal_growth_rate: Perpetual growth, percent
    years: Explicit forecast years
    metric: 'EPS' or 'FCF'
    growth: Growth policy name (e.g., 'blended_historical')
    multiple: Exit multiple policy name (e.g., 'capped_pe', 'fixed_15x')
    search_low: Lowest implied growth searched, decimal
    search_high: Highest implied growth searched, decimal
    search_tolerance: Price tolerance for the implied growth search
    search_max_iterations: Bisection iteration limit
    policy_params: Optional dict of policy-specific parameters
  """
  name: str = 'default'
  discount_rate: float = 6.0
  terminal_method: str = 'multiple'
  terminal_multiple: float = 15.0
  terminal_growth_rate: float = 2.5
  years: int = 10
  metric: str = 'EPS'
  growth: str = 'blended_historical'
  multiple: str = 'capped_pe'
  search_low: float = -0.50
  search_high: float = 1.00
  search_tolerance: float = 0.01
  search_max_iterations: int = 100
  policy_params: dict[str, Any] = field(default_factory=dict)

  @classmethod
  def default(cls) -> 'ScenarioConfig':
    """
    Create default scenario configuration.

    Uses:
      - 6% discount rate
      - Exit multiple from current P/E, clipped to 10-20x
      - Growth from blended EPS/FCF history with a 15% haircut, 2-18% clip
      - 10-year forecast on EPS
      - Implied growth searched over -50% to 100%
    """
    return cls()

  @classmethod
  def perpetuity(cls) -> 'ScenarioConfig':
    """Scenario using a 2.5% perpetuity growth terminal value."""
    return cls(
        name='perpetuity',
        terminal_method='growth',
        terminal_growth_rate=2.5,
        multiple='fixed_15x',
    )

  @classmethod
  def manual(cls) -> 'ScenarioConfig':
    """Scenario for manually entered data: fixed 10% growth and 15x exit."""
    return cls(
        name='manual',
        growth='fixed_10pct',
        multiple='fixed_15x',
    )

  @property
  def metric_type(self) -> MetricType:
    return MetricType(self.metric)

  def search_bounds(self) -> GrowthSearchBounds:
    """Implied growth search settings."""
    return GrowthSearchBounds(
        low=self.search_low,
        high=self.search_high,
        tolerance=self.search_tolerance,
        max_iterations=self.search_max_iterations,
    )

  def to_params(
      self,
      growth_rate: float,
      terminal_multiple: Optional[float] = None,
  ) -> ModelParameters:
    """
    Build model parameters from this configuration.

    Args:
      growth_rate: Growth assumption, percent
      terminal_multiple: Exit multiple; defaults to self.terminal_multiple
    """
    return ModelParameters(
        discount_rate=self.discount_rate,
        growth_rate=growth_rate,
        years=self.years,
        terminal_method=self.terminal_method,
        terminal_multiple=(self.terminal_multiple if terminal_multiple is None
                           else terminal_multiple),
        terminal_growth_rate=self.terminal_growth_rate,
    )

  def to_dict(self) -> dict[str, Any]:
    """Convert to dictionary."""
    return asdict(self)

  def to_json(self) -> str:
    """Serialize to JSON string."""
    return json.dumps(self.to_dict(), indent=2)

  @classmethod
  def from_dict(cls, data: dict[str, Any]) -> 'ScenarioConfig':
    """Create from dictionary."""
    return cls(**data)

  @classmethod
  def from_json(cls, json_str: str) -> 'ScenarioConfig':
    """Create from JSON string."""
    return cls.from_dict(json.loads(json_str))
