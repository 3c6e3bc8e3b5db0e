'''
Growth rate default policies.

These policies suggest the starting growth assumption (percent) for the
forward model from the historical growth figures in a StockSnapshot. The
user is expected to adjust the suggestion; the engine never calls these.
'''

from abc import ABC, abstractmethod
from typing import Optional

from reverse_dcf.domain.types import PolicyOutput, StockSnapshot


class GrowthPolicy(ABC):
  '''
  Base class for growth default policies.

  Subclasses implement compute() to return a growth rate in percent.
  '''

  @abstractmethod
  def compute(self, data: StockSnapshot) -> PolicyOutput[float]:
    '''
    Compute the suggested growth rate.

    Args:
      data: Snapshot from the data-retrieval layer

    Returns:
      PolicyOutput with growth rate (percent) and diagnostics
    '''


class BlendedHistoricalGrowth(GrowthPolicy):
  '''
  Haircut blend of historical FCF and EPS growth.

  FCF and EPS growth each prefer the 5-year figure and fall back to the
  3-year one. Both present are averaged; otherwise whichever exists is used,
  then the snapshot's headline growth, then a fixed fallback. The result is
  multiplied by a haircut and clipped.
  '''

  def __init__(
      self,
      haircut: float = 0.85,
      clip_min: float = 2.0,
      clip_max: float = 18.0,
      fallback: float = 8.0,
  ):
    '''
    Initialize blended growth policy.

    Args:
      haircut: Multiplier applied to the historical blend (default: 0.85)
      clip_min: Minimum suggested growth, percent (default: 2%)
      clip_max: Maximum suggested growth, percent (default: 18%)
      fallback: Growth used when no history is available (default: 8%)
    '''
    self.haircut = haircut
    self.clip_min = clip_min
    self.clip_max = clip_max
    self.fallback = fallback

  def compute(self, data: StockSnapshot) -> PolicyOutput[float]:
    '''Blend, haircut and clip historical growth.'''
    hist = data.historical
    # Zero counts as missing, matching how the retrieval layer reports gaps.
    fcf_growth: Optional[float] = hist.fcf_growth_5y or hist.fcf_growth_3y
    eps_growth: Optional[float] = hist.eps_growth_5y or hist.eps_growth_3y

    if fcf_growth is not None and eps_growth is not None:
      raw, source = (fcf_growth + eps_growth) / 2, 'fcf_eps_average'
    elif fcf_growth is not None:
      raw, source = fcf_growth, 'fcf'
    elif eps_growth is not None:
      raw, source = eps_growth, 'eps'
    elif data.growth_rate:
      raw, source = data.growth_rate, 'headline'
    else:
      raw, source = self.fallback, 'fallback'

    haircut_growth = raw * self.haircut
    clipped = max(self.clip_min, min(haircut_growth, self.clip_max))

    return PolicyOutput(value=round(clipped, 1),
                        diag={
                            'growth_method': 'blended_historical',
                            'growth_source': source,
                            'raw_growth': raw,
                            'haircut': self.haircut,
                            'clip_range': (self.clip_min, self.clip_max),
                        })


class FixedGrowth(GrowthPolicy):
  '''Constant growth assumption, for manual entry.'''

  def __init__(self, growth_rate: float = 10.0):
    self.growth_rate = growth_rate

  def compute(self, data: StockSnapshot) -> PolicyOutput[float]:  # pylint: disable=unused-argument
    return PolicyOutput(value=self.growth_rate,
                        diag={
                            'growth_method': 'fixed',
                            'growth_rate': self.growth_rate,
                        })
