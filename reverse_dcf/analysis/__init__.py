'''
Sensitivity analysis utilities.

  from reverse_dcf.analysis.sensitivity import SensitivityGridBuilder
  from reverse_dcf.analysis.bands import classify_value_cell
'''

from reverse_dcf.analysis.bands import classify_implied_growth_cell
from reverse_dcf.analysis.bands import classify_value_cell
from reverse_dcf.analysis.sensitivity import axis_values
from reverse_dcf.analysis.sensitivity import SensitivityGridBuilder

__all__ = [
    'SensitivityGridBuilder',
    'axis_values',
    'classify_implied_growth_cell',
    'classify_value_cell',
]
