"""Domain types for the reverse DCF engine."""

from reverse_dcf.domain.errors import DomainError
from reverse_dcf.domain.types import AxisFormat
from reverse_dcf.domain.types import Band
from reverse_dcf.domain.types import GridAxis
from reverse_dcf.domain.types import HistoricalGrowth
from reverse_dcf.domain.types import ImpliedGrowthResult
from reverse_dcf.domain.types import MetricType
from reverse_dcf.domain.types import ModelParameters
from reverse_dcf.domain.types import PolicyOutput
from reverse_dcf.domain.types import SensitivityGrid
from reverse_dcf.domain.types import SolverStatus
from reverse_dcf.domain.types import StockSnapshot
from reverse_dcf.domain.types import TerminalMethod
from reverse_dcf.domain.types import ValuationResult
from reverse_dcf.domain.types import ValuationSummary

__all__ = [
    'AxisFormat',
    'Band',
    'DomainError',
    'GridAxis',
    'HistoricalGrowth',
    'ImpliedGrowthResult',
    'MetricType',
    'ModelParameters',
    'PolicyOutput',
    'SensitivityGrid',
    'SolverStatus',
    'StockSnapshot',
    'TerminalMethod',
    'ValuationResult',
    'ValuationSummary',
]
