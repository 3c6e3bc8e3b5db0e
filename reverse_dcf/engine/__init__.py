'''DCF calculation engine with pure math functions.'''

from reverse_dcf.engine.dcf import (
    compute_intrinsic_value,
    compute_pv_explicit,
    compute_terminal_value,
    compute_upside,
    discount_factor,
)
from reverse_dcf.engine.implied_growth import (
    DEFAULT_BOUNDS,
    GrowthSearchBounds,
    solve_implied_growth,
    solve_implied_growth_detailed,
)

__all__ = [
    'DEFAULT_BOUNDS',
    'GrowthSearchBounds',
    'compute_intrinsic_value',
    'compute_pv_explicit',
    'compute_terminal_value',
    'compute_upside',
    'discount_factor',
    'solve_implied_growth',
    'solve_implied_growth_detailed',
]
