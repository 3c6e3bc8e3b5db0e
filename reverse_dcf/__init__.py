'''
Reverse DCF valuation engine.

This package estimates intrinsic value per share with a constant-growth DCF,
inverts the model to find the growth rate implied by the market price, and
builds sensitivity grids over pairs of model parameters. The engine is pure:
every call takes immutable inputs and returns a fresh result.

Usage:
  from reverse_dcf.domain.types import ModelParameters
  from reverse_dcf.engine.dcf import compute_intrinsic_value
  from reverse_dcf.engine.implied_growth import solve_implied_growth

  params = ModelParameters(discount_rate=6, growth_rate=10, years=10)
  result = compute_intrinsic_value(5.0, params)
  implied = solve_implied_growth(result.value, 5.0, params)
'''
