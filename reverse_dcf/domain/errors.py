"""Exceptions raised by the valuation engine."""


class DomainError(ValueError):
  """
  Input outside the domain where the DCF model is defined.

  Raised for non-finite numbers, a horizon shorter than one year, or a
  discount rate at or below -100% (which makes discount factors undefined).
  """
