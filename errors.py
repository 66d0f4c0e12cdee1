"""Error types raised by the backtest engine and its load boundary.

Each error carries a stable `code` that the HTTP layer puts in the
response envelope. Nothing here knows about status codes.
"""

from __future__ import annotations


class BacktestError(Exception):
  """Base class for all backtest errors."""

  code = "INTERNAL_ERROR"

  def __init__(self, message: str, details: dict | None = None):
    super().__init__(message)
    self.message = message
    self.details = details or {}


class ValidationError(BacktestError):
  """Malformed caller input."""

  code = "VALIDATION_ERROR"


class InsufficientDataError(BacktestError):
  """Corpus is too small to return the fixed number of matches."""

  code = "INSUFFICIENT_DATA"


class EmptyAggregationError(BacktestError):
  """Aggregation requested over zero time-series records."""

  code = "INSUFFICIENT_DATA"


class NotFoundError(BacktestError):
  """None of the requested video ids exist in the corpus."""

  code = "NOT_FOUND"


class CorpusLoadError(BacktestError):
  """The historical dataset could not be read or is missing columns."""

  code = "DATA_UNAVAILABLE"
