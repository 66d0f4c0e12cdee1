#!/usr/bin/env python3

"""Average engagement curves across matched historical videos.

Given the time-series rows of the matched videos, computes the mean
views / CTR / likes at each offset (1h, 3h, 6h, 12h, 24h) and a
formatted 24h headline summary.

Rounding: views and likes use half-up rounding to an integer, CTR keeps
4 decimal places.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from errors import EmptyAggregationError
from models import (
    TIME_OFFSETS,
    AggregatedMetrics,
    HeadlineMetrics,
    MetricPoint,
    TimeSeriesRecord,
)

_CTR_PRECISION = 4


def _round_half_up(value: float) -> int:
  """Round to the nearest integer, .5 going up (inputs are non-negative)."""
  return int(math.floor(value + 0.5))


def _mean(records: Sequence[TimeSeriesRecord], metric: str, offset: str) -> float:
  return sum(r.value(metric, offset) for r in records) / len(records)


def format_count(value: float) -> str:
  """Integer string without thousands separators, e.g. 12345.6 -> '12346'."""
  return str(_round_half_up(value))


def format_ctr(fraction: float) -> str:
  """CTR fraction as a 2-decimal percentage, e.g. 0.069 -> '6.90%'."""
  return f"{fraction * 100:.2f}%"


def aggregate_time_series(records: Sequence[TimeSeriesRecord]) -> AggregatedMetrics:
  """Compute mean curves and the 24h headline metrics.

  Args:
    records: Time-series rows of the matched videos.
  Returns:
    AggregatedMetrics with 5 points per family in TIME_OFFSETS order.
  Raises:
    EmptyAggregationError: records is empty.
  """
  if not records:
    raise EmptyAggregationError("Cannot aggregate empty time-series data")

  avg = {
      metric: {offset: _mean(records, metric, offset) for offset in TIME_OFFSETS}
      for metric in ("views", "ctr", "likes")
  }

  views = [
      MetricPoint(time=t, value=_round_half_up(avg["views"][t]))
      for t in TIME_OFFSETS
  ]
  ctr = [
      MetricPoint(time=t, value=round(avg["ctr"][t], _CTR_PRECISION))
      for t in TIME_OFFSETS
  ]
  likes = [
      MetricPoint(time=t, value=_round_half_up(avg["likes"][t]))
      for t in TIME_OFFSETS
  ]

  headline = HeadlineMetrics(
      views24h=str(views[-1].value),
      ctr24h=format_ctr(avg["ctr"]["24h"]),
      likes24h=str(likes[-1].value),
  )
  return AggregatedMetrics(views=views, ctr=ctr, likes=likes, metrics=headline)
