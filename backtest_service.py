#!/usr/bin/env python3

"""Backtest a posting strategy against historical performance.

Pipeline:
  1. Rank the historical corpus against the strategy (similarity_matcher).
  2. Look up time-series rows of the matched videos (corpus_store).
  3. Average them into predicted curves (timeseries_aggregator).
  4. Attach each match's own 24h CTR and views for display.
"""

from __future__ import annotations

import logging

import similarity_matcher
import timeseries_aggregator
from corpus_store import CorpusStore
from models import BacktestResult, EnrichedMatch, QueryDescriptor


def build_query(strategy: dict, features: dict, platform: str) -> QueryDescriptor:
  """Map a strategy/features request payload onto a QueryDescriptor.

  Missing or null fields become empty strings.
  """
  strategy = strategy or {}
  features = features or {}
  return QueryDescriptor(
      cover_description=str(strategy.get("cover") or ""),
      title=str(strategy.get("title") or ""),
      hashtags=str(strategy.get("hashtags") or ""),
      category=str(features.get("category") or ""),
      platform=str(platform or ""),
  )


def run_backtest(
    query: QueryDescriptor,
    store: CorpusStore,
    top_k: int = similarity_matcher.DEFAULT_MATCH_COUNT,
) -> BacktestResult:
  """Predict 24h performance of a strategy from its closest historical matches.

  Raises:
    InsufficientDataError: corpus smaller than top_k.
    NotFoundError: matched ids have no time-series rows.
    CorpusLoadError: the dataset cannot be read.
  """
  matches = similarity_matcher.find_similar_videos(
      query, store.all_videos(), top_k=top_k,
  )
  records = store.time_series([m.video_id for m in matches])
  predictions = timeseries_aggregator.aggregate_time_series(records)

  by_id = {r.video_id: r for r in records}
  enriched = []
  for match in matches:
    record = by_id.get(match.video_id)
    enriched.append(EnrichedMatch(
        video_id=match.video_id,
        title=match.title,
        similarity=match.similarity,
        ctr=timeseries_aggregator.format_ctr(record.ctr_24h) if record else "N/A",
        views24h=timeseries_aggregator.format_count(record.views_24h) if record else "N/A",
    ))

  logging.info(
      "Backtest complete: %d matches, predicted 24h views %s, CTR %s",
      len(enriched), predictions.metrics.views24h, predictions.metrics.ctr24h,
  )
  return BacktestResult(predictions=predictions, matched_videos=enriched)
