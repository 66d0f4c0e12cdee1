#!/usr/bin/env python3

"""Deterministic similarity matching against the historical corpus.

Scores every historical video against a candidate strategy with a
weighted sum of five field comparisons and returns the top matches.

Same inputs → same outputs. No LLM required.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import text_similarity
from errors import InsufficientDataError
from models import HistoricalVideo, QueryDescriptor, ScoredMatch

DEFAULT_MATCH_COUNT = 5

# Field weights, summing to 1.0
WEIGHTS = {
    "category": 0.40,
    "platform": 0.10,
    "hashtags": 0.25,
    "title": 0.15,
    "cover_description": 0.10,
}

# Partial credit for a related (first-word) category match
_PARTIAL_CATEGORY_FACTOR = 0.5

# Decimal places kept on the composite score
_SCORE_PRECISION = 6


def _category_score(query_category: str, video_category: str) -> float:
  """Full weight on exact match, half when one contains the other's first word."""
  q = (query_category or "").strip().lower()
  v = (video_category or "").strip().lower()
  if not q or not v:
    return 0.0
  if q == v:
    return WEIGHTS["category"]
  q_first = q.split()[0]
  v_first = v.split()[0]
  if q_first in v or v_first in q:
    return WEIGHTS["category"] * _PARTIAL_CATEGORY_FACTOR
  return 0.0


def _platform_score(query_platform: str, video_platform: str) -> float:
  if not query_platform or not video_platform:
    return 0.0
  return WEIGHTS["platform"] if query_platform == video_platform else 0.0


def score_breakdown(
    query: QueryDescriptor,
    video: HistoricalVideo,
) -> dict[str, float]:
  """Weighted contribution of each field for one candidate.

  Returns:
    Dict keyed like WEIGHTS; each value lies in [0, WEIGHTS[key]].
  """
  return {
      "category": _category_score(query.category, video.category),
      "platform": _platform_score(query.platform, video.platform),
      "hashtags": WEIGHTS["hashtags"] * text_similarity.hashtag_similarity(
          query.hashtags, video.hashtags
      ),
      "title": WEIGHTS["title"] * text_similarity.text_similarity(
          query.title, video.title
      ),
      "cover_description": WEIGHTS["cover_description"]
      * text_similarity.text_similarity(
          query.cover_description, video.cover_description
      ),
  }


def score_candidate(query: QueryDescriptor, video: HistoricalVideo) -> float:
  """Composite similarity in [0, 1] between a query and one historical video."""
  total = round(sum(score_breakdown(query, video).values()), _SCORE_PRECISION)
  return max(0.0, min(1.0, total))


def find_similar_videos(
    query: QueryDescriptor,
    corpus: Sequence[HistoricalVideo],
    top_k: int = DEFAULT_MATCH_COUNT,
) -> list[ScoredMatch]:
  """Find the top_k most similar historical videos.

  Ties keep corpus input order, so the ranking is reproducible.

  Args:
    query: The candidate strategy.
    corpus: Every historical video available for matching.
    top_k: Number of matches to return.
  Returns:
    Exactly top_k ScoredMatch entries sorted by descending similarity.
  Raises:
    InsufficientDataError: corpus has fewer than top_k entries.
  """
  if top_k < 1:
    raise ValueError("top_k must be at least 1")
  if len(corpus) < top_k:
    raise InsufficientDataError(
        f"Need at least {top_k} historical videos, got {len(corpus)}",
        {"required": top_k, "available": len(corpus)},
    )

  scored = [(score_candidate(query, video), video) for video in corpus]
  # sorted() is stable: equal scores stay in corpus order
  scored = sorted(scored, key=lambda x: x[0], reverse=True)

  matches = [
      ScoredMatch(video_id=video.video_id, title=video.title, similarity=score)
      for score, video in scored[:top_k]
  ]
  logging.info(
      "Similarity matching: %d candidates, top score %.3f",
      len(corpus), matches[0].similarity,
  )
  return matches
