"""Token-overlap helpers used by the similarity matcher."""

from __future__ import annotations

import re
from collections.abc import Iterable

_HASHTAG_RE = re.compile(r"#\w+")
_NON_WORD_RE = re.compile(r"[^\w\s]")
_MIN_TOKEN_LEN = 3


def extract_hashtags(text: str) -> set[str]:
  """Return the case-folded set of `#tag` tokens in a free-text blob."""
  if not text:
    return set()
  return {tag.lower() for tag in _HASHTAG_RE.findall(text)}


def tokenize(text: str) -> set[str]:
  """Lower-case, strip punctuation, split on whitespace, drop short words."""
  if not text:
    return set()
  cleaned = _NON_WORD_RE.sub(" ", text.lower())
  return {w for w in cleaned.split() if len(w) >= _MIN_TOKEN_LEN}


def overlap(a: Iterable[str], b: Iterable[str]) -> float:
  """Intersection size over the larger set's size; 0.0 if either is empty."""
  set_a = set(a)
  set_b = set(b)
  if not set_a or not set_b:
    return 0.0
  return len(set_a & set_b) / max(len(set_a), len(set_b))


def text_similarity(text_a: str, text_b: str) -> float:
  return overlap(tokenize(text_a), tokenize(text_b))


def hashtag_similarity(text_a: str, text_b: str) -> float:
  return overlap(extract_hashtags(text_a), extract_hashtags(text_b))
