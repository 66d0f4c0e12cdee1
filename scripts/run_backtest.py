#!/usr/bin/env python3
"""Backtest a posting strategy against the historical CSV dataset.

Prints the predicted curves and the matched videos as JSON.

Usage:
    python scripts/run_backtest.py --title "Spiciest Noodles Challenge" \
        --hashtags "#spicy #noodles" --category "Food & Cooking" --platform youtube
    python scripts/run_backtest.py --csv other.csv --top-k 3 ...
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import error_logging
from backtest_service import run_backtest
from configuration import Configuration, load_dotenv
from corpus_store import CorpusStore
from errors import BacktestError
from models import Platform, QueryDescriptor

log = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
  config = Configuration.from_env()
  parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
  parser.add_argument("--csv", default=str(config.csv_path),
                      help="Path to the backtest CSV dataset")
  parser.add_argument("--title", default="", help="Proposed video title")
  parser.add_argument("--cover", default="",
                      help="Text description of the proposed cover image")
  parser.add_argument("--hashtags", default="",
                      help='Hashtag blob, e.g. "#spicy #noodles"')
  parser.add_argument("--category", default="", help="Content category")
  parser.add_argument("--platform", default=Platform.YOUTUBE.value,
                      choices=Platform.values())
  parser.add_argument("--top-k", type=int, default=config.match_count,
                      help="Number of historical matches to average")
  args = parser.parse_args(argv)
  if args.top_k < 1:
    parser.error("--top-k must be at least 1")
  return args


def main(argv: list[str] | None = None) -> int:
  load_dotenv()
  error_logging.configure(os.environ.get("ENVIRONMENT", "development"))
  args = parse_args(argv)

  query = QueryDescriptor(
      cover_description=args.cover,
      title=args.title,
      hashtags=args.hashtags,
      category=args.category,
      platform=args.platform,
  )
  try:
    result = run_backtest(query, CorpusStore(args.csv), top_k=args.top_k)
  except BacktestError as ex:
    log.error("Backtest failed [%s]: %s", ex.code, ex.message)
    return 1

  print(json.dumps(result.to_dict(), indent=2))
  return 0


if __name__ == "__main__":
  sys.exit(main())
