#!/usr/bin/env python3

"""Historical corpus loaded from the backtest CSV dataset.

Parses the dataset once into typed HistoricalVideo / TimeSeriesRecord
objects. Numeric parsing happens here: unparseable, empty or non-finite
numbers become 0, negative metrics are clamped to 0, CTR to at most 1
and posting_hour outside 0-23 becomes 0. The matcher and aggregator
never see raw strings.

Expected columns:
  video_id, platform, category, title, cover_description, hashtags,
  posting_hour, {views,ctr,likes}_{1h,3h,6h,12h,24h}
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Sequence
from pathlib import Path

import pandas

from errors import CorpusLoadError, NotFoundError
from models import (
    METRIC_FAMILIES,
    TIME_OFFSETS,
    HistoricalVideo,
    TimeSeriesRecord,
)

METADATA_COLUMNS = [
    "video_id", "platform", "category", "title",
    "cover_description", "hashtags", "posting_hour",
]
SERIES_COLUMNS = [f"{m}_{t}" for m in METRIC_FAMILIES for t in TIME_OFFSETS]


class CorpusStore:
  """In-memory view of the historical dataset, loaded lazily."""

  def __init__(self, csv_path: str | Path):
    self.csv_path = Path(csv_path)
    self._lock = threading.Lock()
    self._videos: list[HistoricalVideo] | None = None
    self._series: dict[str, TimeSeriesRecord] = {}

  # ------------------------------------------------------------------
  # Loading
  # ------------------------------------------------------------------

  def load(self) -> None:
    """(Re)read the CSV file and replace the cached corpus."""
    with self._lock:
      self._read()

  def _read(self) -> None:
    if not self.csv_path.is_file():
      raise CorpusLoadError(
          f"Backtest dataset not found: {self.csv_path}",
          {"path": str(self.csv_path)},
      )
    try:
      frame = pandas.read_csv(
          self.csv_path,
          dtype=str,
          keep_default_na=False,
          skip_blank_lines=True,
          skipinitialspace=True,
      )
    except (OSError, ValueError, pandas.errors.ParserError) as ex:
      logging.error("Failed to load backtest dataset %s: %s", self.csv_path, ex)
      raise CorpusLoadError(f"Failed to load backtest dataset: {ex}") from ex

    frame.columns = [c.strip() for c in frame.columns]
    missing = [c for c in METADATA_COLUMNS + SERIES_COLUMNS if c not in frame.columns]
    if missing:
      raise CorpusLoadError(
          "Backtest dataset is missing columns: " + ", ".join(missing),
          {"missing": missing},
      )

    videos, series = _parse_frame(frame)
    self._series = series
    self._videos = videos
    logging.info(
        "Backtest dataset loaded: %d videos from %s", len(videos), self.csv_path,
    )

  def _ensure_loaded(self) -> list[HistoricalVideo]:
    if self._videos is None:
      with self._lock:
        # Double-check after acquiring lock
        if self._videos is None:
          self._read()
    return self._videos  # type: ignore[return-value]

  # ------------------------------------------------------------------
  # Queries
  # ------------------------------------------------------------------

  def all_videos(self) -> list[HistoricalVideo]:
    """Every historical video, in file order."""
    return list(self._ensure_loaded())

  def videos_by_ids(self, video_ids: Sequence[str]) -> list[HistoricalVideo]:
    """Metadata for the given ids, in the order requested."""
    by_id = {v.video_id: v for v in self._ensure_loaded()}
    found = self._resolve(video_ids, by_id)
    return [by_id[vid] for vid in found]

  def time_series(self, video_ids: Sequence[str]) -> list[TimeSeriesRecord]:
    """Time-series rows for the given ids, in the order requested.

    Raises:
      NotFoundError: none of the ids exist in the dataset.
    """
    self._ensure_loaded()
    found = self._resolve(video_ids, self._series)
    return [self._series[vid] for vid in found]

  def stats(self) -> dict:
    """Dataset size plus distinct platforms and categories."""
    videos = self._ensure_loaded()
    return {
        "totalVideos": len(videos),
        "platforms": list(dict.fromkeys(v.platform for v in videos)),
        "categories": list(dict.fromkeys(v.category for v in videos)),
    }

  @staticmethod
  def _resolve(video_ids: Sequence[str], index: dict) -> list[str]:
    found = [vid for vid in dict.fromkeys(video_ids) if vid in index]
    if not found:
      raise NotFoundError(
          "No videos found with provided IDs", {"videoIds": list(video_ids)},
      )
    missing = [vid for vid in video_ids if vid not in index]
    if missing:
      logging.warning("Some video IDs not found: %s", missing)
    return found


def _parse_frame(
    frame: pandas.DataFrame,
) -> tuple[list[HistoricalVideo], dict[str, TimeSeriesRecord]]:
  """Convert the raw string frame into typed records."""
  text_cols = [c for c in METADATA_COLUMNS if c != "posting_hour"]
  for col in text_cols:
    frame[col] = frame[col].astype(str).str.strip()

  frame = frame[frame["video_id"] != ""]
  duplicated = frame["video_id"].duplicated()
  if duplicated.any():
    logging.warning(
        "Dropping %d rows with duplicate video_id: %s",
        int(duplicated.sum()), frame.loc[duplicated, "video_id"].tolist(),
    )
    frame = frame[~duplicated]

  if frame.empty:
    return [], {}

  numbers = frame[SERIES_COLUMNS].apply(
      lambda col: pandas.to_numeric(col.str.strip(), errors="coerce")
  ).replace([math.inf, -math.inf], math.nan).fillna(0.0)

  # Counts are non-negative and CTR is a fraction in [0, 1]
  ctr_cols = [c for c in SERIES_COLUMNS if c.startswith("ctr_")]
  out_of_range = (numbers < 0).any(axis=1) | (numbers[ctr_cols] > 1).any(axis=1)
  if out_of_range.any():
    logging.warning(
        "Clamping out-of-range metrics for videos: %s",
        frame.loc[out_of_range, "video_id"].tolist(),
    )
  numbers = numbers.clip(lower=0.0)
  numbers[ctr_cols] = numbers[ctr_cols].clip(upper=1.0)

  hours = pandas.to_numeric(
      frame["posting_hour"].str.strip(), errors="coerce",
  ).replace([math.inf, -math.inf], math.nan)
  hours = hours.where((hours >= 0) & (hours <= 23)).fillna(0).astype(int)

  videos: list[HistoricalVideo] = []
  series: dict[str, TimeSeriesRecord] = {}
  for idx, row in frame.iterrows():
    video_id = row["video_id"]
    videos.append(HistoricalVideo(
        video_id=video_id,
        platform=row["platform"],
        category=row["category"],
        title=row["title"],
        cover_description=row["cover_description"],
        hashtags=row["hashtags"],
        posting_hour=int(hours.loc[idx]),
    ))
    series[video_id] = TimeSeriesRecord(
        video_id=video_id,
        **{col: float(numbers.at[idx, col]) for col in SERIES_COLUMNS},
    )
  return videos, series
