"""Value objects shared by the matcher, aggregator and backtest service"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

TIME_OFFSETS = ("1h", "3h", "6h", "12h", "24h")
METRIC_FAMILIES = ("views", "ctr", "likes")


class Platform(Enum):
  """Enum that represents supported target platforms"""

  YOUTUBE = "youtube"
  TIKTOK = "tiktok"
  SHORTS = "shorts"

  @classmethod
  def values(cls) -> list[str]:
    return [p.value for p in cls]


@dataclass(frozen=True)
class QueryDescriptor:
  """Class that represents the candidate strategy being evaluated"""

  cover_description: str = ""
  title: str = ""
  hashtags: str = ""
  category: str = ""
  platform: str = ""

  def to_dict(self) -> dict:
    return {
        "coverDescription": self.cover_description,
        "title": self.title,
        "hashtags": self.hashtags,
        "category": self.category,
        "platform": self.platform,
    }


@dataclass(frozen=True)
class HistoricalVideo:
  """Class that represents one entry of the historical corpus"""

  video_id: str
  platform: str = ""
  category: str = ""
  title: str = ""
  cover_description: str = ""
  hashtags: str = ""
  posting_hour: int = 0

  def to_dict(self) -> dict:
    return {
        "videoId": self.video_id,
        "platform": self.platform,
        "category": self.category,
        "title": self.title,
        "coverDescription": self.cover_description,
        "hashtags": self.hashtags,
        "postingHour": self.posting_hour,
    }


@dataclass(frozen=True)
class ScoredMatch:
  """Class that represents a ranked corpus entry"""

  video_id: str
  title: str
  similarity: float

  def to_dict(self) -> dict:
    return {
        "videoId": self.video_id,
        "title": self.title,
        "similarity": self.similarity,
    }


@dataclass(frozen=True)
class TimeSeriesRecord:
  """Engagement counts for one video sampled at fixed offsets after posting.

  ctr_* values are fractions in [0, 1], not percentages.
  """

  video_id: str
  views_1h: float = 0.0
  views_3h: float = 0.0
  views_6h: float = 0.0
  views_12h: float = 0.0
  views_24h: float = 0.0
  ctr_1h: float = 0.0
  ctr_3h: float = 0.0
  ctr_6h: float = 0.0
  ctr_12h: float = 0.0
  ctr_24h: float = 0.0
  likes_1h: float = 0.0
  likes_3h: float = 0.0
  likes_6h: float = 0.0
  likes_12h: float = 0.0
  likes_24h: float = 0.0

  def value(self, metric: str, offset: str) -> float:
    """Read the `<metric>_<offset>` field, e.g. value("ctr", "24h")."""
    if metric not in METRIC_FAMILIES or offset not in TIME_OFFSETS:
      raise KeyError(f"{metric}_{offset}")
    return getattr(self, f"{metric}_{offset}")


@dataclass(frozen=True)
class MetricPoint:
  time: str
  value: float

  def to_dict(self) -> dict:
    return {"time": self.time, "value": self.value}


@dataclass(frozen=True)
class HeadlineMetrics:
  """Human-formatted 24h summary"""

  views24h: str
  ctr24h: str
  likes24h: str

  def to_dict(self) -> dict:
    return {
        "views24h": self.views24h,
        "ctr24h": self.ctr24h,
        "likes24h": self.likes24h,
    }


@dataclass(frozen=True)
class AggregatedMetrics:
  """Averaged performance curves plus the headline summary"""

  views: list[MetricPoint]
  ctr: list[MetricPoint]
  likes: list[MetricPoint]
  metrics: HeadlineMetrics

  def to_dict(self) -> dict:
    return {
        "views": [p.to_dict() for p in self.views],
        "ctr": [p.to_dict() for p in self.ctr],
        "likes": [p.to_dict() for p in self.likes],
        "metrics": self.metrics.to_dict(),
    }


@dataclass(frozen=True)
class EnrichedMatch:
  """Class that represents a match merged with its own 24h numbers"""

  video_id: str
  title: str
  similarity: float
  ctr: str
  views24h: str

  def to_dict(self) -> dict:
    return {
        "videoId": self.video_id,
        "title": self.title,
        "similarity": self.similarity,
        "ctr": self.ctr,
        "views24h": self.views24h,
    }


@dataclass(frozen=True)
class BacktestResult:
  """Predicted curves and the matches they were averaged from"""

  predictions: AggregatedMetrics
  matched_videos: list[EnrichedMatch] = field(default_factory=list)

  def to_dict(self) -> dict:
    return {
        "predictions": self.predictions.to_dict(),
        "matchedVideos": [m.to_dict() for m in self.matched_videos],
    }
