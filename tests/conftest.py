"""Shared test fixtures for the backtest test suite."""

import csv
import os
import sys

import pytest

# Ensure project root is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Override env vars BEFORE importing app modules
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT"] = "1000/minute"
os.environ.pop("MATCH_COUNT", None)

from corpus_store import METADATA_COLUMNS, SERIES_COLUMNS, CorpusStore  # noqa: E402
from models import HistoricalVideo, QueryDescriptor, TimeSeriesRecord  # noqa: E402


# ---------------------------------------------------------------------------
# Helper factories
# ---------------------------------------------------------------------------

def make_video(
    video_id, category="Food & Cooking", platform="youtube",
    title="", cover_description="", hashtags="", posting_hour=18,
):
  return HistoricalVideo(
      video_id=video_id,
      platform=platform,
      category=category,
      title=title,
      cover_description=cover_description,
      hashtags=hashtags,
      posting_hour=posting_hour,
  )


def make_record(video_id, views=1000.0, ctr=0.05, likes=100.0, **overrides):
  """Record whose curves grow linearly to the given 24h values."""
  fields = {}
  for i, offset in enumerate(("1h", "3h", "6h", "12h", "24h"), start=1):
    fields[f"views_{offset}"] = views * i / 5
    fields[f"ctr_{offset}"] = ctr
    fields[f"likes_{offset}"] = likes * i / 5
  fields.update(overrides)
  return TimeSeriesRecord(video_id=video_id, **fields)


def write_corpus_csv(path, videos, records):
  """Write videos + records in the backtest CSV layout."""
  by_id = {r.video_id: r for r in records}
  with open(path, "w", newline="") as f:
    writer = csv.DictWriter(f, fieldnames=METADATA_COLUMNS + SERIES_COLUMNS)
    writer.writeheader()
    for v in videos:
      row = {
          "video_id": v.video_id,
          "platform": v.platform,
          "category": v.category,
          "title": v.title,
          "cover_description": v.cover_description,
          "hashtags": v.hashtags,
          "posting_hour": v.posting_hour,
      }
      record = by_id.get(v.video_id) or make_record(v.video_id)
      for col in SERIES_COLUMNS:
        row[col] = getattr(record, col)
      writer.writerow(row)
  return path


# ---------------------------------------------------------------------------
# Corpus fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def noodle_query():
  return QueryDescriptor(
      cover_description="spicy noodles closeup",
      title="Spiciest Noodles Challenge",
      hashtags="#spicy #noodles #foodchallenge",
      category="Food & Cooking",
      platform="youtube",
  )


@pytest.fixture()
def food_videos():
  """Six Food & Cooking / youtube rows with decreasing overlap."""
  return [
      make_video("food_1", title="Spiciest Noodles Challenge",
                 cover_description="spicy noodles closeup",
                 hashtags="#spicy #noodles #foodchallenge"),
      make_video("food_2", title="Trying the Spiciest Noodles in Seoul",
                 cover_description="person eating noodles",
                 hashtags="#spicy #noodles #korea"),
      make_video("food_3", title="Homemade Noodles From Scratch",
                 cover_description="hands kneading dough",
                 hashtags="#noodles #homemade #cooking"),
      make_video("food_4", title="Extreme Food Challenge",
                 cover_description="giant burger plate",
                 hashtags="#foodchallenge #mukbang #eating"),
      make_video("food_5", title="Quick Weeknight Pasta Recipe",
                 cover_description="overhead shot of pasta pan",
                 hashtags="#pasta #recipe"),
      make_video("food_6", title="Street Food Noodles Tour",
                 cover_description="night market stalls",
                 hashtags="#streetfood #travel"),
  ]


@pytest.fixture()
def other_videos():
  """Fourteen rows from unrelated categories."""
  rows = [
      ("fit_1", "Fitness", "tiktok", "Five Minute Ab Workout", "#fitness #abs"),
      ("fit_2", "Fitness", "youtube", "Full Body Home Workout", "#fitness #homeworkout"),
      ("game_1", "Gaming", "shorts", "Insane Clutch Moment", "#gaming #clutch"),
      ("game_2", "Gaming", "youtube", "Beginner Speedrun Guide", "#gaming #speedrun"),
      ("travel_1", "Travel", "tiktok", "Hidden Beaches in Portugal", "#travel #beach"),
      ("travel_2", "Travel", "youtube", "Budget Travel Tips", "#travel #budget"),
      ("tech_1", "Tech", "shorts", "Unboxing the Newest Phone", "#tech #unboxing"),
      ("tech_2", "Tech", "youtube", "Building a Budget PC", "#tech #pcbuild"),
      ("beauty_1", "Beauty", "tiktok", "Five Minute Makeup Routine", "#beauty #makeup"),
      ("beauty_2", "Beauty", "youtube", "Skincare for Dry Skin", "#beauty #skincare"),
      ("comedy_1", "Comedy", "shorts", "When Mom Finds Your Report Card", "#comedy #skit"),
      ("edu_1", "Education", "youtube", "How Black Holes Work", "#science #space"),
      ("pets_1", "Pets", "tiktok", "Puppy Sees Snow", "#pets #puppy"),
      ("pets_2", "Pets", "youtube", "Cat Reacts to Cucumber", "#pets #cats"),
  ]
  return [
      make_video(vid, category=cat, platform=plat, title=title,
                 cover_description=f"thumbnail for {title.lower()}",
                 hashtags=tags)
      for vid, cat, plat, title, tags in rows
  ]


@pytest.fixture()
def sample_corpus(food_videos, other_videos):
  """Twenty-row corpus with the food rows interleaved among the others."""
  corpus = []
  others = list(other_videos)
  for food in food_videos:
    corpus.append(others.pop(0))
    corpus.append(food)
  corpus.extend(others)
  return corpus


@pytest.fixture()
def sample_records(sample_corpus):
  return [
      make_record(v.video_id, views=1000.0 * (i + 1), ctr=0.05 + i * 0.001,
                  likes=50.0 * (i + 1))
      for i, v in enumerate(sample_corpus)
  ]


@pytest.fixture()
def corpus_csv(tmp_path, sample_corpus, sample_records):
  return write_corpus_csv(tmp_path / "backtest-data.csv", sample_corpus, sample_records)


@pytest.fixture()
def corpus_store(corpus_csv):
  return CorpusStore(corpus_csv)


# ---------------------------------------------------------------------------
# Time-series fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def five_records():
  """Five records with known 24h values (views 100..500, mean ctr 0.069)."""
  views_24h = [100, 200, 300, 400, 500]
  ctr_24h = [0.060, 0.065, 0.069, 0.073, 0.078]
  likes_24h = [10, 20, 30, 40, 50]
  return [
      make_record(
          f"ts_{i}", views=views_24h[i], ctr=0.05, likes=likes_24h[i],
          views_24h=views_24h[i], ctr_24h=ctr_24h[i], likes_24h=likes_24h[i],
      )
      for i in range(5)
  ]


@pytest.fixture()
def client(corpus_store):
  """FastAPI TestClient wired to the temp-file corpus."""
  from fastapi.testclient import TestClient

  # Must import app AFTER env vars are set
  from web_app import app, get_corpus_store

  app.dependency_overrides[get_corpus_store] = lambda: corpus_store

  with TestClient(app) as c:
    yield c

  app.dependency_overrides.clear()
