"""Runtime configuration read from environment variables"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_ROOT = Path(__file__).parent
DEFAULT_CSV_PATH = _ROOT / "data" / "backtest-data.csv"
DEFAULT_RATE_LIMIT = "30/minute"
DEFAULT_MATCH_COUNT = 5
_DEV_ORIGINS = "http://localhost:8080,http://localhost:3000,http://localhost:5173"


def load_dotenv(path: Path = _ROOT / ".env") -> None:
  """Copy KEY=VALUE lines of a .env file into os.environ (existing vars win)."""
  if not path.is_file():
    return
  for line in path.read_text().splitlines():
    line = line.strip()
    if line and not line.startswith("#") and "=" in line:
      key, value = line.split("=", 1)
      os.environ.setdefault(key.strip(), value.strip())


@dataclass
class Configuration:
  """Class that represents the service configuration"""

  environment: str = "development"
  csv_path: Path = DEFAULT_CSV_PATH
  allowed_origins: list[str] = field(default_factory=list)
  rate_limit: str = DEFAULT_RATE_LIMIT
  match_count: int = DEFAULT_MATCH_COUNT

  @property
  def is_production(self) -> bool:
    return self.environment == "production"

  @classmethod
  def from_env(cls, environ: dict | None = None) -> "Configuration":
    """Build a Configuration from environment variables.

    Args:
      environ: Mapping to read from; defaults to os.environ.
    Raises:
      ValueError: MATCH_COUNT is not a positive integer.
    """
    env = os.environ if environ is None else environ
    environment = env.get("ENVIRONMENT", "development").strip() or "development"

    default_origins = "" if environment == "production" else _DEV_ORIGINS
    origins = [
        o.strip()
        for o in env.get("ALLOWED_ORIGINS", default_origins).split(",")
        if o.strip()
    ]

    raw_count = env.get("MATCH_COUNT", str(DEFAULT_MATCH_COUNT)).strip()
    try:
      match_count = int(raw_count)
    except ValueError:
      raise ValueError(f"MATCH_COUNT must be an integer, got {raw_count!r}")
    if match_count < 1:
      raise ValueError(f"MATCH_COUNT must be at least 1, got {match_count}")

    csv_path = env.get("BACKTEST_CSV_PATH", "").strip()
    return cls(
        environment=environment,
        csv_path=Path(csv_path) if csv_path else DEFAULT_CSV_PATH,
        allowed_origins=origins,
        rate_limit=env.get("RATE_LIMIT", DEFAULT_RATE_LIMIT).strip() or DEFAULT_RATE_LIMIT,
        match_count=match_count,
    )
