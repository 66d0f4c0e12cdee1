"""Logging setup for the backtest service and CLI.

Production emits one JSON object per line (Cloud Logging structured
logs); everything else uses plain `logging.basicConfig` output.
"""

from __future__ import annotations

import json
import logging


class CloudJsonFormatter(logging.Formatter):
  """Emit JSON lines compatible with Cloud Logging structured logs."""

  def format(self, record: logging.LogRecord) -> str:
    log_entry = {
        "severity": record.levelname,
        "message": record.getMessage(),
        "module": record.module,
        "function": record.funcName,
        "line": record.lineno,
    }
    if record.exc_info and record.exc_info[0]:
      log_entry["exception"] = self.formatException(record.exc_info)
    return json.dumps(log_entry)


def configure(environment: str = "development", level: int = logging.INFO) -> None:
  """Install root logging handlers for the given environment."""
  if environment == "production":
    handler = logging.StreamHandler()
    handler.setFormatter(CloudJsonFormatter())
    logging.root.handlers = [handler]
    logging.root.setLevel(level)
  else:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
