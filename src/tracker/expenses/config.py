from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_PAGE_SIZE = 8


class TrackerConfig(BaseModel):
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    max_page_size: int = Field(default=100, ge=1)
    currency_symbol: str = "$"
    log_level: str = "INFO"
    default_expense_types: list[str] = Field(
        default_factory=lambda: [
            "Groceries",
            "Dining",
            "Housing",
            "Utilities",
            "Transport",
            "Health",
            "Entertainment",
            "Other",
        ]
    )

    @field_validator("log_level")
    @classmethod
    def _log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper() or "INFO"


def _candidate_paths() -> list[Path]:
    env_path = os.environ.get("EXPENSE_TRACKER_CONFIG")
    paths = [Path(env_path)] if env_path else []
    paths.append(Path("expense_tracker.yaml"))
    home = Path(os.path.expanduser("~"))
    paths.append(home / ".expense_tracker" / "expense_tracker.yaml")
    return paths


def load_tracker_config() -> tuple[TrackerConfig, Optional[str]]:
    for p in _candidate_paths():
        if p.exists():
            data = yaml.safe_load(p.read_text()) or {}
            return TrackerConfig.model_validate(data.get("tracker") or data), str(p)
    return TrackerConfig(), None
