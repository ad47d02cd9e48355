"""Configuration models."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are prefixed with TASKFLOW_ (e.g., TASKFLOW_LOG_LEVEL).
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Aging thresholds, in calendar days
    stale_task_days: int = Field(3, ge=1, description="Age at which an open task goes stale")
    done_task_days: int = Field(7, ge=1, description="Age since completion at which a task is archived")

    # Undo/redo
    max_history_size: int = Field(50, ge=1, description="Maximum number of undoable actions")

    # Archive sweeper
    sweep_interval_seconds: float = Field(60.0, gt=0, description="Seconds between archive sweeps")

    # Storage
    data_dir: Path = Field(Path("./.taskflow"), description="Directory holding workspace.json")

    # Logging
    log_level: str = "INFO"
