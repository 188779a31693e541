"""Repository configuration."""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from core.config.config_service import ConfigService


@dataclass
class RepoConfig:
    """Configuration for documents repository."""

    root_path: Path
    """Root directory for artifact storage"""

    db_path: Path
    """Path to SQLite database file"""

    db_timeout_seconds: float = 10.0
    """Seconds a writer waits for the SQLite write lock"""

    @classmethod
    def from_config(cls, cfg: ConfigService) -> "RepoConfig":
        return cls(
            root_path=cfg.storage.blob_root,
            db_path=cfg.storage.db_path,
            db_timeout_seconds=cfg.storage.db_timeout_seconds,
        )
