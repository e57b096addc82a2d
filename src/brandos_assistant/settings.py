from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping


@dataclass(frozen=True)
class Settings:
    environment: str = "dev"
    project_id: str | None = None
    location: str = "us-central1"
    model_name: str = "gemini-1.5-pro"
    storage_backend: str = "memory"
    events_topic: str | None = None
    profile_data_dir: Path = Path("data/profiles")

    @property
    def model_configured(self) -> bool:
        return bool(self.project_id)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        environment = env.get("ENVIRONMENT", "dev")
        return cls(
            environment=environment,
            project_id=env.get("PROJECT_ID") or None,
            location=env.get("VERTEX_LOCATION", "us-central1"),
            model_name=env.get("VERTEX_MODEL", "gemini-1.5-pro"),
            storage_backend=env.get("STORAGE_BACKEND", "memory" if environment == "dev" else "firestore"),
            events_topic=env.get("PUBSUB_TOPIC_EVENTS") or None,
            profile_data_dir=Path(env.get("PROFILE_DATA_DIR", "data/profiles")),
        )


__all__ = ["Settings"]
