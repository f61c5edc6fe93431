"""Global settings for animescraper."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Optional

# Accepted by optional numeric settings to mean "no limit".
UNBOUNDED_VALUES = {"none", "unbounded", "off"}


@dataclass
class Settings:
    base_url: str = "https://aniwave.se"
    trending_path: str = "/trending-anime/"
    filter_path: str = "/filter"
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    impersonate: str = "chrome120"
    timeout: int = 10
    asset_max_retries: int = 3
    asset_retry_delay: float = 2.0
    asset_cache_size: Optional[int] = 256
    no_results_marker: str = "No matching records found"

    @classmethod
    def from_env(cls, prefix: str = "ANIMESCRAPER_") -> "Settings":
        """Build settings, overriding defaults with ``ANIMESCRAPER_*`` variables."""
        overrides = {}
        renamed = {
            "asset_max_retries": "ASSET_RETRIES",
        }
        for field in fields(cls):
            env_name = prefix + renamed.get(field.name, field.name.upper())
            raw = os.getenv(env_name)
            if raw is None or raw == "":
                continue
            try:
                overrides[field.name] = _cast(str(field.type), raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {env_name}: {raw!r}") from exc
        return cls(**overrides)


def _cast(type_name: str, raw: str):
    if type_name.startswith("Optional["):
        if raw.strip().lower() in UNBOUNDED_VALUES:
            return None
        type_name = type_name[len("Optional["):-1]
    caster = {"int": int, "float": float}.get(type_name, str)
    return caster(raw)


settings = Settings.from_env()
