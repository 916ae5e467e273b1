"""Unified configuration via pydantic-settings."""

import logging
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class PlugweaveConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PLUGWEAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Plugins, as "package.module:attribute" import paths
    plugins: Annotated[list[str], NoDecode] = []
    manifest: Path | None = None

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None
    log_max_bytes: int = 10_485_760
    log_backup_count: int = 5

    @field_validator("plugins", mode="before")
    @classmethod
    def parse_plugins(cls, v: list[str] | str) -> list[str]:
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @field_validator("manifest")
    @classmethod
    def check_manifest(cls, v: Path | None) -> Path | None:
        if v is None:
            return v
        r = v.expanduser().resolve()
        if not r.is_file():
            raise ValueError(f"plugin manifest does not exist: {r}")
        return r

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {v}")
        return level
