"""Session configuration using pydantic-settings."""
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExecutorConfig(BaseModel):
    """Request executor configuration."""

    backend: Literal["httpx", "playwright"] = "httpx"
    timeout: float = 30.0
    follow_redirects: bool = True
    max_redirects: int = 20
    user_agent: str = "pageprobe/0.1"
    headers: dict[str, str] = {}


class Settings(BaseSettings):
    """Session settings loaded from YAML or environment."""

    model_config = SettingsConfigDict(env_prefix="PAGEPROBE_", env_nested_delimiter="__")

    base_url: Optional[str] = None
    data_dir: Path = Path("tests/_data")
    log_level: str = "INFO"
    executor: ExecutorConfig = ExecutorConfig()

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from a YAML file.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            Settings instance with loaded configuration.
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)
