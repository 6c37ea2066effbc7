"""Application configuration (Pydantic v2). Load from siglip2_config.yml with optional env override."""

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, field_validator

DEFAULT_MODELS_DIR = Path.home() / ".siglip2_models"
DEFAULT_HUB_URL = "https://huggingface.co"
DEFAULT_CONFIG_ENV_VAR = "SIGLIP2_CONFIG"
DEFAULT_CONFIG_FILENAME = "siglip2_config.yml"
MODELS_DIR_ENV_VAR = "SIGLIP2_MODELS_DIR"


class Settings(BaseModel):
    """
    Runtime config loaded from YAML.

    By default, models_dir may be overridden by the SIGLIP2_MODELS_DIR environment variable
    when loading the default config (but not when an explicit config_path is provided).
    """

    model_config = {"extra": "ignore"}

    models_dir: Path = DEFAULT_MODELS_DIR
    default_model: str = "base-patch16-224"
    default_quantization: str = "fp32"
    hub_url: str = DEFAULT_HUB_URL
    download_timeout: float = 300.0
    max_redirects: int = 10
    log_level: str = "INFO"

    @field_validator("models_dir", mode="before")
    @classmethod
    def expand_models_dir(cls, v: Any) -> Path:
        return Path(v).expanduser()

    @field_validator("default_model")
    @classmethod
    def known_model(cls, v: str) -> str:
        from siglip2.ai.registry import AVAILABLE_MODELS

        if v not in AVAILABLE_MODELS:
            raise ValueError(f"Unknown model: {v}")
        return v

    @field_validator("default_quantization")
    @classmethod
    def known_quantization(cls, v: str) -> str:
        from siglip2.ai.registry import QUANTIZATION_OPTIONS

        if v not in QUANTIZATION_OPTIONS:
            raise ValueError(f"Unknown quantization: {v}")
        return v

    @field_validator("hub_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


_config: Settings | None = None
_models_dir_override: Path | None = None


class ConfigLoader:
    """
    Helper responsible for loading Settings from YAML and environment.

    - load_from_yaml(path, apply_env_override): read a YAML file and optionally apply env overrides.
    - load_default(): resolve the default config path from SIGLIP2_CONFIG / siglip2_config.yml and
      apply SIGLIP2_MODELS_DIR override when present.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def load_from_yaml(self, path: Path, apply_env_override: bool) -> Settings:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        if not data:
            data = {}
        if apply_env_override and self._env.get(MODELS_DIR_ENV_VAR):
            data["models_dir"] = self._env[MODELS_DIR_ENV_VAR]
        return Settings.model_validate(data)

    def load_default(self) -> Settings:
        """Load the default Settings, using SIGLIP2_CONFIG or siglip2_config.yml when present."""
        path = Path(self._env.get(DEFAULT_CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILENAME)
        if path.exists():
            return self.load_from_yaml(path, apply_env_override=True)

        settings = Settings()
        if self._env.get(MODELS_DIR_ENV_VAR):
            settings = Settings(models_dir=self._env[MODELS_DIR_ENV_VAR])
        return settings


_loader = ConfigLoader()


def get_config(config_path: str | Path | None = None) -> Settings:
    """
    Return singleton config.

    - If config_path is given, load from it (without env overrides for models_dir) and update the cache.
    - Otherwise, return the cached config if available, or load via ConfigLoader.load_default().
    """
    global _config
    if config_path is not None:
        _config = _loader.load_from_yaml(Path(config_path), apply_env_override=False)
        return _config
    if _config is not None:
        return _config
    _config = _loader.load_default()
    return _config


def reset_config() -> None:
    """Clear cached config and any models_dir override (for tests)."""
    global _config, _models_dir_override
    _config = None
    _models_dir_override = None


def get_models_dir() -> Path:
    """Return the process-wide models root: the override if set, else the configured models_dir."""
    if _models_dir_override is not None:
        return _models_dir_override
    return get_config().models_dir


def set_models_dir(path: str | Path | None) -> None:
    """Override the models root for the whole process. None restores the configured value."""
    global _models_dir_override
    _models_dir_override = Path(path).expanduser() if path is not None else None
