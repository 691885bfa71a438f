"""
Runtime configuration.

Values come from `LOCALCHAT_*` environment variables (see `RuntimeConfig.from_env`)
and can be overridden field by field by the CLI.
"""
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from localchat.internal import paths
from localchat.internal.constants import (
    DEFAULT_BINDING,
    DEFAULT_POLL_INTERVAL_MS,
    HISTORY_LIMIT,
    RECOGNIZED_EXTENSIONS,
    RUNTIME_HOST,
    RUNTIME_PORT,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}


class RuntimeConfig(BaseModel):
    host: str = RUNTIME_HOST
    port: int = RUNTIME_PORT
    models_dir: Path = Field(default_factory=paths.get_models_dir)
    data_dir: Path = Field(default_factory=paths.get_data_dir)
    public_dir: Optional[Path] = None

    binding: str = DEFAULT_BINDING
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, gt=0)
    recognized_extensions: tuple[str, ...] = RECOGNIZED_EXTENSIONS
    # A failed probe is final unless this is set; see ModelLifecycleManager.
    retry_failed_probe: bool = False
    # Bindings are not assumed to be thread-safe across concurrent prompts.
    serialize_inference: bool = False

    history_limit: int = Field(default=HISTORY_LIMIT, gt=0)
    log_level: str = "INFO"

    @field_validator("recognized_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        extensions = tuple(ext.strip().lower().lstrip(".") for ext in value if ext and ext.strip())
        if not extensions:
            raise ValueError("at least one model file extension is required")
        return extensions

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000

    @property
    def users_file(self) -> Path:
        return paths.get_users_file(self.data_dir)

    @classmethod
    def from_env(cls, **overrides) -> "RuntimeConfig":
        """
        Build a config from the environment. Explicit keyword overrides win;
        `None` overrides are ignored so CLI options can be passed through as-is.
        """
        env = os.environ
        values = {}
        mapping = {
            "host": "LOCALCHAT_HOST",
            "port": "LOCALCHAT_PORT",
            "models_dir": "LOCALCHAT_MODELS_DIR",
            "data_dir": "LOCALCHAT_DATA_DIR",
            "public_dir": "LOCALCHAT_PUBLIC_DIR",
            "binding": "LOCALCHAT_BINDING",
            "poll_interval_ms": "LOCALCHAT_POLL_INTERVAL_MS",
            "recognized_extensions": "LOCALCHAT_EXTENSIONS",
            "history_limit": "LOCALCHAT_HISTORY_LIMIT",
            "log_level": "LOCALCHAT_LOG_LEVEL",
        }
        for field, var in mapping.items():
            if env.get(var):
                values[field] = env[var]

        for field, var in (
            ("retry_failed_probe", "LOCALCHAT_RETRY_FAILED_PROBE"),
            ("serialize_inference", "LOCALCHAT_SERIALIZE_INFERENCE"),
        ):
            if var in env:
                values[field] = env[var].strip().lower() in _TRUE_VALUES

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def summary(self) -> dict:
        return {
            "models_dir": str(self.models_dir),
            "data_dir": str(self.data_dir),
            "binding": self.binding,
            "poll_interval_ms": self.poll_interval_ms,
            "recognized_extensions": list(self.recognized_extensions),
            "retry_failed_probe": self.retry_failed_probe,
            "serialize_inference": self.serialize_inference,
        }
