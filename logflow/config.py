from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .dashboard.layout import LayoutMode
from .ipc.protocol import default_socket_path
from .utils import env_int, read_json


def _default_log_file() -> str:
    return os.path.join(tempfile.gettempdir(), "logflow.log")


@dataclass
class DashboardConfig:
    socket_path: str = field(default_factory=default_socket_path)
    buffer_size: int = 1000
    queue_size: int = 1000
    tick_interval: float = 0.1
    default_layout: str = LayoutMode.VERTICAL.value
    follow: bool = True
    log_level: str = "INFO"
    log_file: str = field(default_factory=_default_log_file)
    export_dir: str = "."

    @property
    def layout(self) -> LayoutMode:
        return LayoutMode(self.default_layout.lower())

    def validate(self) -> List[str]:
        errors: List[str] = []
        if not self.socket_path:
            errors.append("socket_path must be non-empty")
        if not isinstance(self.buffer_size, int) or self.buffer_size < 1:
            errors.append(f"buffer_size must be a positive integer, got {self.buffer_size!r}")
        if not isinstance(self.queue_size, int) or self.queue_size < 1:
            errors.append(f"queue_size must be a positive integer, got {self.queue_size!r}")
        if not isinstance(self.tick_interval, (int, float)) or self.tick_interval <= 0:
            errors.append(f"tick_interval must be positive, got {self.tick_interval!r}")
        valid_layouts = [mode.value for mode in LayoutMode]
        if str(self.default_layout).lower() not in valid_layouts:
            errors.append(f"default_layout must be one of {valid_layouts}, got {self.default_layout!r}")
        if str(self.log_level).upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"unknown log_level {self.log_level!r}")
        return errors


ENV_OVERRIDES = {
    "LOGFLOW_SOCKET": "socket_path",
    "LOGFLOW_LAYOUT": "default_layout",
    "LOGFLOW_LOG_LEVEL": "log_level",
    "LOGFLOW_LOG_FILE": "log_file",
    "LOGFLOW_EXPORT_DIR": "export_dir",
}


def _merge_dataclass(default_obj, payload: Dict[str, Any]):
    for key, value in payload.items():
        if hasattr(default_obj, key):
            setattr(default_obj, key, value)
    return default_obj


def apply_env(config: DashboardConfig) -> DashboardConfig:
    for env_name, attr in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            setattr(config, attr, value)
    config.buffer_size = env_int("LOGFLOW_BUFFER_SIZE", config.buffer_size)
    config.queue_size = env_int("LOGFLOW_QUEUE_SIZE", config.queue_size)
    return config


def load_config(path: Optional[str] = None, use_env: bool = True) -> DashboardConfig:
    """Defaults, then the JSON file at ``path`` (unknown keys ignored), then the environment."""
    config = DashboardConfig()
    if path:
        payload = read_json(path)
        if not isinstance(payload, dict):
            raise ValueError(f"config file {path} must contain a JSON object")
        _merge_dataclass(config, payload)
    if use_env:
        apply_env(config)
    return config
