from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .paths import default_config_path, expand_path

CONFIG_ENV_VAR = "ESPBRIDGE_CONFIG"


class DiscoveryConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    service_type: str = "_esphomelib._tcp.local."
    port: int = Field(default=6053, ge=1, le=65535)
    timeout: float = Field(default=5.0, gt=0)
    scan_window: float = Field(default=10.0, gt=0)
    password: str = ""


class HubConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    manufacturer: str = "ESPHome"
    search_token: str = "esphome"


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    hub: HubConfig = Field(default_factory=HubConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def _toml_string(value: str) -> str:
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    discovery = settings.discovery
    lines = [
        "# espbridge configuration",
        "",
        "[discovery]",
        f"service_type = {_toml_string(discovery.service_type)}",
        f"port = {discovery.port}",
        f"timeout = {discovery.timeout}",
        f"scan_window = {discovery.scan_window}",
        f"password = {_toml_string(discovery.password)}",
        "",
        "[hub]",
        f"manufacturer = {_toml_string(settings.hub.manufacturer)}",
        f"search_token = {_toml_string(settings.hub.search_token)}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
