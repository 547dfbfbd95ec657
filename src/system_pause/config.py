"""Configuration loading and validation for a SystemPause deployment."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .types import ZERO_ADDRESS, is_address

DEFAULT_CONFIG_PATH = "config/system_pause.yml"


def _validate_address(value: str) -> str:
    if not is_address(value):
        raise ValueError("Must be a 0x-prefixed 20-byte address")
    return value.lower()


class ResourceConfig(BaseModel):
    name: str = Field(..., min_length=1)
    address: str
    controller: Optional[str] = Field(
        None, description="Initial controller; defaults to the deployment's controller address"
    )

    @field_validator("address", "controller")
    @classmethod
    def validate_addresses(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _validate_address(value)


class MetricsConfig(BaseModel):
    enabled: bool = False
    port: int = Field(9311, ge=1, le=65535)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_file: Optional[str] = None


class SystemPauseConfig(BaseModel):
    owner: str
    controller_address: str
    pausers: List[str] = Field(default_factory=list)
    resources: List[ResourceConfig] = Field(default_factory=list)
    register_resources: bool = True
    metrics: MetricsConfig = MetricsConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("owner", "controller_address")
    @classmethod
    def validate_principal(cls, value: str) -> str:
        value = _validate_address(value)
        if value == ZERO_ADDRESS:
            raise ValueError("Must not be the zero address")
        return value

    @field_validator("pausers")
    @classmethod
    def validate_pausers(cls, values: List[str]) -> List[str]:
        return [_validate_address(value) for value in values]

    @model_validator(mode="after")
    def unique_resources(self) -> "SystemPauseConfig":
        names = [resource.name for resource in self.resources]
        if len(names) != len(set(names)):
            raise ValueError("Resource names must be unique")
        return self

    def resource(self, name: str) -> ResourceConfig:
        for resource in self.resources:
            if resource.name == name:
                return resource
        raise KeyError(name)


def load_config(path: Optional[str | Path] = None) -> SystemPauseConfig:
    """Load configuration from YAML and return a :class:`SystemPauseConfig`."""

    config_path = Path(path or os.environ.get("SYSTEM_PAUSE_CONFIG", DEFAULT_CONFIG_PATH))
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file '{config_path}' not found. Copy config/system_pause.example.yml and adjust it."
        )
    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return SystemPauseConfig.model_validate(data)


__all__ = ["LoggingConfig", "MetricsConfig", "ResourceConfig", "SystemPauseConfig", "load_config"]
