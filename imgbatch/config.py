"""Configuration management for imgbatch."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import yaml

from .auth import AuthConfig, new_auth_config
from .engine import DEFAULT_API_VERSION, DEFAULT_BASE_URL
from .errors import ArgumentError


CONFIG_FILENAME = ".imgbatch.yaml"
GLOBAL_CONFIG_PATH = Path.home() / CONFIG_FILENAME
DOCKER_URL_ENV = "IMGBATCH_DOCKER_URL"


@dataclass
class BuildConfig:
    """Everything a run needs, resolved once at startup."""

    files: List[str]
    registry: str
    auth: AuthConfig
    version: str = DEFAULT_API_VERSION
    cleanup: bool = True
    base_url: str = DEFAULT_BASE_URL


class Config:
    """Default option values read from YAML.

    Config hierarchy (higher priority first):
    1. Local config (./.imgbatch.yaml, or the path given at init)
    2. Global config (~/.imgbatch.yaml)

    Command line values always win over both.
    """

    def __init__(self, config_path: Optional[Path] = None, enable_hierarchy: bool = True):
        self.config_path = config_path or Path.cwd() / CONFIG_FILENAME
        self.enable_hierarchy = enable_hierarchy
        self._data: dict[str, Any] = {}
        self._global_data: dict[str, Any] = {}
        self.load()

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ArgumentError(f"Failed to load config from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ArgumentError(f"Config {path} must be a mapping")
        return data

    def load(self) -> None:
        """Load configuration from file(s)."""
        self._data = self._read(self.config_path) if self.config_path.exists() else {}

        if self.enable_hierarchy and self.config_path != GLOBAL_CONFIG_PATH and GLOBAL_CONFIG_PATH.exists():
            self._global_data = self._read(GLOBAL_CONFIG_PATH)
        else:
            self._global_data = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value, local first, then global, then default."""
        if key in self._data:
            return self._data[key]
        if key in self._global_data:
            return self._global_data[key]
        return default

    def _str(self, key: str, value: Optional[str], default: str = "") -> str:
        if value is not None:
            return value
        return str(self.get(key, default) or default)

    def build_config(
        self,
        files: str = "",
        registry: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        email: Optional[str] = None,
        auth: Optional[str] = None,
        version: Optional[str] = None,
        cleanup: Optional[bool] = None,
    ) -> BuildConfig:
        """Merge command line values over config values and validate them.

        Raises:
            ArgumentError: files or registry missing, or a partial credential triple.
        """
        registry = self._str("registry", registry)
        if not files or not registry:
            raise ArgumentError("Both files and registry are required")

        username = self._str("username", username)
        password = self._str("password", password)
        email = self._str("email", email)
        # If any credential value was supplied, then all of them must be supplied.
        if (username + password + email).strip():
            if not (username and password and email):
                raise ArgumentError("Username, password, and email are required together")

        if cleanup is None:
            cleanup = self.get("cleanup", True)
            if not isinstance(cleanup, bool):
                raise ArgumentError(f"cleanup must be true or false, got {cleanup!r}")

        return BuildConfig(
            files=files.split(","),
            registry=registry,
            auth=new_auth_config(username, password, email, self._str("auth", auth), registry),
            version=self._str("version", version, DEFAULT_API_VERSION),
            cleanup=cleanup,
            base_url=os.getenv(DOCKER_URL_ENV) or self._str("base_url", None, DEFAULT_BASE_URL),
        )
