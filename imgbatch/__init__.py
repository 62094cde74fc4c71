"""
imgbatch: build, tag and push Docker images from Dockerfile header comments.

This package provides:
- tags_for: read tag directives from a Dockerfile header.
- create_context: archive a Dockerfile's directory as the build context.
- write_response: stream engine progress output and collect image ids.
- AuthConfig: registry credentials and their header encoding.
- EngineClient: the Docker Engine calls a batch build needs.
- Builder: the per-file build, push, inspect and cleanup sequence.
- Stat: per-file statistics and the final summary.
"""

from .errors import (
    ImgbatchError,
    ArgumentError,
    ImgbatchIOError,
    NoTagsFound,
    AuthEncodeError,
    EngineError,
    DecodeError,
)
from .tags import tags_for
from .context import BuildContext, create_context
from .stream import write_response
from .auth import AuthConfig, new_auth_config
from .engine import EngineClient
from .stats import Stat, write_summary
from .builder import Builder, dockerfiles
from .config import Config, BuildConfig

__all__ = [
    # Errors
    "ImgbatchError",
    "ArgumentError",
    "ImgbatchIOError",
    "NoTagsFound",
    "AuthEncodeError",
    "EngineError",
    "DecodeError",
    # Build pieces
    "tags_for",
    "BuildContext",
    "create_context",
    "write_response",
    "AuthConfig",
    "new_auth_config",
    "EngineClient",
    "Stat",
    "write_summary",
    "Builder",
    "dockerfiles",
    # Configuration
    "Config",
    "BuildConfig",
]
