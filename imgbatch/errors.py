"""Error kinds raised by imgbatch.

Library code raises these; only the CLI turns them into exit codes.
"""
from __future__ import annotations

from typing import Optional


class ImgbatchError(Exception):
    """Base class for all imgbatch errors"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ArgumentError(ImgbatchError):
    """Bad or missing command line / config input"""


class ImgbatchIOError(ImgbatchError):
    """File read, archive or temp-file failure"""


class NoTagsFound(ImgbatchError):
    """Raised when a Dockerfile header carries no tag directives"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Failed to find any tags within: {path}")


class AuthEncodeError(ImgbatchError):
    """Registry credentials could not be serialized"""


class EngineError(ImgbatchError):
    """A build, tag, push, inspect or remove call failed"""


class DecodeError(ImgbatchError):
    """A progress message from the engine is not valid JSON"""

    def __init__(self, message: str, line: Optional[bytes] = None):
        self.line = line
        super().__init__(message)
