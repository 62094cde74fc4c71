"""Build context packaging.

The directory holding a Dockerfile is sent to the engine as a gzip tarball.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional

import docker

from .errors import ImgbatchIOError


logger = logging.getLogger(__name__)


class BuildContext:
    """An archived build context on disk.

    Use as a context manager; the handle is closed and the temp file deleted
    on exit, whatever the outcome of the build.
    """

    def __init__(self, fileobj: BinaryIO, path: str):
        self.fileobj = fileobj
        self.path = path

    def close(self) -> None:
        try:
            self.fileobj.close()
        finally:
            try:
                os.remove(self.path)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise ImgbatchIOError(f"Failed to remove build context {self.path}: {e}") from e
        logger.debug(f"Removed build context {self.path}")

    def __enter__(self) -> BuildContext:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_context(dockerfile: str, tmp_dir: Optional[str] = None) -> BuildContext:
    """Recursively tar the directory `dockerfile` resides in.

    Args:
        dockerfile: Path to the Dockerfile.
        tmp_dir: Directory for the archive (defaults to the system temp dir).

    Returns:
        BuildContext positioned at the start of the archive.
    """
    root = Path(dockerfile).resolve().parent
    try:
        fileobj = tempfile.NamedTemporaryFile(prefix="imgbatch_context_", suffix=".tar.gz", dir=tmp_dir, delete=False)
    except OSError as e:
        raise ImgbatchIOError(f"Failed to create build context file: {e}") from e
    path = fileobj.name
    try:
        docker.utils.tar(str(root), fileobj=fileobj, gzip=True)
    except Exception as e:  # noqa: BLE001
        BuildContext(fileobj, path).close()
        raise ImgbatchIOError(f"Failed to archive build context {root}: {e}") from e

    fileobj.seek(0)
    logger.info(f"Archived build context {root} to {path}")
    return BuildContext(fileobj, path)
