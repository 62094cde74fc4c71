from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import IO, List, Optional, Sequence

from .engine import EngineClient
from .errors import EngineError, ImgbatchIOError
from .stats import Stat
from .stream import write_response
from .tags import tags_for


logger = logging.getLogger(__name__)


def dockerfiles(files: Sequence[str]) -> List[str]:
    """Return the given files as absolute paths, keeping their order."""
    paths: List[str] = []
    for f in files:
        f = f.strip()
        if not f:
            continue
        try:
            paths.append(str(Path(f).absolute()))
        except OSError as e:
            raise ImgbatchIOError(f"Failed to resolve {f}: {e}") from e
    return paths


class Builder:
    """Build, tag, push and clean up one Dockerfile at a time.

    Args:
        engine: Engine client used for every call.
        out: Stream receiving banners and the engine's progress output.
        cleanup: Remove intermediate images after each build.
    """

    def __init__(self, engine: EngineClient, out: Optional[IO[str]] = None, cleanup: bool = True) -> None:
        self.engine = engine
        self.out = out or sys.stdout
        self.cleanup_images = cleanup

    def _print(self, msg: str = "") -> None:
        print(msg, file=self.out, flush=True)

    def run(self, files: Sequence[str]) -> List[Stat]:
        """Process every Dockerfile in order and return their stats."""
        self._print("\n#################### Processing:")
        self._print("\t" + "\n\t".join(files))

        stats: List[Stat] = []
        for f in files:
            stats.append(self.process(f))
        return stats

    def process(self, dockerfile: str) -> Stat:
        s = Stat(dockerfile=dockerfile)

        # --- Tags
        self._print(f"\n########## Tags: {dockerfile}")
        s.tags = tags_for(dockerfile)
        for tag in s.tags:
            self._print(f"\tTag: {tag}")

        # --- Build
        self._print(f"\n########## Building: {dockerfile}")
        start = time.monotonic()
        resp = self.engine.build(dockerfile, s.tags)
        ids = write_response(self.out, resp)
        s.build = time.monotonic() - start
        if not ids:
            raise EngineError(f"No image id found in build output for {dockerfile}")
        s.id = ids[-1]
        logger.info(f"Built {dockerfile} as {s.id}")
        for tag in s.tags[1:]:
            self.engine.tag(s.id, tag)

        # --- Push
        self._print(f"\n########## Pushing: {dockerfile}")
        start = time.monotonic()
        for tag in s.tags:
            self._print(f"\tTag: {tag}")
            write_response(self.out, self.engine.push(tag))
        s.push = time.monotonic() - start

        # --- Image details
        try:
            image = self.engine.inspect(s.id)
        except EngineError as e:
            logger.warning(f"{e}; size and platform left unknown")
        else:
            s.size = int(image.get("Size", -1))
            s.architecture = image.get("Architecture", "")
            s.os = image.get("Os", "")
            s.os_version = image.get("OsVersion", "")

        if self.cleanup_images:
            self.cleanup(ids)
        return s

    def cleanup(self, ids: Sequence[str]) -> None:
        """Remove the build's images, newest first.

        The first id of the build is left in place.
        """
        self._print("\n########## Removing:")
        # TODO: decide whether ids[0] should be removed as well
        for i in range(len(ids) - 1, 0, -1):
            self._print(f"\t{ids[i]}")
            try:
                self.engine.remove(ids[i])
            except EngineError as e:
                logger.warning(str(e))
                self._print(f"Failed to remove image: {ids[i]}")
