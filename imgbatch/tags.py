"""Tag directives read from the leading comment block of a Dockerfile.

    # registry.example.com/app:1.2
    # registry.example.com/app:latest

    FROM alpine
"""
from __future__ import annotations

from typing import List

from .errors import ImgbatchIOError, NoTagsFound


def tags_for(dockerfile: str) -> List[str]:
    """Return the names to tag the image built from `dockerfile` as.

    Blank and bare `#` lines before the first tag are skipped; the first one
    after a tag ends the block, as does the first non-comment line.
    """
    tags: List[str] = []
    try:
        with open(dockerfile, encoding="utf-8") as f:
            for raw in f:
                line = raw.strip()
                if line == "" or line == "#":
                    if not tags:
                        continue
                    break
                if not line.startswith("#"):
                    # First instruction reached
                    break
                tags.append(line[1:].strip())
    except (OSError, UnicodeDecodeError) as e:
        raise ImgbatchIOError(f"Failed to read {dockerfile}: {e}") from e

    if not tags:
        raise NoTagsFound(dockerfile)
    return tags
