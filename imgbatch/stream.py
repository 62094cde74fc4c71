"""Progress stream handling for engine build and push responses.

The engine answers with newline-delimited JSON messages, e.g.

    {"stream": "Step 2/4 : RUN apk add curl\\n"}
    {"stream": " ---> Running in a430b8c0596e\\n"}
    {"stream": " ---> 5c9a2f0a6d1e\\n"}
"""
from __future__ import annotations

import json
import logging
from typing import IO, Any, Dict, Iterable, Iterator, List, Union

import requests

from .errors import DecodeError, EngineError


logger = logging.getLogger(__name__)

IMAGE_MARKER = " ---> "
IMAGE_ID_LENGTH = 12

Stream = Union[Iterable[bytes], IO[bytes]]


def iter_messages(stream: Stream) -> Iterator[Dict[str, Any]]:
    """Yield each decoded JSON message, buffering partial chunks."""
    buf = b""
    for chunk in stream:
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        buf += chunk
        while b"\n" in buf:
            line, buf = buf.split(b"\n", 1)
            if line.strip():
                yield _decode(line)
    if buf.strip():
        yield _decode(buf)


def _decode(line: bytes) -> Dict[str, Any]:
    try:
        msg = json.loads(line)
    except ValueError as e:
        raise DecodeError(f"Invalid message from engine: {e}", line=line) from e
    if not isinstance(msg, dict):
        raise DecodeError(f"Unexpected message from engine: {line!r}", line=line)
    return msg


def image_id(text: str) -> str:
    """Return the intermediate image id carried by a log line, or "".

    Container ids such as " ---> Running in a430b8c0596e" do not qualify.
    """
    if not text.startswith(IMAGE_MARKER):
        return ""
    candidate = text[len(IMAGE_MARKER):].strip()
    return candidate if len(candidate) == IMAGE_ID_LENGTH else ""


def write_response(out: IO[str], stream: Stream) -> List[str]:
    """Copy the engine's log text to `out` and collect intermediate image ids.

    Returns the ids in stream order; the last one is the final image.
    """
    ids: List[str] = []
    try:
        for msg in iter_messages(stream):
            if msg.get("error"):
                detail = msg.get("errorDetail") or {}
                raise EngineError(str(detail.get("message") or msg["error"]).strip())
            if msg.get("status"):
                logger.debug(f"{msg.get('id', '')} {msg['status']}".strip())

            text = msg.get("stream") or ""
            id_ = image_id(text)
            if id_:
                ids.append(id_)
            out.write(text)
    except requests.exceptions.RequestException as e:
        raise EngineError(f"Lost connection to engine: {e}") from e
    finally:
        close = getattr(stream, "close", None)
        if callable(close):
            close()
    return ids
