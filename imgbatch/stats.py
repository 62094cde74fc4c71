"""Per-Dockerfile build statistics and the final summary."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import IO, Iterable, List

from rich.filesize import decimal


@dataclass
class Stat:
    dockerfile: str
    id: str = ""
    tags: List[str] = field(default_factory=list)
    architecture: str = ""
    os: str = ""
    os_version: str = ""
    size: int = -1
    build: float = 0.0
    push: float = 0.0

    def write(self, out: IO[str]) -> None:
        """Write the formatted stat to `out`."""
        size = decimal(self.size) if self.size >= 0 else "unknown"
        out.write(
            f"Dockerfile: {self.dockerfile}\n"
            f"        Id: {self.id}\n"
            f"      Tags: {', '.join(self.tags)}\n"
            f"   Arch/OS: {self.architecture}/{self.os} {self.os_version}\n"
            f"      Size: {size}\n"
            f"Build Time: {format_duration(self.build)}\n"
            f" Push Time: {format_duration(self.push)}\n"
        )


def format_duration(seconds: float) -> str:
    """Render a duration the way humans read build times: 1m2.50s, 3.21s, 850ms."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    if hours:
        return f"{hours}h{minutes}m{secs:.2f}s"
    if minutes:
        return f"{minutes}m{secs:.2f}s"
    return f"{secs:.2f}s"


def write_summary(out: IO[str], stats: Iterable[Stat]) -> None:
    for s in stats:
        s.write(out)
        out.write("\n")
