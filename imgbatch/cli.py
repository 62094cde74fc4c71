from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path
from typing import NoReturn, Optional

import typer

from .builder import Builder, dockerfiles
from .config import Config
from .engine import EngineClient
from .errors import ArgumentError, ImgbatchError
from .stats import format_duration, write_summary


app = typer.Typer(
    name="imgbatch",
    help="Build Dockerfiles, tag them from their header comments and push them to a registry.",
    add_completion=False,
)


def _fail(msg: str, err: Exception) -> NoReturn:
    typer.echo(f"\n***** ERROR ***** \n{msg}\n{err}")
    raise typer.Exit(1)


def _configure_logging(verbose: bool) -> None:
    log_level = os.getenv("IMGBATCH_LOG_LEVEL", "WARNING" if not verbose else "INFO")
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(name)s: %(message)s",
    )


@app.command()
def build(
    ctx: typer.Context,
    username: Optional[str] = typer.Option(None, "-username", "--username", help="Docker registry username"),
    password: Optional[str] = typer.Option(None, "-password", "--password", help="Docker registry password"),
    email: Optional[str] = typer.Option(None, "-email", "--email", help="Docker registered email"),
    auth: Optional[str] = typer.Option(None, "-auth", "--auth", help="Docker registry auth"),
    version: Optional[str] = typer.Option(None, "-version", "--version", help="Docker engine API version [default: 1.28]"),
    cleanup: Optional[bool] = typer.Option(
        None,
        "-cleanup/-no-cleanup",
        "--cleanup/--no-cleanup",
        help="Removes all created images [default: cleanup]; use -no-cleanup in place of -cleanup=false",
    ),
    registry: Optional[str] = typer.Option(None, "-registry", "--registry", help="Docker registry server (required)"),
    files: str = typer.Option("", "-files", "--files", help="List of Dockerfiles to build, separated by comma (required)"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML file with default option values"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed logging"),
) -> None:
    """Build each Dockerfile, push every tag and print a summary."""
    _configure_logging(verbose)
    start = time.monotonic()

    try:
        if config_path and not config_path.exists():
            raise ArgumentError(f"Config file not found: {config_path}")
        config = Config(config_path=config_path) if config_path else Config()
        cfg = config.build_config(
            files=files,
            registry=registry,
            username=username,
            password=password,
            email=email,
            auth=auth,
            version=version,
            cleanup=cleanup,
        )
    except ArgumentError as e:
        typer.echo(ctx.get_help())
        typer.echo(e.message)
        raise typer.Exit(1)

    try:
        engine = EngineClient.connect(cfg.auth, version=cfg.version, base_url=cfg.base_url)
    except ImgbatchError as e:
        _fail("Failed to create Docker client", e)

    try:
        paths = dockerfiles(cfg.files)
    except ImgbatchError as e:
        _fail("Failed to get valid Docker files", e)

    try:
        stats = Builder(engine, out=sys.stdout, cleanup=cfg.cleanup).run(paths)
    except ImgbatchError as e:
        _fail("Failed to build and push images", e)
    finally:
        engine.close()

    typer.echo("\n#################### Success:")
    write_summary(sys.stdout, stats)
    typer.echo(f"Finished in: {format_duration(time.monotonic() - start)}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
