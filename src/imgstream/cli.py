"""Command line interface for inspecting disk images and archives."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from contextlib import aclosing
from pathlib import Path
from typing import Any, Coroutine, NoReturn, TypeVar

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax

from imgstream.config import ConfigError, ConfigManager, ImgStreamConfig
from imgstream.errors import TruncatedInputError, UserError
from imgstream.image import ArchiveTypeDetector, extract_stream, read_buffer
from imgstream.image.collector import DEFAULT_CHUNK_SIZE, iter_file_chunks

console = Console()
LOGGER = logging.getLogger("imgstream")

T = TypeVar("T")


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> NoReturn:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)

    raise click.ClickException(message) from original


def _configure_logging(level: str, verbose: int) -> None:
    if verbose >= 2:
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    LOGGER.setLevel(level)
    if not any(isinstance(handler, RichHandler) for handler in LOGGER.handlers):
        LOGGER.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


def _load_config(
    ctx: click.Context, *, json_output: bool = False, include_env: bool = True
) -> ImgStreamConfig:
    """Load configuration and apply its logging level.

    Raises:
        SystemExit: If configuration cannot be loaded in JSON mode.
        click.ClickException: If configuration cannot be loaded otherwise.
    """
    options = ctx.find_root().obj or {}
    manager = ConfigManager(options.get("config_path"))
    try:
        config = manager.load(include_env=include_env)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    _configure_logging(config.logging.level, options.get("verbose", 0))
    return config


def _run(coro: Coroutine[Any, Any, T], *, json_output: bool) -> T:
    """Run `coro` to completion, mapping operation failures to CLI errors."""
    try:
        return asyncio.run(coro)
    except TruncatedInputError as exc:
        _handle_cli_error(str(exc), code="truncated_input", json_output=json_output, original=exc)
    except UserError as exc:
        _handle_cli_error(str(exc), code="user_error", json_output=json_output, original=exc)
    except OSError as exc:
        _handle_cli_error(str(exc), code="filesystem_error", json_output=json_output, original=exc)


async def _read_range(path: Path, count: int, offset: int) -> bytes:
    handle = await asyncio.to_thread(open, path, "rb")
    try:
        return await read_buffer(handle, count, offset)
    finally:
        await asyncio.to_thread(handle.close)


async def _collect_file(path: Path, chunk_size: int) -> bytes:
    async with aclosing(iter_file_chunks(path, chunk_size)) as chunks:
        return await extract_stream(chunks)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="imgstream")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Read configuration from this file instead of ~/.imgstream/config.yaml.",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: int) -> None:
    """imgstream inspects disk images and compressed image archives."""
    ctx.obj = {"config_path": config_path, "verbose": verbose}


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Emit the result as JSON.")
@click.pass_context
def mime(ctx: click.Context, path: Path, json_output: bool) -> None:
    """Print the MIME type of PATH.

    Known extensions resolve without reading the file; otherwise the file
    header is sniffed for a known signature.
    """
    config = _load_config(ctx, json_output=json_output)
    json_output = json_output or config.cli.json_default
    detector = ArchiveTypeDetector(
        sniff_bytes=config.detection.sniff_bytes,
        fallback_mime_type=config.detection.fallback_mime_type,
    )
    mime_type = _run(detector.detect(path), json_output=json_output)

    if json_output:
        console.print_json(data={"path": str(path), "mime_type": mime_type})
        return
    click.echo(mime_type)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--count", required=True, type=click.IntRange(min=0), help="Number of bytes to read.")
@click.option(
    "--offset",
    default=0,
    show_default=True,
    type=click.IntRange(min=0),
    help="Byte offset to start from.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the result as JSON.")
@click.pass_context
def read(ctx: click.Context, path: Path, count: int, offset: int, json_output: bool) -> None:
    """Print COUNT bytes of PATH starting at OFFSET as hex."""
    config = _load_config(ctx, json_output=json_output)
    json_output = json_output or config.cli.json_default
    data = _run(_read_range(path, count, offset), json_output=json_output)

    if json_output:
        payload: dict[str, Any] = {
            "path": str(path),
            "offset": offset,
            "count": count,
            "hex": data.hex(),
        }
        console.print_json(data=payload)
        return
    click.echo(data.hex())


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--chunk-size",
    default=DEFAULT_CHUNK_SIZE,
    show_default=True,
    type=click.IntRange(min=1),
    help="Size of the chunks streamed from PATH.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the result as JSON.")
@click.pass_context
def cat(ctx: click.Context, path: Path, chunk_size: int, json_output: bool) -> None:
    """Stream PATH into memory and report its size and SHA-256 digest."""
    config = _load_config(ctx, json_output=json_output)
    json_output = json_output or config.cli.json_default
    data = _run(_collect_file(path, chunk_size), json_output=json_output)
    digest = hashlib.sha256(data).hexdigest()
    LOGGER.debug("Collected %d bytes from %s", len(data), path)

    if json_output:
        console.print_json(data={"path": str(path), "size": len(data), "sha256": digest})
        return
    click.echo(f"{path}: {len(data)} bytes (sha256 {digest})")


@cli.group()
def config() -> None:
    """Inspect imgstream configuration."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.pass_context
def config_view(ctx: click.Context, no_env: bool) -> None:
    """Display the effective configuration after applying overrides."""
    effective = _load_config(ctx, include_env=not no_env)
    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("path")
@click.pass_context
def config_path(ctx: click.Context) -> None:
    """Print the location of the configuration file."""
    options = ctx.find_root().obj or {}
    click.echo(str(ConfigManager(options.get("config_path")).config_path))


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
