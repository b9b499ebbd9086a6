"""Command-line interface for the OpenShift test helpers."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import click
import yaml
from safir.asyncio import run_with_asyncio
from safir.click import display_help

from .config import Config
from .constants import CONFIG_FILE, CONFIG_FILE_ENV_VAR
from .exceptions import MissingFieldError
from .factory import Factory
from .models.volumes import SecretVolume
from .services.metadata import ImageMetadata

__all__ = ["help", "inspect", "main", "volume"]


def _load_config(config_file: Path | None) -> Config:
    """Load the configuration, falling back on defaults if there is none."""
    if env_config_path := os.getenv(CONFIG_FILE_ENV_VAR):
        config_file = Path(env_config_path)
    if config_file is None:
        config_file = CONFIG_FILE if CONFIG_FILE.exists() else None
    return Config.from_file(config_file) if config_file else Config()


def _parse_items(
    ctx: click.Context, param: click.Parameter, value: tuple[str, ...]
) -> dict[str, str]:
    """Parse ``KEY=PATH`` options into an ordered mapping."""
    items = {}
    for item in value:
        key, sep, path = item.partition("=")
        if not sep or not key or not path:
            msg = f'"{item}" is not of the form KEY=PATH'
            raise click.BadParameter(msg, ctx=ctx, param=param)
        items[key] = path
    return items


def _strip_none(data: Any) -> Any:
    """Remove keys with `None` values from serialized Kubernetes objects."""
    if isinstance(data, dict):
        return {k: _strip_none(v) for k, v in data.items() if v is not None}
    if isinstance(data, list):
        return [_strip_none(v) for v in data]
    return data


def _summarize(metadata: ImageMetadata, protocol: str | None) -> dict:
    """Collect the interesting image metadata for display."""
    try:
        command = metadata.command()
    except MissingFieldError:
        command = None
    try:
        env = dict(metadata.envs())
    except MissingFieldError:
        env = {}
    return {
        "labels": metadata.labels(),
        "command": command,
        "entrypoint": metadata.entrypoint(),
        "env": env,
        "exposedPorts": sorted(metadata.exposed_ports(protocol)),
        "user": metadata.user(),
        "workingDir": metadata.working_dir(),
    }


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s")
def main() -> None:
    """OpenShift test helpers command-line interface."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.argument("subtopic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None, subtopic: str | None) -> None:
    """Show help for any command."""
    display_help(main, ctx, topic, subtopic)


@main.command()
@click.argument("image")
@click.option(
    "--config-file",
    "-c",
    type=Path,
    default=None,
    help="Configuration file",
)
@click.option(
    "--namespace",
    "-n",
    default=None,
    help="Namespace in which to create the image stream",
)
@click.option(
    "--protocol",
    "-p",
    default=None,
    help="Only show exposed ports for this protocol",
)
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging")
@run_with_asyncio
async def inspect(
    image: str,
    *,
    config_file: Path | None,
    namespace: str | None,
    protocol: str | None,
    debug: bool,
) -> None:
    """Import IMAGE into OpenShift and show its runtime configuration."""
    config = _load_config(config_file)
    if namespace:
        config.namespace = namespace
    if debug:
        config.debug = debug
    config.configure_logging()

    async with Factory.standalone(config) as factory:
        resolver = factory.create_image_metadata_resolver()
        metadata = await resolver.prepare(image)
    click.echo(json.dumps(_summarize(metadata, protocol), indent=2))


@main.command()
@click.argument("name")
@click.argument("secret")
@click.option(
    "--item",
    "-i",
    "items",
    multiple=True,
    callback=_parse_items,
    help="Project secret key KEY to PATH in the volume (KEY=PATH)",
)
@click.option(
    "--default-mode",
    type=int,
    default=None,
    help="File mode bits for the projected files",
)
def volume(
    name: str, secret: str, items: dict[str, str], default_mode: int | None
) -> None:
    """Show the pod volume NAME populated from the Secret SECRET."""
    try:
        descriptor = SecretVolume(
            name, secret, items, default_mode=default_mode
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    data = _strip_none(descriptor.build().to_dict(serialize=True))
    click.echo(yaml.safe_dump(data, sort_keys=False), nl=False)
