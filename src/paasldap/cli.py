"""Administrative command-line interface."""

from __future__ import annotations

from pathlib import Path

import click
import uvicorn
from cryptography.fernet import Fernet

from .dependencies.config import config_dependency
from .main import create_openapi

__all__ = [
    "generate_session_secret",
    "help",
    "main",
    "openapi_schema",
    "run",
]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s", package_name="paasldap")
def main() -> None:
    """Administrative command-line interface for paasldap."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None) -> None:
    """Show help for any command."""
    # The help command is registered on main, so its parent context holds the
    # main group.
    if not ctx.parent:
        raise RuntimeError("help called without parent command")
    if not topic:
        click.echo(ctx.parent.get_help())
        return
    command = main.get_command(ctx, topic)
    if not command:
        raise click.UsageError(f"Unknown help topic {topic}", ctx.parent)
    with click.Context(command, info_name=topic, parent=ctx.parent) as sub:
        click.echo(command.get_help(sub))


@main.command()
@click.option(
    "--config-path",
    envvar="PAASLDAP_CONFIG_PATH",
    type=click.Path(path_type=Path),
    default=None,
    help="Application configuration file.",
)
@click.option(
    "--port", default=None, type=int, help="Port to run the application on."
)
def run(*, config_path: Path | None, port: int | None) -> None:
    """Run the application (for testing only)."""
    if config_path:
        config_dependency.set_config_path(config_path)
    config = config_dependency.config()
    uvicorn.run(
        "paasldap.main:create_app",
        factory=True,
        port=port or config.listen_port,
        reload=False,
    )


@main.command()
def generate_session_secret() -> None:
    """Generate a new Fernet key for encrypting the session cookie."""
    click.echo(Fernet.generate_key().decode())


@main.command()
@click.option(
    "--output",
    default=None,
    type=click.Path(path_type=Path),
    help="Output path (output to stdout if not given).",
)
def openapi_schema(*, output: Path | None) -> None:
    """Generate the OpenAPI schema."""
    schema = create_openapi()
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(schema)
    else:
        click.echo(schema)
