#!/usr/bin/env python3
"""
Main CLI entry point for the set query server.
"""

import os
import sys

import click
import uvicorn

from set_query import __version__
from set_query.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="set-query")
def cli() -> None:
    """Set query CLI - serve the API and inspect configured sets."""
    pass


@cli.command()
@click.option(
    "--host",
    default="0.0.0.0",
    help="Host to bind to (default: 0.0.0.0)",
)
@click.option(
    "--port",
    default=8090,
    type=int,
    help="Port to bind to (default: 8090)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, reload: bool, log_level: str) -> None:
    """Start the set query API server."""
    configure_logging(debug=(log_level == "debug"), level=log_level)

    logger.info("Starting set query API server", host=host, port=port, reload=reload)

    # The app factory runs in the server process, so settings travel via the environment
    if log_level == "debug":
        os.environ["SET_QUERY_DEBUG"] = "true"
    else:
        os.environ.setdefault("SET_QUERY_DEBUG", "false")
    os.environ.setdefault("SET_QUERY_LOG_LEVEL", log_level)

    try:
        uvicorn.run(
            "set_query.api.app:create_app",
            factory=True,
            host=host,
            port=port,
            reload=reload,
            log_level=log_level,
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


def _load_registry(config_path: str | None):
    from set_query.sets.loader import load_sets_from_config
    from set_query.sets.registry import SetRegistry

    set_registry = SetRegistry()
    try:
        load_sets_from_config(config_path, set_registry=set_registry)
    except Exception as e:
        click.echo(f"✗ Error loading sets: {e}", err=True)
        sys.exit(1)
    return set_registry


@cli.command("sets")
@click.option(
    "--config",
    "config_path",
    default=None,
    help="Sets YAML file (default: SET_QUERY_SETS_CONFIG_PATH)",
)
def list_sets(config_path: str | None) -> None:
    """List the sets declared in the sets configuration."""
    configure_logging()
    set_registry = _load_registry(config_path)

    if not len(set_registry):
        click.echo("No sets registered.")
        return

    click.echo(f"Found {len(set_registry)} set(s):\n")
    for registered in set_registry.list_all():
        click.echo(f"  {registered.enum_name}")
        click.echo(f"    Name: {registered.name}")
        if registered.description:
            click.echo(f"    Description: {registered.description}")


@cli.command("print-schema")
@click.option(
    "--config",
    "config_path",
    default=None,
    help="Sets YAML file (default: SET_QUERY_SETS_CONFIG_PATH)",
)
def print_schema(config_path: str | None) -> None:
    """Print the GraphQL schema (SDL) for the configured sets."""
    from set_query.graphql.schema import create_schema

    configure_logging()
    schema = create_schema(_load_registry(config_path))
    click.echo(str(schema))


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    cli()
