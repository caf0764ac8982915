"""``consul-discovery`` command group."""

from __future__ import annotations

import json
import os

import click

from consul_discovery import __version__
from consul_discovery.cli.output import coro, error, success, warning
from consul_discovery.core.exceptions import DiscoveryError
from consul_discovery.core.settings import get_consul_settings
from consul_discovery.infra.discovery import (
    ConsulHttpClient,
    ConsulServicesRegistry,
    build_registration,
)
from consul_discovery.infra.discovery.registration import ENABLED_ENV_VAR
from consul_discovery.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="consul-discovery")
def cli() -> None:
    """Inspect the Consul registration of this service and query the agent.

    \b
    Examples:
      consul-discovery registration          # payload sent at startup
      consul-discovery services orders       # pick a registered instance
      consul-discovery resolve http://orders/api/orders
    """


@cli.command()
@click.option("--host", default=None, help="Bind address (default: APP_HOST)")
@click.option("--port", default=None, type=int, help="Bind port (default: APP_PORT)")
def serve(host: str | None, port: int | None) -> None:
    """Run the application with uvicorn."""
    from consul_discovery.main import run_fastapi_server

    run_fastapi_server(host=host, port=port)


@cli.command()
def registration() -> None:
    """Print the agent registration built from the current settings.

    A fresh instance ID is generated on every run.
    """
    try:
        built = build_registration(get_consul_settings(), os.environ.get(ENABLED_ENV_VAR))
    except DiscoveryError as e:
        error(e.detail)
        raise SystemExit(1) from e

    if built is None:
        warning("Consul registration is disabled (set CONSUL_ENABLED=true)")
        return
    click.echo(json.dumps(built.to_payload(), indent=2))


@cli.command()
@click.argument("name")
@coro
async def services(name: str) -> None:
    """Print one registered instance of service NAME."""
    settings = get_consul_settings()
    client = ConsulHttpClient(
        timeout=settings.connect_timeout,
        headers=settings.get_auth_headers(),
    )
    try:
        instance = await ConsulServicesRegistry(client, settings.agent_url).get(name)
    except DiscoveryError as e:
        error(e.detail)
        raise SystemExit(1) from e
    finally:
        await client.close()

    if instance is None:
        warning(f"No registered instance of '{name}'")
        raise SystemExit(1)
    click.echo(json.dumps(instance.model_dump(by_alias=True), indent=2))


@cli.command()
@click.argument("url")
@coro
async def resolve(url: str) -> None:
    """Rewrite URL so its host points at a registered instance."""
    settings = get_consul_settings()
    client = ConsulHttpClient(
        timeout=settings.connect_timeout,
        headers=settings.get_auth_headers(),
    )
    try:
        resolved = await ConsulServicesRegistry(client, settings.agent_url).resolve_url(url)
    except DiscoveryError as e:
        error(e.detail)
        raise SystemExit(1) from e
    finally:
        await client.close()

    if resolved == url:
        warning(f"No registered instance for {url}")
    else:
        success(resolved)


def main() -> None:
    """Entry point for the CLI."""
    setup_logging()
    cli()
