"""CLI commands for the Lacework API client."""

from __future__ import annotations

import json
import sys
from typing import Any

import click
import httpx
from rich.console import Console

from lacework_client.config import load_config
from lacework_client.errors import LaceworkError
from lacework_client.http.client import Client

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def _client(ctx: click.Context) -> Client:
    """Return the client for this invocation, building it on first use."""
    if "client" not in ctx.obj:
        overrides: dict[str, Any] = {}
        if ctx.obj.get("debug"):
            overrides["log"] = "debug"
        settings = load_config(ctx.obj.get("config"), ctx.obj.get("profile"))
        if overrides:
            settings = settings.model_copy(update=overrides)
        client = Client.from_settings(settings)
        ctx.call_on_close(client.close)
        ctx.obj["client"] = client
    return ctx.obj["client"]


def _fail(message: str) -> None:
    click.echo(f"ERROR {message}", err=True)
    sys.exit(1)


@click.group()
@click.option("--config", "-c", type=click.Path(), help="Path to config file")
@click.option("--profile", "-p", help="Profile from the config file to use")
@click.option("--debug", is_flag=True, help="Log requests and responses in full")
@click.pass_context
def cli(ctx: click.Context, config: str | None, profile: str | None, debug: bool) -> None:
    """Talk to the Lacework API."""
    ctx.ensure_object(dict)
    ctx.obj.setdefault("config", config)
    ctx.obj.setdefault("profile", profile)
    ctx.obj.setdefault("debug", debug)


@cli.command()
@click.argument("method", type=click.Choice(HTTP_METHODS, case_sensitive=False))
@click.argument("path")
@click.option("--data", "-d", help="JSON payload to send as the request body")
@click.pass_context
def api(ctx: click.Context, method: str, path: str, data: str | None) -> None:
    """Call an API endpoint and print the JSON answer.

    PATH is relative to /api/v2/ unless it starts with /api/, for example
    AlertRules or /api/v2/ResourceGroups/ACME_1234.
    """
    try:
        payload = json.loads(data) if data is not None else None
    except json.JSONDecodeError as e:
        _fail(f"--data is not valid JSON: {e}")

    try:
        client = _client(ctx)
        if data is not None:
            result = client.request_encoder_decoder(method.upper(), path, payload, Any)
        else:
            result = client.request_decoder(method.upper(), path, model=Any)
    except (LaceworkError, httpx.TransportError) as e:
        _fail(str(e))

    if result is not None:
        Console().print_json(data=result)


@cli.command("access-token")
@click.pass_context
def access_token(ctx: click.Context) -> None:
    """Generate a new access token and print it."""
    try:
        state = _client(ctx).generate_token()
    except LaceworkError as e:
        _fail(str(e))

    click.echo(state.token)
