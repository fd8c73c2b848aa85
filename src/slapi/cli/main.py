"""
CLI for ad-hoc calls: slapi call Account getOpenTickets --mask "mask[id,title]".
Credentials and endpoint come from SL_* environment variables.
"""
import json
import logging
from typing import Any, List, Optional

import typer

from slapi.core.client import Client
from slapi.core.errors import ProgrammingError, RemoteFault, SoftLayerError

app = typer.Typer(help="slapi CLI: call any SoftLayer API method.")


def _parse_value(raw: str) -> Any:
    """JSON when it parses (42, true, {"a": 1}, [1, 2]); otherwise the plain string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def make_client(transport: Optional[str], debug: bool) -> Client:
    return Client(transport=transport, debug=debug or None)


def _fail(message: str) -> None:
    typer.echo(message, err=True)
    raise typer.Exit(1)


@app.command()
def call(
    service: str = typer.Argument(..., help="Service name, e.g. Account or SoftLayer_Account"),
    method: str = typer.Argument(..., help="API method, e.g. getOpenTickets"),
    args: Optional[List[str]] = typer.Argument(None, help="Method arguments (JSON or plain strings)"),
    object_id: Optional[str] = typer.Option(None, "--id", help="Object id to call the method on"),
    mask: Optional[List[str]] = typer.Option(None, "--mask", "-m", help="Object mask (repeatable)"),
    object_filter: Optional[str] = typer.Option(None, "--filter", "-f", help="Object filter as JSON"),
    limit: Optional[int] = typer.Option(None, "--limit", help="Maximum number of results"),
    offset: Optional[int] = typer.Option(None, "--offset", help="Results to skip (with --limit)"),
    transport: Optional[str] = typer.Option(None, "--transport", "-t", help="xmlrpc or soap"),
    debug: bool = typer.Option(False, "--debug", help="Log requests to stderr"),
) -> None:
    """Call SERVICE::METHOD and print the result as JSON."""
    if debug:
        logging.basicConfig(level=logging.DEBUG)
    if offset is not None and limit is None:
        _fail("--offset requires --limit")

    try:
        client = make_client(transport, debug)
        target: Any = client[service]
        if object_id is not None:
            target = target.object_with_id(_parse_value(object_id))
        if mask:
            target = target.object_mask(*mask)
        if object_filter is not None:
            parsed = _parse_value(object_filter)
            if not isinstance(parsed, dict):
                _fail("--filter must be a JSON object")
            target = target.object_filter(parsed)
        if limit is not None:
            target = target.result_limit(offset, limit)
        with client:
            result = target.invoke(method, *[_parse_value(a) for a in args or []])
    except RemoteFault as fault:
        _fail(f"API fault {fault.code}: {fault.message}")
    except ProgrammingError as exc:
        _fail(f"Usage error: {exc}")
    except SoftLayerError as exc:
        _fail(f"Error: {exc}")
    else:
        typer.echo(json.dumps(result, indent=2, default=str))


@app.command()
def config(
    transport: Optional[str] = typer.Option(None, "--transport", "-t", help="xmlrpc or soap"),
) -> None:
    """Show the settings a client would use (the API key is not printed)."""
    try:
        client = make_client(transport, False)
    except SoftLayerError as exc:
        _fail(f"Error: {exc}")
        return
    settings = client.settings
    typer.echo(f"username:     {settings.username}")
    typer.echo(f"endpoint_url: {client.endpoint_url}")
    typer.echo(f"transport:    {settings.transport}")
    typer.echo(f"timeout:      {settings.timeout}")
    typer.echo(f"user_agent:   {settings.user_agent}")


def main() -> None:
    """Entry point for the slapi console command."""
    app()


if __name__ == "__main__":
    main()
