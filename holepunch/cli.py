"""
holepunch CLI - run the rendezvous server and exercise it from a peer.
"""

import logging
import sys
from dataclasses import replace
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import get_config, set_config
from .errors import StartupError, log_error
from .network import (
    Endpoint,
    RendezvousServer,
    is_external,
    open_socket,
    receive_notification,
    send_request,
)

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, level: str = "INFO"):
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(message)s",
        handlers=[logging.StreamHandler()]
    )


def _parse_endpoint(ctx, param, value: Optional[str]) -> Optional[Endpoint]:
    if value is None:
        return None
    try:
        return Endpoint.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.pass_context
def main(ctx, verbose):
    """Rendezvous relay for UDP hole punching."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose

    try:
        config = get_config()
    except ValueError as e:
        raise click.UsageError(f"Invalid environment: {e}")

    setup_logging(verbose, config.log_level)


@main.command()
@click.option('--port', '-p', type=click.IntRange(1, 65535), help='UDP port to listen on')
def serve(port: Optional[int]):
    """Start the rendezvous server."""

    config = get_config()
    if port is not None:
        config = replace(config, port=port)
        set_config(config)

    try:
        server = RendezvousServer.bind(config)
    except StartupError as e:
        log_error(logger, e)
        sys.exit(1)

    # Line-buffered so the banner reaches the journal immediately
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(line_buffering=True)

    console.print()
    console.print(config.notice, markup=False, highlight=False)
    console.print(f"Bound to port {config.port}.")
    console.print(f"Git rev. {config.revision}", markup=False)

    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            console.print("\n[dim]Stopped.[/dim]")


@main.command()
@click.argument('server', callback=_parse_endpoint)
@click.argument('peer', callback=_parse_endpoint)
@click.option('--source-port', '-s', default=0, type=click.IntRange(0, 65535),
              help='Local UDP port to send from (0 for random)')
@click.option('--wait', '-w', default=0.0, type=float,
              help='Seconds to wait for the peer\'s endpoint (0 to skip)')
def request(server: Endpoint, peer: Endpoint, source_port: int, wait: float):
    """Ask SERVER to tell PEER about this host."""

    if server.family is not peer.family:
        raise click.BadParameter("SERVER and PEER must use the same address family")

    sock = open_socket(server, source_port)
    try:
        send_request(sock, server, peer)
        console.print(f"[green]✓[/green] Sent request to {server.host}:{server.port} naming {peer}")

        if wait > 0:
            other = receive_notification(sock, server, timeout=wait)
            if other is None:
                console.print(f"[yellow]No peer endpoint received within {wait}s[/yellow]")
                sys.exit(1)
            console.print(f"Peer endpoint: [cyan]{other}[/cyan]")
    finally:
        sock.close()


@main.command()
@click.argument('addresses', nargs=-1, required=True)
def classify(addresses):
    """Show whether each ADDRESS (host:port) is externally routable."""

    table = Table(show_header=True)
    table.add_column("Endpoint")
    table.add_column("Family")
    table.add_column("Class")

    for text in addresses:
        try:
            endpoint = Endpoint.parse(text)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="ADDRESS")

        label = "[green]external[/green]" if is_external(endpoint) else "[red]internal[/red]"
        table.add_row(str(endpoint), endpoint.family.label, label)

    console.print(table)


@main.command()
def version():
    """Show version and build revision."""
    config = get_config()
    console.print(f"holepunch {__version__} (rev. {config.revision})", markup=False)


if __name__ == '__main__':
    main()
