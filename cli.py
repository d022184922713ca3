"""CLI entry point for privacy-relay."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import ENV_SETTINGS, UPSTREAM_BASE_ENV, Config, load_config, resolve_upstream_base
from core.exceptions import ConfigurationError
from ui.console_log import ConsoleRequestLogger
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e.message}")
        sys.exit(1)

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            _print_config(config)
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    # Requests answer 500 until the upstream is configured; the server still starts
    try:
        upstream = resolve_upstream_base(config)
    except ConfigurationError as e:
        console.print(f"[yellow]Warning:[/yellow] {e.message}")
        console.print(f"[dim]Set {UPSTREAM_BASE_ENV}, e.g. https://api.day.app[/dim]")
    else:
        console.print(f"[bold]Upstream:[/bold] {upstream}")

    clear_logs()
    logger = ConsoleRequestLogger()

    import uvicorn

    app = create_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="info" if config.proxy.debug else "warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    console.print(f"[green]Listening[/green] on http://{config.proxy.host}:{config.proxy.port}")
    start_time = datetime.now()
    write_cli_log("STARTUP", "Relay started", port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Relay stopped", duration=str(duration))


def _print_config(config: Config):
    """Print effective settings and where they come from."""
    for name, (section, field) in ENV_SETTINGS.items():
        value = getattr(getattr(config, section), field)
        console.print(f"[bold]{name}[/bold] ({section}.{field}): {value!r}")


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Privacy Relay[/bold cyan]

Forwards every request to UPSTREAM_BASE, keeping path and query, with
client IP and hop-by-hop headers stripped and caching disabled.

[bold]Usage:[/bold]
    privacy-relay              Start the relay
    privacy-relay --config     Show effective settings
    privacy-relay --help       Show this help

[bold]Environment:[/bold]
    UPSTREAM_BASE      Upstream base URL (required), e.g. https://api.day.app
    UPSTREAM_TIMEOUT   Upstream timeout in seconds (default 300)
    RELAY_HOST         Listen address (default 127.0.0.1)
    RELAY_PORT         Listen port (default 8080)
    RELAY_DEBUG        Verbose server logging (default false)
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
