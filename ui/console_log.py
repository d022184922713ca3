"""Console request log for the relay."""

from datetime import datetime
from pathlib import Path
from threading import Lock

from rich.console import Console
from rich.markup import escape

from ui.log_utils import write_cli_log

console = Console()


class ConsoleRequestLogger:
    """Print one line per relayed exchange and mirror it to the CLI log file."""

    def __init__(self, console: Console = console, log_file: Path | None = None):
        self._console = console
        self._log_file = log_file
        self._lock = Lock()

    def log_forward(self, method: str, target: str, status: int) -> None:
        """Log a completed upstream exchange (status line received)."""
        style = "green" if status < 400 else "yellow" if status < 500 else "red"
        with self._lock:
            self._console.print(
                f"[dim]{_now()}[/dim] [bold]{method}[/bold] {escape(target)} "
                f"[{style}]{status}[/{style}]",
                highlight=False,
            )
        write_cli_log("FORWARD", f"{method} {target}", log_file=self._log_file, status=status)

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log a request that ended in a relay error response."""
        with self._lock:
            self._console.print(
                f"[dim]{_now()}[/dim] [red][ERROR][/red] {route} {status}: {escape(message)}",
                highlight=False,
            )
        write_cli_log("ERROR", message, log_file=self._log_file, route=route, status=status)


def _now() -> str:
    return datetime.now().strftime("%H:%M:%S")
