import io

from rich.console import Console

from ui.console_log import ConsoleRequestLogger
from ui.log_utils import clear_logs, write_cli_log


def _logger(tmp_path):
    output = io.StringIO()
    console = Console(file=output, force_terminal=False, width=200)
    return ConsoleRequestLogger(console, log_file=tmp_path / "proxy.log"), output


def test_forward_line_printed_and_written(tmp_path):
    logger, output = _logger(tmp_path)

    logger.log_forward("GET", "https://api.day.app/push/XXXX", 200)

    assert "GET https://api.day.app/push/XXXX 200" in output.getvalue()
    line = (tmp_path / "proxy.log").read_text()
    assert "FORWARD: GET https://api.day.app/push/XXXX status=200" in line


def test_error_message_is_not_treated_as_markup(tmp_path):
    logger, output = _logger(tmp_path)

    logger.log_error("upstream", 502, "[Errno 111] [bold]refused")

    assert "[Errno 111] [bold]refused" in output.getvalue()
    assert "route=upstream status=502" in (tmp_path / "proxy.log").read_text()


def test_write_cli_log_appends(tmp_path):
    log_file = tmp_path / "nested" / "proxy.log"

    write_cli_log("STARTUP", "Relay started", log_file=log_file, port=8080)
    write_cli_log("SHUTDOWN", "Relay stopped", log_file=log_file)

    lines = log_file.read_text().splitlines()
    assert lines[0].endswith("STARTUP: Relay started port=8080")
    assert lines[1].endswith("SHUTDOWN: Relay stopped")


def test_clear_logs(tmp_path):
    log_root = tmp_path / "logs"
    write_cli_log("INFO", "old", log_file=log_root / "proxy.log")

    clear_logs(log_root)

    assert not log_root.exists()
    clear_logs(log_root)
