"""
Entry point: banner → health check → session → menu.

Exit codes: 0 normal logout/exit, 1 fatal error, 130 login cancelled.
"""

import typer
from rich.markup import escape

from .constants import ERP_VERSION
from .config import log, setup_logging, no_color_requested
from .errors import ErpError
from .palette import make_console
from .banner import render_banner, render_help
from .api import ErpClient
from .auth import ensure_session
from .app import ErpApp


def report_health(client, console):
    """Soft health check: prints a status line, never raises."""
    result = client.health_check()
    if result["ok"]:
        h = result["health"]
        uptime = h.get("uptime")
        uptime_str = f"{round(uptime)}s" if isinstance(uptime, (int, float)) else "-"
        console.print(
            f"[success]Server: {escape(str(h.get('status', 'ok')))} | Uptime: {uptime_str}"
            f" | Sessions: {escape(str(h.get('activeSessions', '-')))}[/]"
        )
    else:
        log.warning("Health check failed: %s", result["error"])
        console.print(f"[warn]Server health check failed: {escape(result['error'])}[/]")
    return result


def main(no_color=False, client=None, console=None, session_path=None):
    """Primary entry point. Returns the process exit code."""
    setup_logging()
    console = console or make_console(no_color=no_color)
    client = client or ErpClient()
    log.info("AITM ERP CLI v%s starting (backend %s)", ERP_VERSION, client.base_url)

    console.print(render_banner())
    report_health(client, console)

    try:
        session = ensure_session(client, console, session_path=session_path)
    except KeyboardInterrupt:
        console.print("\n[warn]Login cancelled.[/]")
        return 130
    except ErpError as e:
        log.error("Login aborted: %s", e)
        console.print(f"\n[error]Fatal error: {escape(e.message)}[/]")
        return 1

    return ErpApp(client, session, console, session_path=session_path).run()


# ─── CLI ─────────────────────────────────────────────────────────

cli = typer.Typer(add_completion=False)


def _version_callback(value: bool):
    if value:
        typer.echo(f"aitm-erp {ERP_VERSION}")
        raise typer.Exit()


def _help_callback(value: bool):
    if value:
        make_console(no_color=no_color_requested()).print(render_help())
        raise typer.Exit()


@cli.command(context_settings={"help_option_names": []})
def run(
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output (or set NO_COLOR=1)."),
    version: bool = typer.Option(None, "--version", "-V", callback=_version_callback, is_eager=True,
                                 help="Show the version and exit."),
    show_help: bool = typer.Option(None, "--help", "-h", callback=_help_callback, is_eager=True,
                                   help="Show the help screen and exit."),
):
    """AITM ERP student portal in the terminal."""
    code = main(no_color=no_color or no_color_requested(argv=[]))
    raise typer.Exit(code=code)
