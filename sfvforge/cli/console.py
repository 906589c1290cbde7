"""Console output helpers.

Provides the shared rich consoles and the ErrorRenderer used by every
command. Reports go to stdout; errors, warnings and progress go to stderr.
"""

from __future__ import annotations

import traceback
from typing import List, Optional, Tuple

from rich.console import Console
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

_console: Console | None = None
_err_console: Console | None = None

# Verbose mode flag (set by CLI --verbose flag)
_verbose_mode: bool = False


def get_console() -> Console:
    """Get shared stdout console instance (lazy-loaded)."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def get_err_console() -> Console:
    """Get shared stderr console instance (lazy-loaded)."""
    global _err_console
    if _err_console is None:
        _err_console = Console(stderr=True)
    return _err_console


def set_verbose_mode(enabled: bool) -> None:
    """Enable or disable traceback display for errors."""
    global _verbose_mode
    _verbose_mode = enabled


def is_verbose_mode() -> bool:
    return _verbose_mode


def tip(message: str) -> None:
    """Display a dim tip line on stderr."""
    get_err_console().print(f"  [dim]Tip: {message}[/dim]")


def error_details(exc: BaseException) -> List[Tuple[str, str]]:
    """Labelled facts about a failure, shown above the explanation.

    Manifest errors name the manifest, config errors name the setting and
    the value that was rejected, and OS errors name the file the system
    call failed on.
    """
    from sfvforge.checksum.models import ChecksumAlgorithm
    from sfvforge.core.exceptions import (
        ConfigValidationError,
        ManifestError,
        StatusTransitionError,
        UnknownAlgorithmError,
        get_root_cause,
    )

    details: List[Tuple[str, str]] = []

    if isinstance(exc, ManifestError) and exc.path is not None:
        details.append(("Manifest", str(exc.path)))
    elif isinstance(exc, UnknownAlgorithmError):
        details.append(("Requested", repr(exc.algorithm)))
        details.append(("Supported", ", ".join(ChecksumAlgorithm.names())))
    elif isinstance(exc, ConfigValidationError) and exc.field:
        details.append(("Setting", f"{exc.field} = {exc.value!r}"))
    elif isinstance(exc, StatusTransitionError):
        details.append(("Entry", exc.filename))
        details.append(("Transition", f"{exc.current} -> {exc.requested}"))

    root = get_root_cause(exc)
    if isinstance(root, OSError):
        reason = root.strerror or str(root)
        if root.filename:
            details.append(("System", f"{reason}: {root.filename}"))
        else:
            details.append(("System", reason))

    return details


class ErrorRenderer:
    """Renders hard failures as a red panel on stderr.

    The panel shows the message, the manifest or setting involved, then
    "Why it happened" and "How to fix" from the exception's error info.

    Example
    -------
        try:
            write_manifest(entries, path)
        except SfvForgeError as e:
            ErrorRenderer.render(e, context=f"While writing {path}")
            raise typer.Exit(2)
    """

    @staticmethod
    def render(
        exc: BaseException,
        context: str = "",
        show_traceback: Optional[bool] = None,
    ) -> None:
        """Render an exception as an error panel on stderr.

        Args:
            exc: Exception to render
            context: What the command was doing (e.g., "While reading release.sfv")
            show_traceback: Override for verbose mode (None = use global setting)
        """
        from sfvforge.core.exceptions import get_error_info

        info = get_error_info(exc)
        panel = Panel(
            ErrorRenderer._build_error_content(
                exc,
                context=context,
                why=info["why_it_happened"],
                how_to_fix=info["how_to_fix"],
            ),
            title=f"[bold red]Error: {info['error_code']}[/bold red]",
            border_style="red",
            padding=(1, 2),
        )

        console = get_err_console()
        console.print(panel)

        if show_traceback is None:
            show_traceback = is_verbose_mode()
        if show_traceback:
            ErrorRenderer._render_traceback(exc)

    @staticmethod
    def _build_error_content(
        exc: BaseException,
        context: str,
        why: str,
        how_to_fix: List[str],
    ) -> Group:
        heading = Text()
        if context:
            heading.append(f"{context}\n\n", style="dim")
        heading.append(str(exc), style="bold red")

        facts = Table.grid(padding=(0, 2))
        facts.add_column(style="bold yellow", no_wrap=True)
        facts.add_column(style="yellow")
        for label, value in error_details(exc):
            facts.add_row(f"{label}:", Text(value))

        advice = Text()
        advice.append("Why it happened:\n", style="bold cyan")
        advice.append(f"  {why}\n\n", style="cyan")
        advice.append("How to fix:\n", style="bold green")
        advice.append("\n".join(f"  - {fix}" for fix in how_to_fix), style="green")

        parts = [heading, Text()]
        if facts.row_count:
            parts.extend([facts, Text()])
        parts.append(advice)
        return Group(*parts)

    @staticmethod
    def _render_traceback(exc: BaseException) -> None:
        console = get_err_console()
        console.print()
        console.print("[dim]--- Traceback (--verbose) ---[/dim]")
        tb_lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
        console.print("".join(tb_lines), style="dim", markup=False, highlight=False)
