"""sfvforge CLI - Main application entry point.

Commands:
    create  - Hash files and write a manifest
    verify  - Check files against a manifest

Examples:
    sfvforge create -t sha256 -f release.sfv *.zip
    sfvforge verify -f release.sfv
    cat release.sfv | sfvforge verify
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from sfvforge import __commit__, __version__
from sfvforge.checksum import (
    BuildInfo,
    ChecksumAlgorithm,
    ChecksumEntry,
    ChecksumOrchestrator,
    EntryStatus,
    ManifestWriter,
    is_manifest_filename,
)
from sfvforge.cli.console import (
    ErrorRenderer,
    get_console,
    get_err_console,
    set_verbose_mode,
    tip,
)
from sfvforge.cli.progress import ByteProgress
from sfvforge.core.config import SfvConfig, load_config
from sfvforge.core.exceptions import SfvForgeError
from sfvforge.core.logging import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_FAILED_ENTRIES = 1
EXIT_HARD_ERROR = 2

_STATUS_STYLES = {
    EntryStatus.CHECKSUM_OK: "green",
    EntryStatus.CHECKSUM_MISMATCH: "bold red",
    EntryStatus.CHECKSUM_FAILED: "red",
    EntryStatus.NOT_FOUND: "yellow",
    EntryStatus.NOT_A_FILE: "yellow",
    EntryStatus.STAT_FAILED: "yellow",
}


@dataclass
class CliState:
    """Settings resolved by the top-level callback, shared with commands."""

    config: SfvConfig
    quiet: bool = False


app = typer.Typer(
    name="sfvforge",
    help="Create and verify SFV-style checksum manifests",
    add_completion=False,
    pretty_exceptions_enable=False,
)


def _fail(exc: BaseException, context: str = "") -> None:
    """Render a hard failure and exit with the hard-error code."""
    ErrorRenderer.render(exc, context=context)
    raise typer.Exit(code=EXIT_HARD_ERROR)


def _get_state(ctx: typer.Context) -> CliState:
    state = ctx.obj
    if not isinstance(state, CliState):
        state = CliState(config=SfvConfig())
        ctx.obj = state
    return state


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"sfvforge version {__version__} ({__commit__})")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable debug logging and error tracebacks",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Hide the progress bar",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to sfvforge.yaml",
    ),
) -> None:
    """sfvforge - Create and verify SFV-style checksum manifests."""
    try:
        config = load_config(config_path)
    except SfvForgeError as e:
        _fail(e, context="While loading configuration")

    configure_logging(
        level="DEBUG" if verbose else config.log_level,
        log_file=config.log_path,
    )
    set_verbose_mode(verbose)
    ctx.obj = CliState(config=config, quiet=quiet or not config.progress)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("create")
def create_command(
    ctx: typer.Context,
    files: List[str] = typer.Argument(..., help="Files to checksum"),
    algorithm: Optional[str] = typer.Option(
        None,
        "--type",
        "-t",
        help="Algorithm: crc32, md5, sha1 or sha256 (default from config)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="Write the manifest here instead of standard output",
    ),
) -> None:
    """Hash files and write a checksum manifest.

    Examples:
        sfvforge create a.bin b.bin
        sfvforge create -t md5 -f checksums.md5 a.bin b.bin
    """
    state = _get_state(ctx)
    selector = algorithm or state.config.algorithm

    try:
        checksum_type = ChecksumAlgorithm.require(selector)
    except SfvForgeError as e:
        _fail(e)

    logger.debug("Creating manifest", algorithm=checksum_type.value, files=len(files))
    orchestrator = ChecksumOrchestrator(
        chunk_size=state.config.chunk_size,
        progress=ByteProgress("Creating", quiet=state.quiet),
    )
    entries = orchestrator.create(checksum_type, files)

    writer = ManifestWriter(
        BuildInfo(state.config.tool_name, __version__, __commit__)
    )
    try:
        writer.write(entries, output)
    except SfvForgeError as e:
        _fail(e, context=f"While writing {output or 'standard output'}")

    err_console = get_err_console()
    failed = [entry for entry in entries if not entry.passed]
    for entry in failed:
        err_console.print(
            f"[yellow]Skipped[/yellow] {escape(entry.filename)}: {entry.status.label}"
        )

    unreadable = [
        entry
        for entry in entries
        if entry.passed and not is_manifest_filename(entry.filename)
    ]
    for entry in unreadable:
        err_console.print(
            f"[yellow]Unverifiable[/yellow] {escape(entry.filename)}: "
            "verify cannot read this name back"
        )
    if unreadable:
        tip("Run create from the files' directory with plain names like data_01.bin")

    if failed or unreadable:
        raise typer.Exit(code=EXIT_FAILED_ENTRIES)


@app.command("verify")
def verify_command(
    ctx: typer.Context,
    manifest: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="Manifest to verify (reads standard input when omitted)",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print results as JSON",
    ),
) -> None:
    """Verify files against a checksum manifest.

    Examples:
        sfvforge verify -f release.sfv
        sfvforge verify --json < release.sfv
    """
    state = _get_state(ctx)
    orchestrator = ChecksumOrchestrator(
        chunk_size=state.config.chunk_size,
        progress=ByteProgress("Verifying", quiet=state.quiet or as_json),
    )

    try:
        entries = orchestrator.verify(manifest)
    except SfvForgeError as e:
        _fail(e, context=f"While reading {manifest or 'standard input'}")

    if as_json:
        typer.echo(json.dumps(_summary(entries), indent=2))
    else:
        _render_report(entries)

    # An empty manifest verified nothing
    if not entries or any(not entry.passed for entry in entries):
        raise typer.Exit(code=EXIT_FAILED_ENTRIES)


def _summary(entries: List[ChecksumEntry]) -> dict:
    passed = sum(1 for entry in entries if entry.passed)
    return {
        "entries": [entry.to_dict() for entry in entries],
        "total": len(entries),
        "passed": passed,
        "failed": len(entries) - passed,
    }


def _render_report(entries: List[ChecksumEntry]) -> None:
    """Print a status table and one-line summary."""
    console = get_console()

    if not entries:
        console.print("[yellow]No checksum entries found in manifest[/yellow]")
        tip("Lines must use one of the crc32, md5, sha1 or sha256 layouts")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("File")
    table.add_column("Algorithm")
    table.add_column("Status")

    for entry in entries:
        style = _STATUS_STYLES.get(entry.status, "")
        table.add_row(
            escape(entry.filename),
            entry.algorithm.value,
            f"[{style}]{entry.status.label}[/{style}]" if style else entry.status.label,
        )
    console.print(table)

    summary = _summary(entries)
    colour = "green" if summary["failed"] == 0 else "red"
    console.print(
        f"[{colour}]{summary['passed']}/{summary['total']} files OK, "
        f"{summary['failed']} failed[/{colour}]"
    )


def cli_main() -> None:
    """Entry point for console_scripts."""
    app()


if __name__ == "__main__":
    cli_main()
