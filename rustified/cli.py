"""
Rustified CLI -- Rust Runtime Provenance Scanner
=================================================

Click-based command-line interface.  Walks a directory tree and prints
one line per executable that shows evidence of having been built with
Rust::

    ./target/debug/app (function "_ZN3std9panicking11rust_panic17h...E" is found)

Usage::

    # Scan the current directory
    rustified

    # Scan a tree with an extra marker and four reader threads
    rustified /opt/bin --marker __rust_alloc --jobs 4

    # JSON report on stdout
    rustified /opt/bin --json

    # Counters table on stderr after the scan
    rustified /opt/bin --summary

Stdout carries only report lines (or the JSON report); everything else
goes to stderr.

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys
import tomllib

import click

from shared.config import RustifiedConfig
from shared.console import RustifiedConsole
from shared.logger import RustifiedLogger, configure_logging

from rustified import __version__
from rustified.analyzers.markers import MarkerSet
from rustified.core.engine import RustifiedEngine
from rustified.output.console import SummaryDisplay, VerdictPrinter
from rustified.output.report import ReportGenerator


EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def _load_config(config_path: str | None, console: RustifiedConsole) -> RustifiedConfig:
    try:
        return RustifiedConfig.load(config_path)
    except FileNotFoundError as exc:
        console.error(str(exc))
    except tomllib.TOMLDecodeError as exc:
        console.error(f"Invalid configuration file {config_path or 'config.toml'}: {exc}")
    except (TypeError, ValueError) as exc:
        console.error(f"Invalid configuration: {exc}")
    sys.exit(EXIT_CONFIG_ERROR)


@click.command("rustified")
@click.version_option(__version__, prog_name="rustified")
@click.argument(
    "root",
    type=click.Path(exists=True, file_okay=True, dir_okay=True),
    default=".",
)
@click.option(
    "--marker", "-m",
    "extra_markers",
    multiple=True,
    help="Additional marker substring (repeatable).",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a TOML configuration file.",
)
@click.option(
    "--jobs", "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Number of files scanned concurrently (default: from config).",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print a JSON report to stdout instead of report lines.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write the JSON report to this file.",
)
@click.option(
    "--summary", "-s",
    is_flag=True,
    default=False,
    help="Show a counters table on stderr after the scan.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose/debug output.",
)
def rustified_cli(
    root: str,
    extra_markers: tuple[str, ...],
    config_path: str | None,
    jobs: int | None,
    json_output: bool,
    output_path: str | None,
    summary: bool,
    verbose: bool,
) -> None:
    """Rustified -- find executables built with Rust.

    Recursively scans ROOT (default: the current directory).  ELF files are
    checked through their symbol tables and PE files through their .data
    sections for the Rust runtime markers.

    Examples:

    \b
        rustified ./target
        rustified /usr/local/bin -m __rust_alloc -j 8
        rustified . --output report.json --summary
    """
    console = RustifiedConsole()
    config = _load_config(config_path, console)
    settings = config.global_settings

    log_level = "DEBUG" if verbose or settings.debug else settings.log_level
    configure_logging(
        log_level=log_level,
        log_file=settings.log_file or None,
        json_logs=settings.log_json,
    )
    logger = RustifiedLogger("cli")

    if jobs is not None:
        config.scan.workers = jobs

    try:
        markers = MarkerSet.from_iterable(config.scan.markers).extended(*extra_markers)
    except ValueError as exc:
        console.error(f"Invalid marker: {exc}")
        sys.exit(EXIT_CONFIG_ERROR)

    logger.debug("Scanning %s for %s", root, ", ".join(markers))
    engine = RustifiedEngine(config=config, markers=markers)
    printer = VerdictPrinter()

    # Lines stream as files finish; the JSON report replaces them on stdout
    try:
        result = engine.run(root, on_record=None if json_output else printer.emit)
    except KeyboardInterrupt:
        console.warning("Scan interrupted by user.")
        sys.exit(EXIT_INTERRUPTED)

    logger.info(
        "Scanned %d file(s), %d with evidence",
        result.files_scanned, result.evidence_count,
    )

    report_gen = ReportGenerator()
    if json_output:
        click.echo(report_gen.to_json(result))

    if output_path:
        report_path = report_gen.generate_json(result, output_path)
        console.success(f"JSON report saved: {report_path}")

    if summary:
        SummaryDisplay(console=console).display(result)


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for the ``rustified`` console script."""
    rustified_cli()


if __name__ == "__main__":
    main()
