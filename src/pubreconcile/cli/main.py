"""Command-line interface for pubreconcile.

Provides CLI commands for fetching, merging and inspecting publication lists.
"""

import contextlib
import importlib.metadata
import json
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("pubreconcile")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.4.0"  # Fallback for development


def _run_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that runs the pipeline."""
    options = [
        click.option(
            "--config-dir",
            type=click.Path(file_okay=False),
            default="config",
            show_default=True,
            help="Directory with basics.json and the journal tables",
        ),
        click.option(
            "--data-dir",
            type=click.Path(file_okay=False),
            default="data",
            show_default=True,
            help="Directory for source caches and publications.json",
        ),
        click.option(
            "--max-concurrency",
            type=int,
            default=4,
            show_default=True,
            help="Records enriched concurrently",
        ),
        click.option(
            "--request-delay",
            type=float,
            default=0.5,
            show_default=True,
            help="Seconds between calls to the same service",
        ),
        click.option(
            "--timeout",
            type=float,
            default=10.0,
            show_default=True,
            help="Per-request timeout in seconds",
        ),
        click.option(
            "--mailto",
            type=str,
            default=None,
            help="Contact address sent to Crossref",
        ),
        click.option(
            "--audit-log",
            type=click.Path(dir_okay=False),
            default=None,
            help="Append JSONL audit events to this file (DEBUG events only with -v)",
        ),
        click.option(
            "--verbose",
            "-v",
            is_flag=True,
            help="Enable verbose output",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _execute(
    command: str,
    params: dict[str, Any],
    *,
    fetch_preprints: bool,
    fetch_profiles: bool,
    offline: bool = False,
    merge: bool = True,
) -> None:
    """Build the pipeline config, run it, and report the result."""
    from pubreconcile.audit import AuditLogger, generate_run_id
    from pubreconcile.engine import PipelineConfig, run_pipeline

    verbose = params["verbose"]

    try:
        config = PipelineConfig(
            config_dir=Path(params["config_dir"]),
            data_dir=Path(params["data_dir"]),
            fetch_preprints=fetch_preprints,
            fetch_profiles=fetch_profiles,
            offline=offline,
            max_concurrency=params["max_concurrency"],
            request_delay_seconds=params["request_delay"],
            request_timeout_seconds=params["timeout"],
            crossref_mailto=params["mailto"],
        )
    except ValueError as e:
        click.secho(f"✗ Invalid options: {e}", fg="red", err=True)
        sys.exit(1)

    if verbose:
        click.echo(f"Config: {config.config_dir}", err=True)
        click.echo(f"Data: {config.data_dir}", err=True)
        sources = [
            name
            for name, enabled in (("arXiv", fetch_preprints), ("ORCID", fetch_profiles))
            if enabled
        ]
        click.echo(f"Fetching: {', '.join(sources) or 'nothing (cached data only)'}", err=True)
        if merge:
            click.echo(f"Enrichment: {'offline' if offline else 'online'}", err=True)

    audit_log = params["audit_log"]
    logger_cm = (
        AuditLogger(
            generate_run_id(), Path(audit_log), min_level="DEBUG" if verbose else "INFO"
        )
        if audit_log
        else contextlib.nullcontext()
    )

    with logger_cm as logger:
        start = time.perf_counter()
        if logger:
            logger.run_started(
                command=sys.argv, parameters={"command": command, **config.to_dict()}
            )

        result = run_pipeline(config, logger, merge=merge)

        if logger:
            logger.run_finished(
                status="success" if result.success else "failed",
                duration_seconds=round(time.perf_counter() - start, 3),
                records_written=result.records_out if merge else None,
            )

    if not result.success:
        click.secho(f"✗ Pipeline failed: {result.error_message}", fg="red", err=True)
        sys.exit(1)

    if verbose:
        click.echo("\nResults:", err=True)
        click.echo(f"  Researchers: {result.researchers}", err=True)
        if merge:
            click.echo(f"  arXiv records: {result.preprint_entries}", err=True)
            click.echo(f"  ORCID records: {result.profile_entries}", err=True)
            click.echo(f"  Publications written: {result.records_out}", err=True)
        click.echo("\nOutputs:", err=True)
        for name, path in result.output_files.items():
            click.echo(f"  {name}: {path}", err=True)

    if merge:
        click.secho(
            f"✓ Wrote {result.records_out} publications "
            f"(from {result.records_in} source records) to {config.output_path}",
            fg="green",
        )
    else:
        click.secho(
            f"✓ Refreshed {len(result.output_files)} source cache(s)",
            fg="green",
        )


@click.group()
@click.version_option(version=__version__, prog_name="pubreconcile")
def cli() -> None:
    """Merge researcher publication lists from arXiv, ORCID and Crossref.

    Use 'pubreconcile COMMAND --help' for command-specific help.
    """


@cli.command()
@_run_options
def generate(**params: Any) -> None:
    """Fetch from arXiv and ORCID, then merge and enrich.

    Examples
    --------
        pubreconcile generate
        pubreconcile generate --config-dir config --data-dir data -v
    """
    _execute("generate", params, fetch_preprints=True, fetch_profiles=True)


@cli.command()
@click.option(
    "--source",
    type=click.Choice(["arxiv", "orcid", "all"]),
    default="all",
    show_default=True,
    help="Which source cache to refresh",
)
@click.option(
    "--no-merge",
    is_flag=True,
    help="Only refresh the cache; do not merge",
)
@_run_options
def fetch(source: str, no_merge: bool, **params: Any) -> None:
    """Refresh one or both source caches, then merge.

    Examples
    --------
        pubreconcile fetch --source arxiv
        pubreconcile fetch --source orcid --no-merge
    """
    _execute(
        "fetch",
        params,
        fetch_preprints=source in ("arxiv", "all"),
        fetch_profiles=source in ("orcid", "all"),
        merge=not no_merge,
    )


@cli.command()
@click.option(
    "--offline",
    is_flag=True,
    help="Skip every Crossref and arXiv lookup",
)
@_run_options
def merge(offline: bool, **params: Any) -> None:
    """Merge cached source data without fetching.

    Useful after editing name variants or journal tables.

    Examples
    --------
        pubreconcile merge
        pubreconcile merge --offline
    """
    _execute("merge", params, fetch_preprints=False, fetch_profiles=False, offline=offline)


@cli.command()
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default="config",
    show_default=True,
    help="Directory with basics.json",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default="data",
    show_default=True,
    help="Directory holding publications.json",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print statistics as JSON",
)
def stats(config_dir: str, data_dir: str, as_json: bool) -> None:
    """Show statistics about the written publications file.

    Examples
    --------
        pubreconcile stats
        pubreconcile stats --json
    """
    from pubreconcile.config import roster_from_basics
    from pubreconcile.engine.config import OUTPUT_FILE
    from pubreconcile.finalize import read_publications
    from pubreconcile.stats import compute_stats

    publications_path = Path(data_dir) / OUTPUT_FILE
    if not publications_path.is_file():
        click.secho(
            f"Error: no publications found at {publications_path}. Run 'generate' first.",
            fg="red",
            err=True,
        )
        sys.exit(1)

    try:
        entries = read_publications(publications_path)
        roster = ()
        basics_path = Path(config_dir) / "basics.json"
        if basics_path.is_file():
            with basics_path.open("r", encoding="utf-8") as f:
                roster = roster_from_basics(json.load(f))
        summary = compute_stats(entries, roster)
    except Exception as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
        return

    click.echo("\n=== Publications Statistics ===\n")
    click.echo(f"Total publications: {summary.total}")
    click.echo(f"Publications with DOI: {summary.with_persistent_id}")
    click.echo(f"Publications with journal ref: {summary.with_citation_ref}")
    click.echo(f"Publications with coverage: {summary.with_coverage}")
    click.echo(f"Publications with awards: {summary.with_awards}")

    if summary.per_researcher:
        click.echo("\nPublications per author:")
        for count in summary.per_researcher:
            click.echo(
                f"  {count.name}: {count.total} total "
                f"({count.published} published, {count.preprints} preprints)"
            )

    if summary.top_categories:
        click.echo("\nTop categories:")
        for category, n in summary.top_categories:
            click.echo(f"  {category}: {n}")


if __name__ == "__main__":
    cli()
