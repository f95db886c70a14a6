"""CLI interface for cmsfixup."""

from pathlib import Path
from typing import Annotated, NoReturn

import typer
from dotenv import find_dotenv, load_dotenv

from cmsfixup import __version__
from cmsfixup.errors import EnvironmentProblem, StoreError
from cmsfixup.fixup.categories import (
    ALPHA_FIELD,
    DEFAULT_CONTENT_TYPE,
    SUBJECT_FIELD,
    CategorySource,
    assign_categories_from_csv,
)
from cmsfixup.fixup.link_fix import fix_links
from cmsfixup.fixup.permanence import (
    DEFAULT_PERMANENCE_TERM,
    DEFAULT_PERMANENCE_VOCABULARY,
    fix_permanence,
)
from cmsfixup.fixup.report import BatchReport, log_run_configuration
from cmsfixup.fixup.sections import (
    DEFAULT_RULES,
    DEFAULT_SECTION,
    SECTION_VOCABULARY,
    SectionRule,
    assign_sections,
)
from cmsfixup.logging_setup import setup_logging
from cmsfixup.model.options import DEFAULT_SITE_HOST, RunOptions
from cmsfixup.store.json_store import JsonRecordStore
from cmsfixup.ui.summary import render_summary

STORE_ENVVAR = "CMSFIXUP_STORE"
SITE_HOST_ENVVAR = "CMSFIXUP_SITE_HOST"

app = typer.Typer(
    name="cmsfixup",
    help="Batch maintenance for content-management records.",
    no_args_is_help=True,
)

StoreOpt = Annotated[
    Path | None,
    typer.Option(
        "--store",
        envvar=STORE_ENVVAR,
        help=f"Path to the JSON record-store snapshot (env: {STORE_ENVVAR})",
    ),
]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Print debug output")]
DryRunOpt = Annotated[
    bool, typer.Option("--dry-run", "-n", help="Report intended changes without writing")
]
MaxCountOpt = Annotated[
    int | None,
    typer.Option("--max-count", "-m", help="Visit at most this many records with --all"),
]
AllOpt = Annotated[bool, typer.Option("--all", "-a", help="Process every record")]
PathsOpt = Annotated[
    list[str] | None,
    typer.Option("--path", "-p", help="Path alias or node/<nid> to process (repeatable)"),
]
SiteHostOpt = Annotated[
    str,
    typer.Option(
        "--site-host",
        envvar=SITE_HOST_ENVVAR,
        help=f"Hostname whose absolute links are made local (env: {SITE_HOST_ENVVAR})",
    ),
]


def _usage_error(ctx: typer.Context, message: str) -> NoReturn:
    typer.echo(message)
    typer.echo(ctx.get_usage())
    raise typer.Exit(1)


def _fail(exc: Exception) -> NoReturn:
    typer.echo(f"Error: {exc}")
    raise typer.Exit(1) from exc


def _run_options(
    ctx: typer.Context,
    *,
    verbose: bool,
    dry_run: bool,
    max_count: int | None = None,
    site_host: str = DEFAULT_SITE_HOST,
) -> RunOptions:
    try:
        options = RunOptions.from_cli(
            verbose=verbose, dry_run=dry_run, max_count=max_count, site_host=site_host
        )
    except ValueError as exc:
        _usage_error(ctx, f"Error: {exc}")
    setup_logging(options.verbose)
    log_run_configuration(options)
    return options


def _open_store(store: Path | None) -> JsonRecordStore:
    if store is None:
        typer.echo(f"Error: no record store given (use --store or {STORE_ENVVAR})")
        raise typer.Exit(1)
    try:
        return JsonRecordStore.open(store)
    except StoreError as exc:
        _fail(exc)


def _finish(report: BatchReport) -> None:
    render_summary(report)
    if not report.ok:
        raise typer.Exit(1)


@app.command()
def links(
    ctx: typer.Context,
    store: StoreOpt = None,
    site_host: SiteHostOpt = DEFAULT_SITE_HOST,
    all_records: AllOpt = False,
    paths: PathsOpt = None,
    verbose: VerboseOpt = False,
    dry_run: DryRunOpt = False,
    max_count: MaxCountOpt = None,
) -> None:
    """
    Make absolute links to the site local and drop the trailing .html.

    Body and sidebar text of each selected record are checked. Records with at
    least one rewritten link are saved as a new revision.

    Examples:

        # Every record, report only
        cmsfixup links --store site.json --all --dry-run

        # Two pages by alias
        cmsfixup links --store site.json -p /about/index.html -p node/44
    """
    if not all_records and not paths:
        _usage_error(ctx, "Nothing to do.")
    options = _run_options(
        ctx, verbose=verbose, dry_run=dry_run, max_count=max_count, site_host=site_host
    )
    record_store = _open_store(store)

    report = BatchReport.for_run("Link fix", options)
    try:
        fix_links(record_store, options, report, all_records=all_records, aliases=paths or [])
    except EnvironmentProblem as exc:
        _fail(exc)
    _finish(report)


@app.command()
def permanence(
    ctx: typer.Context,
    store: StoreOpt = None,
    site_host: SiteHostOpt = DEFAULT_SITE_HOST,
    all_records: AllOpt = False,
    paths: PathsOpt = None,
    verbose: VerboseOpt = False,
    dry_run: DryRunOpt = False,
    max_count: MaxCountOpt = None,
    term: Annotated[
        str, typer.Option("--term", help="Permanence term given to records without one")
    ] = DEFAULT_PERMANENCE_TERM,
    vocabulary: Annotated[
        str, typer.Option("--vocabulary", help="Vocabulary of the permanence term")
    ] = DEFAULT_PERMANENCE_VOCABULARY,
) -> None:
    """Set a missing permanence value, fix sidebar links, and publish the record."""
    if not all_records and not paths:
        _usage_error(ctx, "Nothing to do.")
    options = _run_options(
        ctx, verbose=verbose, dry_run=dry_run, max_count=max_count, site_host=site_host
    )
    record_store = _open_store(store)

    report = BatchReport.for_run("Permanence fix", options)
    try:
        fix_permanence(
            record_store,
            options,
            report,
            all_records=all_records,
            aliases=paths or [],
            term=term,
            vocabulary=vocabulary,
        )
    except EnvironmentProblem as exc:
        _fail(exc)
    _finish(report)


@app.command()
def factsheets(
    ctx: typer.Context,
    store: StoreOpt = None,
    alpha: Annotated[
        Path | None,
        typer.Option("--alpha", "-a", help="CSV mapping factsheet paths to alphabetical categories"),
    ] = None,
    subject: Annotated[
        Path | None,
        typer.Option("--subject", "-s", help="CSV mapping factsheet paths to subject categories"),
    ] = None,
    content_type: Annotated[
        str, typer.Option("--content-type", help="Content type every path must resolve to")
    ] = DEFAULT_CONTENT_TYPE,
    verbose: VerboseOpt = False,
    dry_run: DryRunOpt = False,
) -> None:
    """
    Assign alphabetical and subject categories to factsheets from two CSV files.

    Each CSV needs 'Factsheet' and 'Category' columns. Every row is checked
    first; if any path or category does not resolve, all problems are reported
    and nothing is written.
    """
    if alpha is None or subject is None:
        _usage_error(ctx, "Both --alpha CSV and --subject CSV are required")
    options = _run_options(ctx, verbose=verbose, dry_run=dry_run)
    record_store = _open_store(store)

    sources = [CategorySource(alpha, ALPHA_FIELD), CategorySource(subject, SUBJECT_FIELD)]
    report = BatchReport.for_run("Factsheet categories", options)
    try:
        assign_categories_from_csv(record_store, sources, options, report, content_type)
    except EnvironmentProblem as exc:
        _fail(exc)
    _finish(report)


@app.command("assign-sections")
def assign_sections_command(
    ctx: typer.Context,
    store: StoreOpt = None,
    default_section: Annotated[
        str, typer.Option("--default-section", help="Section given to records no rule matches")
    ] = DEFAULT_SECTION,
    rules: Annotated[
        list[str] | None,
        typer.Option(
            "--rule",
            help=f"PREFIX=SECTION: records whose alias starts with PREFIX get SECTION "
            f"(repeatable; default: {', '.join(DEFAULT_RULES)})",
        ),
    ] = None,
    vocabulary: Annotated[
        str, typer.Option("--vocabulary", help="Vocabulary holding the section terms")
    ] = SECTION_VOCABULARY,
    verbose: VerboseOpt = False,
    dry_run: DryRunOpt = False,
    max_count: MaxCountOpt = None,
) -> None:
    """Give every record without an access assignment a section term."""
    try:
        parsed_rules = [SectionRule.parse(text) for text in (rules or DEFAULT_RULES)]
    except ValueError as exc:
        _usage_error(ctx, f"Error: {exc}")
    options = _run_options(ctx, verbose=verbose, dry_run=dry_run, max_count=max_count)
    record_store = _open_store(store)

    report = BatchReport.for_run("Section assignment", options)
    try:
        assign_sections(
            record_store,
            options,
            report,
            default_section=default_section,
            rules=parsed_rules,
            vocabulary=vocabulary,
        )
    except EnvironmentProblem as exc:
        _fail(exc)
    _finish(report)


@app.command()
def count(store: StoreOpt = None) -> None:
    """Count the records in the store."""
    record_store = _open_store(store)
    typer.echo(f"Found {record_store.count_records()} nodes")


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"cmsfixup version {__version__}")


def version_callback(value: bool) -> None:
    """Version callback for --version flag."""
    if value:
        typer.echo(f"cmsfixup version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """
    cmsfixup - batch maintenance for content-management records.

    Commands:
    - links: make local .html links extension-less and host-relative
    - permanence: set missing permanence values and publish
    - factsheets: assign categories from CSV files (all-or-nothing)
    - assign-sections: give unassigned records a section
    - count: count records

    Settings may also come from CMSFIXUP_STORE / CMSFIXUP_SITE_HOST or a .env file.
    """
    load_dotenv(find_dotenv(usecwd=True), override=False)


if __name__ == "__main__":  # pragma: no cover - executed only via `python -m`
    app()
