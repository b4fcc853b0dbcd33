"""Command line interface."""

import asyncio
import logging
from pathlib import Path

import typer

from breadscan.aggregation import PruneOptions
from breadscan.client import BreadScanClient
from breadscan.config import get_settings
from breadscan.core.exceptions import BreadScanError
from breadscan.core.logging import configure_logging
from breadscan.core.types import Ecosystem

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    help="Find the upstream repositories of your dependencies and build a weighted donation list.",
)


async def _run(
    *,
    projects: list[Path],
    debian: bool,
    arch: bool,
    from_remote: bool,
    from_files: list[Path],
    to_manifest: bool,
    to_files: list[Path],
    to_remote: bool,
    prune: PruneOptions,
    clear_cache: bool = False,
) -> bool:
    async with BreadScanClient(get_settings()) as client:
        # Remote endpoints are checked first so a missing token fails before any scanning
        sources = [client.remote_source()] if from_remote else []
        destinations = [client.remote_destination()] if to_remote else []

        sources.extend(client.file_source(path) for path in from_files)
        sources.extend(client.project_source(path) for path in projects)
        if debian:
            sources.append(client.system_source(Ecosystem.DEBIAN))
        if arch:
            sources.append(client.system_source(Ecosystem.ARCH))
        if not sources:
            sources.append(client.project_source(Path.cwd()))

        if to_manifest:
            destinations.append(client.manifest_destination(Path.cwd()))
        destinations.extend(client.file_destination(path) for path in to_files)
        if not destinations:
            destinations.append(client.stdout_destination())

        if clear_cache:
            await client.clear_cache()

        report = await client.run(sources, destinations, prune)
        return report.complete


@app.command()
def scan(
    projects: list[Path] = typer.Option(
        [],
        "--project",
        "-p",
        help="Project directory to scan (repeatable). Defaults to the current directory when no source is given.",
    ),
    debian: bool = typer.Option(False, "--debian", help="Scan manually installed Debian packages"),
    arch: bool = typer.Option(False, "--arch", help="Scan explicitly installed Arch packages"),
    from_remote: bool = typer.Option(False, "--from-remote", help="Start from the remote account's weights"),
    from_files: list[Path] = typer.Option(
        [],
        "--from-file",
        help="Start from a previously saved weights file (repeatable)",
    ),
    to_manifest: bool = typer.Option(False, "--to-manifest", help="Write to .bread.yml in the current directory"),
    to_files: list[Path] = typer.Option([], "--to-file", help="Write to a weights file (repeatable)"),
    to_remote: bool = typer.Option(False, "--to-remote", help="Update the remote account"),
    prune_accounts: bool = typer.Option(
        False, "--prune-accounts", help="Remove destination accounts not found in this run"
    ),
    prune_projects: bool = typer.Option(
        False, "--prune-projects", help="Remove destination projects not found in this run"
    ),
    prune_on_partial: bool = typer.Option(
        False, "--prune-on-partial", help="Prune even if some lookups failed"
    ),
    clear_cache: bool = typer.Option(
        False, "--clear-cache", help="Empty the lookup cache before scanning"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose"),
) -> None:
    """Scan sources, merge their weights and write them to destinations (stdout by default)."""
    settings = get_settings()
    configure_logging(level=logging.DEBUG if verbose else settings.log_level.upper())

    try:
        complete = asyncio.run(
            _run(
                projects=projects,
                debian=debian,
                arch=arch,
                from_remote=from_remote,
                from_files=from_files,
                to_manifest=to_manifest,
                to_files=to_files,
                to_remote=to_remote,
                prune=PruneOptions(
                    accounts=prune_accounts,
                    projects=prune_projects,
                    allow_partial=prune_on_partial,
                ),
                clear_cache=clear_cache,
            )
        )
    except BreadScanError as e:
        logger.error(f"Fatal error encountered while scanning dependencies: {e.message}")
        if verbose:
            raise
        raise typer.Exit(code=1)

    if not complete:
        logger.warning("Some dependencies could not be resolved, see the warnings above")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
