"""Command line entry point: run the server, or export/import a backup with a token."""

import sys
from pathlib import Path

import click
import uvicorn

from spotbackup.backup import (
    OriginRegistry,
    build_collection,
    execute_plan,
    load_backup,
    load_origins,
    plan_import,
    save_backup,
    save_origins,
    summarize_plan,
)
from spotbackup.config import load_config
from spotbackup.core import (
    ConfigurationError,
    MalformedImportError,
    SpotBackupError,
    configure_logging,
    log_error,
    log_info,
)
from spotbackup.spotify import SpotifyClient


def _load_config_or_exit():
    try:
        return load_config()
    except ConfigurationError as e:
        log_error(f"Invalid configuration: {e}")
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Back up and restore a Spotify library."""
    configure_logging()
    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind.")
def serve(host: str) -> None:
    """Start the HTTP server on PORT."""
    # Imported here so CLI-only commands do not build the app
    from spotbackup.api import create_app

    config = _load_config_or_exit()
    app = create_app(config)
    uvicorn.run(app, host=host, port=config.port)


@cli.command("export")
@click.option("--token", envvar="SPOTIFY_TOKEN", required=True, help="Spotify access token.")
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Backup file or directory (default: spotify_backup_<date>.json).",
)
def export_command(token: str, output: Path | None) -> None:
    """Write the account's playlists and saved tracks to a backup file."""
    config = _load_config_or_exit()
    client = SpotifyClient(token, slowdown_ms=config.slowdown_export)
    try:
        collection = build_collection(client)
    except SpotBackupError as e:
        log_error(str(e))
        sys.exit(1)

    save_backup(collection, output)


@cli.command("import")
@click.argument("backup_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--token", envvar="SPOTIFY_TOKEN", required=True, help="Spotify access token.")
@click.option("--dry-run", is_flag=True, help="Only print the import plan.")
@click.option(
    "--origins",
    envvar="SPOTBACKUP_ORIGINS",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file remembering playlists created by earlier imports.",
)
def import_command(backup_file: Path, token: str, dry_run: bool, origins: Path | None) -> None:
    """
    Add whatever the account is missing from BACKUP_FILE.

    With --origins, playlists created by earlier runs are matched again even
    when the backup holds several playlists with the same name.
    """
    config = _load_config_or_exit()
    try:
        source = load_backup(backup_file)
    except MalformedImportError as e:
        log_error(f"Invalid backup file: {e}")
        sys.exit(1)

    registry = load_origins(origins) if origins else OriginRegistry()
    client = SpotifyClient(token, slowdown_ms=config.slowdown_import)
    try:
        target = build_collection(client, origin_registry=registry)
        actions = plan_import(target, source)
        log_info(f"Plan: {summarize_plan(actions)}")
        for action in actions:
            log_info(f"  - {action.label}")
        if dry_run:
            return
        execute_plan(client, actions, origin_registry=registry)
    except SpotBackupError as e:
        log_error(str(e))
        sys.exit(1)
    finally:
        if origins and not dry_run:
            save_origins(registry, origins)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
