"""
Command-line interface for skillsync.
"""

import click
import json
import sys
from typing import Optional, Dict, Any
from pathlib import Path

import yaml

from . import __version__
from .config import get_config_manager
from .error_handling import SkillSyncError
from .logging import setup_logging, LoggerConfig
from .models import InstallResult, UpdateResult
from .orchestrator import OrchestrationManager

VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--config', '-c',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML configuration file'
)
@click.option(
    '--verbose', '-v',
    count=True,
    help='Increase verbosity (use -v or -vv)'
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: int) -> None:
    """
    skillsync - install and update your skills directory from your GitHub fork.

    Entries under skills/ whose names start with "private-" are never
    committed and survive every install and update.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


def _load(ctx: click.Context):
    """Load configuration and configure logging for a command."""
    verbose = ctx.obj.get('verbose', 0)
    config_manager = get_config_manager(ctx.obj.get('config_file'))
    if verbose:
        config_manager.set_overrides({"logging.level": VERBOSITY_LEVELS[min(verbose, 2)]})
    app_config = config_manager.get_config()

    setup_logging(LoggerConfig.from_app_config(app_config.logging), force=True)
    return config_manager, app_config


def _fail(ctx: click.Context, error: Exception) -> None:
    """Print a diagnosis plus remediation and exit non-zero."""
    if isinstance(error, SkillSyncError):
        click.echo(f"Error: {error.message}", err=True)
        if error.remediation:
            click.echo("", err=True)
            click.echo(error.remediation, err=True)
        if ctx.obj.get('verbose', 0) > 1 and error.cause:
            click.echo(f"\nCaused by: {error.cause}", err=True)
    else:
        click.echo(f"Unexpected error: {error}", err=True)
        if ctx.obj.get('verbose', 0) > 1:
            import traceback
            traceback.print_exc()
    sys.exit(1)


@cli.command()
@click.pass_context
def install(ctx: click.Context) -> None:
    """
    Install the skills directory (or update it if already installed).

    Forks the canonical repository into your GitHub account when needed,
    clones your fork, registers the canonical repository as "upstream" and
    restores any private skills.
    """
    try:
        _, app_config = _load(ctx)
        click.echo("Installing skills...")
        result = OrchestrationManager(app_config).install()
        display_install_result(result)
    except Exception as e:
        _fail(ctx, e)


@cli.command()
@click.option(
    '--upstream', '-u',
    is_flag=True,
    default=False,
    help='Rebase onto the canonical repository instead of your fork'
)
@click.pass_context
def update(ctx: click.Context, upstream: bool) -> None:
    """
    Pull the latest skills into an installed directory.

    By default rebases onto your fork (origin). With --upstream, rebases onto
    the canonical repository; pushing the result to your fork is up to you.
    """
    try:
        _, app_config = _load(ctx)
        click.echo("Pulling latest skills...")
        result = OrchestrationManager(app_config).update(upstream=upstream)
        display_update_result(result)
    except Exception as e:
        _fail(ctx, e)


@cli.command()
@click.option(
    '--format', '-f', 'output_format',
    type=click.Choice(['table', 'json'], case_sensitive=False),
    default='table',
    help='Output format'
)
@click.pass_context
def status(ctx: click.Context, output_format: str) -> None:
    """
    Show the managed directory, its remotes, private skills and backups.
    """
    try:
        _, app_config = _load(ctx)
        result = OrchestrationManager(app_config).status()
        if output_format == 'json':
            click.echo(json.dumps(result, indent=2, default=str))
        else:
            display_status(result)
    except Exception as e:
        _fail(ctx, e)


@cli.command()
@click.option(
    '--format', '-f', 'output_format',
    type=click.Choice(['table', 'json', 'yaml'], case_sensitive=False),
    default='table',
    help='Output format for configuration display'
)
@click.option(
    '--save', 'save_path',
    type=click.Path(dir_okay=False, path_type=Path),
    help='Write the effective configuration to a YAML file (the access token is left out)'
)
@click.pass_context
def config(ctx: click.Context, output_format: str, save_path: Optional[Path]) -> None:
    """
    Display current configuration settings.

    Shows the effective configuration: defaults, file settings, environment
    variables and command-line overrides such as -v. The access token is
    masked, and never written by --save.
    """
    try:
        config_manager, _ = _load(ctx)
        if save_path:
            config_manager.save_config(save_path)
            click.echo(f"Configuration saved to {save_path}")
            return

        config_dict = config_manager.to_dict(redact=True)

        if output_format == 'json':
            click.echo(json.dumps(config_dict, indent=2, default=str))
        elif output_format == 'yaml':
            click.echo(yaml.dump(config_dict, default_flow_style=False))
        else:
            display_config_table(config_dict)
    except Exception as e:
        _fail(ctx, e)


def display_restore(restored, skipped) -> None:
    for name in restored:
        click.echo(f"  Restored: {name}")
    for name in skipped:
        click.echo(f"  Kept existing: {name}")


def display_update_result(result: UpdateResult) -> None:
    """Display the outcome of an update."""
    if result.stashed:
        click.echo("Local edits were set aside and reapplied.")
    if result.changed:
        click.echo(f"Updated {(result.old_head or 'empty')[:8]} -> {(result.new_head or 'empty')[:8]}")
    else:
        click.echo("Already up to date.")
    if result.snapshot:
        click.echo(f"Private skills backed up to {result.snapshot}")
    display_restore(result.restore.restored, result.restore.skipped)
    for message in result.messages:
        click.echo(message)
    click.echo("Done! Skills updated.")


def display_install_result(result: InstallResult) -> None:
    """Display the outcome of an install."""
    if result.github_user:
        click.echo(f"GitHub user: {result.github_user}")
    if result.origin_url:
        click.echo(f"Using repo: {result.origin_url}")

    if result.action == "updated" and result.update is not None:
        click.echo("Existing installation found; updated it instead.")
        if result.update.changed:
            click.echo(f"Updated {(result.update.old_head or 'empty')[:8]} -> {(result.update.new_head or 'empty')[:8]}")

    if result.snapshot:
        what = "Previous directory" if result.moved_aside else "Private skills"
        click.echo(f"{what} backed up to {result.snapshot}")
    display_restore(result.restore.restored, result.restore.skipped)
    for message in result.messages:
        click.echo(message)

    click.echo("")
    click.echo(f"Done! Skills installed to {result.path}")
    click.echo("")
    click.echo("To update later, run:")
    click.echo("  skillsync update")


def display_status(status: Dict[str, Any]) -> None:
    """Display status in table format."""
    click.echo(f"Managed directory: {status['path']}")
    if not status['exists']:
        click.echo("  (missing) run: skillsync install")
    elif not status['installed']:
        click.echo("  (not a git working copy) run: skillsync install")
    else:
        click.echo(f"  branch: {status['branch']}")
        click.echo(f"  head: {(status['head'] or 'empty')[:8]}")
        click.echo(f"  local changes: {'yes' if status['local_changes'] else 'no'}")
        click.echo("Remotes:")
        for name, url in sorted(status['remotes'].items()):
            click.echo(f"  {name}: {url}")

    click.echo(f"Private skills: {len(status['private_entries'])}")
    for name in status['private_entries']:
        click.echo(f"  - {name}")

    click.echo(f"Backups: {len(status['backups'])}")
    for backup in status['backups']:
        click.echo(f"  - {backup['path']} ({len(backup['entries'])} private entries)")


def display_config_table(config_dict: Dict[str, Any]) -> None:
    """Display configuration in table format."""
    click.echo("\nCurrent Configuration:")
    click.echo("-" * 50)

    for section_name, section_config in config_dict.items():
        click.echo(f"\n[{section_name}]")
        for key, value in section_config.items():
            click.echo(f"  {key}: {value}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
