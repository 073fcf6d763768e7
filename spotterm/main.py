"""
Main CLI interface for SpotTerm

Commands:
- play (default): obtain a valid token, then run the interactive session
- login: force a full browser authorization and store the credential
- logout: delete the stored credential
- status: report what is stored locally

Startup failures (configuration or authorization) are fatal: the command
prints a diagnostic and exits with status 1. Once the session is running,
remote failures are logged and the session continues.
"""

import os
import sys
import curses
import functools

import click

from . import __version__
from .config.auth import SpotifyAuth
from .config.settings import Settings, load_settings
from .exceptions import ConfigError, SpotTermError
from .session.controller import SessionController
from .session.cover_art import CoverArtCache
from .session.terminal import CursesInput, CursesRenderer
from .spotify.client import SpotifyClient
from .utils.logger import (
    configure_from_settings,
    get_current_log_file,
    get_logger,
    reconfigure_logging_for_session,
)


logger = get_logger(__name__)


def handle_error(func):
    """
    Decorator to handle CLI errors consistently

    Known application errors print their message; anything else is logged
    with a traceback. Both exit with status 1. Ctrl+C exits with 130.

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except SpotTermError as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            _echo_log_location()
            sys.exit(1)
        except Exception as e:
            logger.exception(f"Unexpected error: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            _echo_log_location()
            sys.exit(1)
    return wrapper


def _echo_log_location() -> None:
    log_file = get_current_log_file()
    if log_file:
        click.echo(f"See {log_file} for details", err=True)


def _prepare(ctx: click.Context, require_credentials: bool = True) -> Settings:
    """
    Load settings for a command and configure logging from them

    Args:
        ctx: Click context carrying the global options
        require_credentials: Fail on an invalid configuration

    Returns:
        Loaded Settings

    Raises:
        ConfigError: If the config file is unusable or validation fails
    """
    settings = load_settings(ctx.obj.get('config'))
    configure_from_settings(settings, verbose=ctx.obj.get('verbose', False))

    if require_credentials:
        problems = settings.validate()
        if problems:
            raise ConfigError(
                "Invalid configuration: " + "; ".join(problems),
                details={'problems': problems}
            )

    logger.debug(f"Loaded {settings}")
    return settings


def _run_session(stdscr, client: SpotifyClient, settings: Settings) -> None:
    """Body of curses.wrapper: build the session around the screen and run it"""
    cover_art = CoverArtCache(
        client,
        width=settings.session.cover_art_width,
        enabled=settings.session.show_cover_art,
    )
    controller = SessionController(
        client,
        renderer=CursesRenderer(stdscr),
        input_source=CursesInput(stdscr, settings.session.input_timeout_ms),
        cover_art=cover_art,
        refresh_interval=settings.session.refresh_interval,
    )
    controller.load_initial_state()
    controller.run()


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    SpotTerm - control Spotify playback from the terminal

    Without a subcommand this starts the interactive session.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"SpotTerm v{__version__}")
        return

    ctx.obj['config'] = config
    ctx.obj['verbose'] = verbose

    if ctx.invoked_subcommand is None:
        ctx.invoke(play)


@cli.command()
@click.pass_context
@handle_error
def play(ctx):
    """
    Start the interactive session

    Refreshes the stored credential (or runs the browser authorization),
    then opens the full-screen player.
    """
    settings = _prepare(ctx)

    auth = SpotifyAuth.from_settings(settings)
    access_token = auth.get_valid_token()

    client = SpotifyClient(
        access_token,
        request_timeout=settings.network.request_timeout,
        playlist_page_size=settings.session.playlist_page_size,
    )

    # curses reads ESCDELAY at initialization
    os.environ.setdefault('ESCDELAY', '25')
    reconfigure_logging_for_session()
    try:
        curses.wrapper(_run_session, client, settings)
    finally:
        client.close()


@cli.command()
@click.pass_context
@handle_error
def login(ctx):
    """
    Authenticate with Spotify

    Always runs the browser authorization, replacing any stored credential.
    """
    settings = _prepare(ctx)
    click.echo("Starting Spotify authentication...")

    auth = SpotifyAuth.from_settings(settings)
    auth.authorize()

    click.echo(click.style("Successfully authenticated", fg='green'))
    click.echo(f"Credential stored in {settings.get_token_storage_path()}")


@cli.command()
@click.pass_context
@handle_error
def logout(ctx):
    """Remove the stored credential"""
    settings = _prepare(ctx, require_credentials=False)

    auth = SpotifyAuth.from_settings(settings)
    if auth.revoke_token():
        click.echo("Successfully logged out")
    else:
        click.echo("No stored credential to remove")


@cli.command()
@click.pass_context
@handle_error
def status(ctx):
    """Show the local authentication and configuration status"""
    settings = _prepare(ctx, require_credentials=False)

    auth = SpotifyAuth.from_settings(settings)
    record = auth.token_store.load()

    if record is None:
        click.echo("Authentication Status: Not authenticated")
        click.echo("   Run 'spotterm login' to authenticate")
    else:
        click.echo("Authentication Status: Credential stored")
        click.echo(f"   Token file: {auth.token_store.path}")
        click.echo(f"   Refresh token: {'yes' if record.refresh_token else 'no'}")

    problems = settings.validate()
    if problems:
        click.echo(f"\nFound {len(problems)} configuration issues:")
        for problem in problems:
            click.echo(f"   - {problem}")
    else:
        click.echo("\nConfiguration: OK")

    log_file = get_current_log_file()
    if log_file:
        click.echo(f"Logging: {log_file}")


if __name__ == '__main__':
    cli()
