"""CLI commands for consolenav."""

import asyncio
import sys
from pathlib import Path

import click

from consolenav.config import set_config_path


@click.group()
@click.version_option(package_name="consolenav")
@click.option(
    "-f",
    "--config-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file to use instead of app.yaml",
)
def cli(config_file):
    """consolenav - Navigation configuration manager for the operator console."""
    if config_file is not None:
        set_config_path(config_file)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level",
)
def serve(host, port, reload, workers, log_level):
    """Run the consolenav server."""
    import signal

    from hypercorn.asyncio import serve as hypercorn_serve
    from hypercorn.config import Config

    config = Config()
    config.application_path = "consolenav.asgi:create_asgi_app()"
    config.bind = [f"{host}:{port}"]
    config.workers = 1 if reload else workers
    config.loglevel = log_level.upper()
    config.include_server_header = False

    if reload:
        config.use_reloader = True
        from hypercorn.run import run
        run(config)
        return

    from consolenav.asgi import create_asgi_app

    app = create_asgi_app()
    shutdown_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_event.set)
    try:
        loop.run_until_complete(
            hypercorn_serve(app, config, shutdown_trigger=shutdown_event.wait)
        )
    finally:
        loop.close()


def _run_alembic(args: list[str]) -> None:
    """Build an Alembic Config programmatically and run the given command."""
    from alembic.config import CommandLine, Config

    package_dir = Path(__file__).parent

    alembic_ini = Path.cwd() / "alembic.ini"
    if not alembic_ini.exists():
        alembic_ini = package_dir / "alembic.ini"
        if not alembic_ini.exists():
            click.echo("Error: Could not find alembic.ini", err=True)
            sys.exit(1)

    cfg = Config(str(alembic_ini))
    cfg.set_main_option("script_location", str(package_dir / "alembic"))

    # Parse and run through CommandLine for proper subcommand dispatch
    cmd = CommandLine()
    options = cmd.parser.parse_args(args)
    if not hasattr(options, "cmd"):
        cmd.parser.error("too few arguments")
    else:
        cfg.cmd_opts = options
        fn, positional, kwarg = options.cmd
        fn(
            cfg,
            *[getattr(options, k, None) for k in positional],
            **{k: getattr(options, k, None) for k in kwarg},
        )


@cli.command(
    context_settings=dict(
        ignore_unknown_options=True,
        allow_extra_args=True,
    )
)
@click.pass_context
def db(ctx):
    """Run database migrations via Alembic.

    \b
    Examples:
        consolenav db upgrade head     # Create or update the navigation tables
        consolenav db downgrade -1     # Rollback one migration
        consolenav db current          # Show current revision
        consolenav db history          # Show migration history
    """
    args = ctx.args
    if not args:
        click.echo(ctx.get_help())
        return

    _run_alembic(args)


@cli.group()
def nav():
    """Inspect or reset the sidebar navigation."""
    pass


async def _with_session(operation):
    """Run ``operation(db_session)`` against the configured database."""
    from consolenav.asgi import create_db_config
    from consolenav.config import get_settings

    db_config = create_db_config(get_settings())
    try:
        async with db_config.get_session() as db_session:
            return await operation(db_session)
    finally:
        await db_config.get_engine().dispose()


def _echo_tree(sections, groups) -> None:
    titles = {s.key: s.display_name for s in sections}
    for key, pages in groups.items():
        collapsed = " (collapsed)" if any(s.key == key and s.collapsed_by_default for s in sections) else ""
        click.echo(f"{titles.get(key, key)} [{key}]{collapsed}")
        if not pages:
            click.echo("    (empty)")
        for page in pages:
            hidden = "" if page.visible else " (hidden)"
            click.echo(f"    {page.sort_order:>3}  {page.title} -> {page.route}{hidden}")


@nav.command()
def show():
    """Print sections and page entries in display order."""
    from consolenav.navigation.registry import registry

    async def load(db_session):
        await registry.refresh(db_session)
        return (
            await registry.list_sections(db_session),
            await registry.group_pages_by_section(db_session),
        )

    sections, groups = asyncio.run(_with_session(load))
    _echo_tree(sections, groups)


@nav.command()
@click.option("--yes", is_flag=True, help="Do not prompt for confirmation")
def reset(yes):
    """Discard all navigation customization and restore the defaults."""
    from consolenav.config import get_settings
    from consolenav.lib.exceptions import NavigationError
    from consolenav.navigation import service

    if not yes:
        click.confirm(
            "This deletes every section and page entry, visible ones included. Continue?",
            abort=True,
        )

    async def run(db_session):
        return await service.reset_to_defaults(
            db_session,
            confirm=True,
            baseline_file=get_settings().navigation.baseline_file,
        )

    try:
        sections, pages = asyncio.run(_with_session(run))
    except NavigationError as e:
        click.echo(f"Error: {e.detail}", err=True)
        sys.exit(1)

    click.echo(f"Navigation reset: {len(sections)} sections, {len(pages)} page entries.")


if __name__ == "__main__":
    cli()
