"""assets-manager CLI.

Commands:
    resolve  - Show which file and MIME type a request path resolves to
    warm     - Copy assets into the web directory ahead of any request
    serve    - Serve assets over HTTP (uvicorn)
"""

import logging
import sys
from typing import Optional, Tuple

import click

from . import __version__
from .config import AssetsConfig, ConfigLoader
from .faults import Fault
from .manager import AssetsManager

_CHECK = "✓"
_CROSS = "✗"


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    """Print error message in red to stderr."""
    click.echo(click.style(message, fg="red"), err=True)


def info(message: str) -> None:
    """Print info message in cyan."""
    click.echo(click.style(message, fg="cyan"))


def _build_manager(ctx: click.Context, paths: Tuple[str, ...], web_dir: Optional[str]) -> AssetsManager:
    """Merge command-line options over the loaded configuration."""
    config: AssetsConfig = ctx.obj["config"]
    options = config.to_dict()
    if paths:
        options["paths"] = list(paths)
    if web_dir:
        options["web_dir"] = web_dir
    return AssetsManager(options)


_path_option = click.option(
    "--path", "-p", "paths", multiple=True, type=click.Path(file_okay=False),
    help="Directory to search for assets (repeatable, searched in order)",
)
_web_dir_option = click.option(
    "--web-dir", type=click.Path(file_okay=False), default=None,
    help="Public directory to copy served assets into",
)


@click.group()
@click.version_option(version=__version__, prog_name="assets-manager")
@click.option("--config", "-c", "config_files", multiple=True, type=click.Path(dir_okay=False),
              help="YAML or JSON config file (repeatable)")
@click.option("--env-file", type=click.Path(dir_okay=False), default=None, help=".env file to load")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output")
@click.pass_context
def cli(ctx, config_files: Tuple[str, ...], env_file: Optional[str], verbose: bool, quiet: bool):
    """Serve assets from directories outside the web root.

    \b
    Quick start:
      assets-manager resolve /css/app.css -p vendor/assets
      assets-manager serve -p vendor/assets --web-dir public
    """
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    try:
        loader = ConfigLoader.load(paths=list(config_files), env_file=env_file)
    except Fault as e:
        error(f"{_CROSS} {e.message}")
        sys.exit(2)
    ctx.obj["config"] = loader.get_assets_config()


@cli.command("resolve")
@click.argument("uri_path")
@_path_option
@click.pass_context
def resolve(ctx, uri_path: str, paths: Tuple[str, ...]):
    """
    Show the file and MIME type URI_PATH resolves to.

    Examples:
      assets-manager resolve /js/app.js -p assets -p vendor
    """
    manager = _build_manager(ctx, paths, None)
    file_path = manager.find_file(uri_path)
    if file_path is None:
        error(f"{_CROSS} {uri_path} not found")
        sys.exit(1)

    click.echo(f"{file_path}\t{manager.detect_mime_type(file_path)}")


@cli.command("warm")
@click.argument("uri_paths", nargs=-1, required=True)
@_path_option
@_web_dir_option
@click.pass_context
def warm(ctx, uri_paths: Tuple[str, ...], paths: Tuple[str, ...], web_dir: Optional[str]):
    """
    Copy assets into the web directory before they are requested.

    Examples:
      assets-manager warm /css/app.css /js/app.js -p assets --web-dir public
    """
    manager = _build_manager(ctx, paths, web_dir)
    if manager.web_dir is None:
        error(f"{_CROSS} No usable web directory configured")
        sys.exit(1)

    failed = 0
    for uri_path in uri_paths:
        file_path = manager.find_file(uri_path)
        if file_path is None:
            error(f"{_CROSS} {uri_path} not found")
            failed += 1
            continue

        try:
            contents = file_path.read_bytes()
        except OSError as e:
            error(f"{_CROSS} {uri_path}: {e}")
            failed += 1
            continue

        fault = manager.write_to_web_dir(uri_path, contents)
        if fault is not None:
            error(f"{_CROSS} {uri_path}: {fault.message}")
            failed += 1
        elif not ctx.obj["quiet"]:
            success(f"{_CHECK} {uri_path}")

    if failed:
        sys.exit(1)


@cli.command("serve")
@_path_option
@_web_dir_option
@click.option("--host", type=str, default="127.0.0.1", help="Server host")
@click.option("--port", type=int, default=8000, help="Server port")
@click.pass_context
def serve(ctx, paths: Tuple[str, ...], web_dir: Optional[str], host: str, port: int):
    """
    Serve assets over HTTP; misses answer 404.

    Examples:
      assets-manager serve -p assets --web-dir public --port 8080
    """
    import uvicorn

    from .asgi import create_app

    manager = _build_manager(ctx, paths, web_dir)
    if not ctx.obj["quiet"]:
        info(f"Serving assets from {', '.join(str(p) for p in manager.paths) or 'nothing'} on {host}:{port}")

    try:
        uvicorn.run(
            create_app(manager),
            host=host,
            port=port,
            lifespan="off",
            log_level="debug" if ctx.obj["verbose"] else "info",
        )
    except KeyboardInterrupt:
        if not ctx.obj["quiet"]:
            info(f"{_CHECK} Server stopped")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
