"""Command-line interface argument parsing using Typer."""

import logging
import os
import shutil
from pathlib import Path
from typing import Annotated

import github
import httpx
import typer

from .config import Config, get_default_config_path
from .errors import ProviderError
from .logger import log
from .providers import FetchOpts, File, new_provider

app = typer.Typer(
    name="releasefetch",
    help="Resolve and download the latest release of a package",
    add_completion=True,
)

UrlArgument = Annotated[
    str, typer.Argument(help="GitHub repository URL or download URL template")
]
VersionUrlOption = Annotated[
    str | None,
    typer.Option(
        "--version-url",
        help="URL answering with the latest version, its value replaces {version} in URL",
    ),
]
ProviderOption = Annotated[
    str | None,
    typer.Option("--provider", "-p", help="Force a provider: github or generic"),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to config file (default: ./releasefetch.yaml, then ~/releasefetch.yaml)",
    ),
]
TokenOption = Annotated[
    str | None,
    typer.Option(
        "--gh-token",
        help="GitHub token (overrides env vars GITHUB_AUTH_TOKEN/GITHUB_TOKEN and config)",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose output"),
]


def _make_provider(url, version_url, provider, config_path, gh_token):
    config = Config(config_path or get_default_config_path())
    log.debug(f"Config: {config}")
    settings = config.github_settings(token=gh_token)
    log.debug(f"GH Token: {'provided' if settings.token else 'not provided'}")
    return new_provider(url, version_url=version_url, provider=provider, settings=settings)


def save_file(file: File) -> Path:
    """Write a fetched file to its package path and make it executable."""
    path = Path(file.package_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'wb') as f:
        shutil.copyfileobj(file.data, f)
    os.chmod(path, 0o755)
    return path


@app.command()
def latest(
    url: UrlArgument,
    version_url: VersionUrlOption = None,
    provider: ProviderOption = None,
    config: ConfigOption = None,
    gh_token: TokenOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print the latest available version and where to get it."""
    if verbose:
        log.setLevel(logging.DEBUG)

    try:
        p = _make_provider(url, version_url, provider, config, gh_token)
        version, version_link = p.get_latest_version()
    except (ProviderError, ValueError, httpx.HTTPError, github.GithubException) as e:
        log.error(f"Couldn't get latest version of '{url}': {e}")
        raise typer.Exit(code=1) from e

    typer.echo(f"{version} {version_link}")


@app.command()
def fetch(
    url: UrlArgument,
    version_url: VersionUrlOption = None,
    provider: ProviderOption = None,
    version: Annotated[
        str | None,
        typer.Option("--version", help="Release tag or version to fetch instead of the latest"),
    ] = None,
    all_assets: Annotated[
        bool,
        typer.Option("--all", "-a", help="Disable asset scoring, consider every asset"),
    ] = False,
    path: Annotated[
        str | None,
        typer.Option("--path", help="Destination file or directory (default: current directory)"),
    ] = None,
    skip_path_check: Annotated[
        bool,
        typer.Option("--skip-path-check", help="Don't check that the destination directory exists"),
    ] = False,
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Asset to pick and file name to save it as"),
    ] = None,
    config: ConfigOption = None,
    gh_token: TokenOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Download the latest (or the given) release of a package."""
    if verbose:
        log.setLevel(logging.DEBUG)

    opts = FetchOpts(
        all=all_assets,
        package_path=path,
        skip_path_check=skip_path_check,
        package_name=name,
        version=version,
    )
    log.debug(f"Fetch options: {opts}")

    try:
        p = _make_provider(url, version_url, provider, config, gh_token)
        file = p.fetch(opts)
        saved = save_file(file)
    except (ProviderError, ValueError, httpx.HTTPError, github.GithubException) as e:
        log.error(f"Couldn't fetch '{url}': {e}")
        raise typer.Exit(code=1) from e

    log.info(f"Saved {file.name} {file.version} to '{saved}'")
    typer.echo(f"{file.name} {file.version} {saved}")


if __name__ == "__main__":
    app()
