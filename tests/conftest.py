"""Pytest configuration for releasefetch tests.

Provides fixtures that keep the host environment out of the tests: GitHub
token and GHES variables are removed for every test, and providers get a
recording asset filter instead of one that downloads.
"""

import io
from unittest.mock import MagicMock
from types import SimpleNamespace

import pytest

from releasefetch import constants
from releasefetch.assets import FilteredAsset, OutFile


@pytest.fixture(autouse=True)
def clean_github_env(monkeypatch):
    """Remove GitHub credentials and GHES endpoints from the environment."""
    for var in (
        constants.GITHUB_AUTH_TOKEN_ENV,
        constants.GITHUB_TOKEN_ENV,
        constants.GHES_BASE_URL_ENV,
        constants.GHES_UPLOAD_URL_ENV,
        constants.GHES_AUTH_TOKEN_ENV,
    ):
        monkeypatch.delenv(var, raising=False)


class RecordingFilter:
    """Asset filter double remembering what the provider handed over."""

    payload = b'binary-content'

    def __init__(self, opts):
        self.opts = opts
        self.repo_name = None
        self.candidates = None
        self.processed = None

    def filter_assets(self, repo_name, candidates):
        self.repo_name = repo_name
        self.candidates = list(candidates)
        chosen = self.candidates[0]
        return FilteredAsset(name=chosen.name, url=chosen.url)

    def process_url(self, asset):
        self.processed = asset
        return OutFile(
            source=io.BytesIO(self.payload),
            name=asset.name,
            package_path=f"/opt/bin/{asset.name or 'unnamed'}",
        )


@pytest.fixture
def recording_filters():
    """Filter factory collecting every filter a provider creates."""
    created = []

    def factory(opts):
        f = RecordingFilter(opts)
        created.append(f)
        return f

    factory.created = created
    return factory


def make_asset(name):
    return SimpleNamespace(
        name=name,
        url=f"https://api.github.com/repos/owner/repo/releases/assets/{name}",
        browser_download_url=f"https://github.com/owner/repo/releases/download/v1.2.3/{name}",
    )


def make_release(tag='v1.2.3', names=('tool.tar.gz', 'tool-linux', 'tool-darwin')):
    return SimpleNamespace(
        tag_name=tag,
        html_url=f"https://github.com/owner/repo/releases/tag/{tag}",
        assets=[make_asset(n) for n in names],
    )


@pytest.fixture
def release_factory():
    return make_release


@pytest.fixture
def github_client(release_factory):
    """PyGithub client double whose repository has one release."""
    client = MagicMock()
    repo = client.get_repo.return_value
    repo.get_latest_release.return_value = release_factory()
    repo.get_release.side_effect = lambda tag: release_factory(tag=tag)
    return client
