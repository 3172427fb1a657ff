"""GitHub provider implementation using PyGithub for GitHub API interactions."""

from typing import Iterable
from urllib.parse import urlparse

from github import Auth, Github, UnknownObjectException
from github.GitRelease import GitRelease
from github.GitReleaseAsset import GitReleaseAsset

from ..assets import Asset, Filter, FilterFactory, FilterOpts
from ..config import GitHubSettings
from ..errors import NoReleasesError, ProviderConfigError
from ..logger import log
from .base import FetchOpts, File, Provider


def parse_github_url(url: str) -> tuple[str, str, str, str]:
    """Split a GitHub URL into owner, repo, tag and asset name.

    Supported formats:
    - https://github.com/owner/repo
    - https://github.com/owner/repo/releases/tag/v1.2.3
    - https://github.com/owner/repo/releases/download/v1.2.3
    - https://github.com/owner/repo/releases/download/v1.2.3/asset-name

    Tag and asset are empty strings when the URL doesn't carry them.

    Raises:
        ProviderConfigError: If owner and repo can't be found
    """
    segments = urlparse(url).path.split('/')
    if len(segments) < 3:
        raise ProviderConfigError(
            f"error parsing GitHub URL {url}, can't find owner and repo"
        )

    owner, repo = segments[1], segments[2]

    tag = ''
    asset = ''
    if len(segments) > 5 and segments[3] == 'releases':
        tag = segments[5]
        if len(segments) > 6 and segments[4] == 'download':
            asset = segments[6]

    return owner, repo, tag, asset


def get_candidates(
    release_assets: Iterable[GitReleaseAsset], user_asset: str = ''
) -> list[Asset]:
    """Build the assets to filter from.

    If ``user_asset`` names one of the release assets, that asset is the only
    candidate. Otherwise every asset is a candidate and a missing
    ``user_asset`` is only logged.
    """
    candidates = []
    for a in release_assets:
        if user_asset and a.name == user_asset:
            return [Asset(name=a.name, url=a.url)]
        candidates.append(Asset(name=a.name, url=a.url))

    if user_asset:
        log.warning(f"asset {user_asset} not found in release")

    return candidates


def enterprise_api_url(base_url: str) -> str:
    """Return the REST root of a GitHub Enterprise Server.

    A bare host like ``https://ghes.example.com`` gets ``/api/v3`` appended,
    URLs already ending in ``/api/v3`` or pointing to an ``api.`` host are
    kept. Trailing slashes are dropped, PyGithub joins request paths with one.
    """
    url = base_url.rstrip('/')
    parsed = urlparse(url)
    if parsed.path.endswith('/api/v3') or (parsed.hostname or '').startswith('api.'):
        return url
    return f'{url}/api/v3'


def _build_client(settings: GitHubSettings) -> Github:
    if settings.enterprise:
        # PyGithub parses the base url at construction, a malformed port raises
        try:
            return Github(
                base_url=enterprise_api_url(settings.ghes_base_url),
                auth=Auth.Token(settings.ghes_auth_token),
            )
        except ValueError as e:
            raise ProviderConfigError(f"error initializing GHES client: {e}") from e

    if settings.token:
        return Github(auth=Auth.Token(settings.token))
    return Github()


class GitHubProvider(Provider):
    """Fetches release assets from GitHub or GitHub Enterprise Server.

    Owner, repo, tag and asset are parsed once from ``url``. Without a tag the
    latest release is used, without an asset name every release asset is a
    candidate for the filter.

    Args:
        url: GitHub repository, release or download URL
        settings: Token and GHES endpoints, anonymous public API if omitted
        client: PyGithub client overriding the one built from ``settings``
        filter_factory: Builds the asset filter used for selection and download
    """

    def __init__(
        self,
        url: str,
        settings: GitHubSettings | None = None,
        client: Github | None = None,
        filter_factory: FilterFactory = Filter,
    ):
        self.url = url
        self.owner, self.repo, self.tag, self.asset = parse_github_url(url)

        settings = settings or GitHubSettings()
        # Downloads authenticate with the personal token, also in GHES mode
        self.token = settings.token or ''
        if settings.enterprise:
            log.debug(f"Using GitHub Enterprise Server at {settings.ghes_base_url}")

        self._client = client or _build_client(settings)
        self._filter_factory = filter_factory

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def _get_release(self, tag: str) -> GitRelease:
        repo = self._client.get_repo(self.full_name, lazy=True)
        if tag:
            log.info(f"Getting {tag} release for {self.full_name}")
            return repo.get_release(tag)

        log.info(f"Getting latest release for {self.full_name}")
        try:
            return repo.get_latest_release()
        except UnknownObjectException as e:
            raise NoReleasesError(
                f"repository {self.full_name} does not have releases"
            ) from e

    def fetch(self, opts: FetchOpts) -> File:
        release = self._get_release(opts.version or self.tag)

        candidates = get_candidates(release.assets, self.asset)
        f = self._filter_factory(
            FilterOpts(
                skip_scoring=opts.all,
                package_path=opts.package_path,
                skip_path_check=opts.skip_path_check,
                package_name=opts.package_name,
            )
        )

        gf = f.filter_assets(self.repo, candidates)
        gf.extra_headers = {'Accept': 'application/octet-stream'}
        if self.token:
            gf.extra_headers['Authorization'] = f'token {self.token}'

        out_file = f.process_url(gf)

        # Version is the release tag, never the asset name
        return File(
            data=out_file.source,
            name=out_file.name,
            version=release.tag_name,
            package_path=out_file.package_path,
        )

    def get_latest_version(self) -> tuple[str, str]:
        """Return the latest release tag and its html url."""
        log.debug(f"Getting latest release for {self.full_name}")
        release = self._client.get_repo(self.full_name, lazy=True).get_latest_release()
        return release.tag_name, release.html_url

    def get_id(self) -> str:
        return 'github'
