"""Provider resolving versions from a plain HTTP version-check endpoint."""

from urllib.parse import urlparse

import httpx

from .. import constants
from ..assets import FilteredAsset, FilterFactory, FilterOpts, Filter, url_to_filename
from ..errors import ProviderConfigError, ProviderError
from ..logger import log
from .base import FetchOpts, File, Provider


class GenericProvider(Provider):
    """Fetches artifacts whose download URL is a ``{version}`` template.

    The version-check URL must answer with the bare version string. Its body,
    stripped of surrounding whitespace, replaces every ``{version}`` of the
    download URL template.

    Args:
        url: Download URL template
        version_url: URL answering with the latest version
        client: httpx client, one is created per call if omitted
        filter_factory: Builds the asset filter used for downloads
    """

    def __init__(
        self,
        url: str,
        version_url: str,
        client: httpx.Client | None = None,
        filter_factory: FilterFactory = Filter,
    ):
        parsed = urlparse(version_url or '')
        if not all([parsed.scheme, parsed.netloc]):
            raise ProviderConfigError(f"invalid version_url: '{version_url}'")

        self.url = url
        self.version_url = version_url
        self._client = client
        self._filter_factory = filter_factory

    def fetch(self, opts: FetchOpts) -> File:
        version, download_url = self.get_latest_version()

        f = self._filter_factory(
            FilterOpts(
                skip_scoring=opts.all,
                package_path=opts.package_path,
                skip_path_check=opts.skip_path_check,
                package_name=opts.package_name,
            )
        )
        out_file = f.process_url(FilteredAsset(name='', url=download_url))

        # Fall back to the last url path element if the filter gave no name
        name = out_file.name or url_to_filename(download_url)

        return File(
            data=out_file.source,
            name=name,
            version=version,
            package_path=out_file.package_path,
        )

    def get_latest_version(self) -> tuple[str, str]:
        """Read the version URL and build the matching download URL.

        Returns:
            (version, download url) tuple

        Raises:
            httpx.HTTPError: If the version URL can't be read
            httpx.InvalidURL: If the substituted download URL is malformed
            ProviderError: If the version URL answered with an empty body
        """
        log.debug(f"Getting version from {self.version_url}")

        client = self._client or httpx.Client(timeout=constants.HTTP_TIMEOUT)
        try:
            response = client.get(
                self.version_url,
                headers={'User-Agent': constants.USER_AGENT},
                follow_redirects=True,
            )
            response.raise_for_status()
        finally:
            if self._client is None:
                client.close()

        version = response.text.strip()
        if not version:
            raise ProviderError(f"version url {self.version_url} returned an empty version")

        download_url = self.url.replace(constants.VERSION_PLACEHOLDER, version)
        httpx.URL(download_url)  # raises httpx.InvalidURL

        return version, download_url

    def get_id(self) -> str:
        return 'generic'
