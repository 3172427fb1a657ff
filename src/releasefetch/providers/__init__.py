"""Release providers.

This package provides providers for different source URLs:
- GenericProvider: version-check URL + download URL template, using httpx
- GitHubProvider: GitHub Releases API, using PyGithub

Usage:
    from releasefetch.providers import FetchOpts, new_provider

    provider = new_provider("https://github.com/owner/repo")
    version, url = provider.get_latest_version()
    file = provider.fetch(FetchOpts(package_path="/usr/local/bin"))
"""

from urllib.parse import urlparse

from ..config import GitHubSettings
from ..errors import NoReleasesError, ProviderConfigError, ProviderError
from ..logger import log
from .base import FetchOpts, File, Provider
from .generic import GenericProvider
from .github import GitHubProvider

PROVIDERS = ('github', 'generic')


def new_provider(
    url: str,
    version_url: str | None = None,
    provider: str | None = None,
    settings: GitHubSettings | None = None,
) -> Provider:
    """Create the provider matching the given URL.

    Args:
        url: GitHub URL, or a download URL template for the generic provider
        version_url: Version-check URL, selects the generic provider unless
            ``provider`` forces github
        provider: Force a provider by id ("github" or "generic")
        settings: GitHub credentials and endpoints

    Returns:
        GitHubProvider or GenericProvider instance

    Raises:
        ProviderConfigError: If no provider matches or the URL can't be parsed
    """
    if not url.startswith('http'):
        url = f'https://{url}'

    if provider is not None and provider not in PROVIDERS:
        raise ProviderConfigError(
            f"unknown provider '{provider}', expected one of {', '.join(PROVIDERS)}"
        )

    host = urlparse(url).netloc
    if provider == 'github' or (provider is None and not version_url and 'github' in host):
        log.debug(f"Using github provider for {url}")
        return GitHubProvider(url, settings=settings)

    if provider == 'generic' or version_url:
        log.debug(f"Using generic provider for {url}")
        return GenericProvider(url, version_url)

    raise ProviderConfigError(f"can't find provider for url {url}")


__all__ = [
    'FetchOpts',
    'File',
    'GenericProvider',
    'GitHubProvider',
    'NoReleasesError',
    'PROVIDERS',
    'Provider',
    'ProviderConfigError',
    'ProviderError',
    'new_provider',
]
