"""Resolve and fetch the latest release artifact of a package."""

from .providers import (
    FetchOpts,
    File,
    GenericProvider,
    GitHubProvider,
    NoReleasesError,
    Provider,
    ProviderConfigError,
    ProviderError,
    new_provider,
)

__all__ = [
    'FetchOpts',
    'File',
    'GenericProvider',
    'GitHubProvider',
    'NoReleasesError',
    'Provider',
    'ProviderConfigError',
    'ProviderError',
    'new_provider',
]
