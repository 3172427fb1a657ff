class ProviderError(Exception):
    """Base error for release resolution and fetching."""


class ProviderConfigError(ProviderError, ValueError):
    """Raised when a provider can't be constructed from the given input."""


class NoReleasesError(ProviderError):
    """Raised when a repository has no published release."""


class AssetError(ProviderError):
    """Base error for asset selection."""


class AssetNotFoundError(AssetError):
    """Raised when no candidate fits the host."""


class AmbiguousAssetError(AssetError):
    """Raised when several candidates remain and scoring is disabled."""
