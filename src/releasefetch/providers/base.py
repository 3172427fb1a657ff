"""Provider contract shared by every release source."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO


@dataclass(frozen=True)
class FetchOpts:
    """Caller options for a single fetch.

    Attributes:
        all: Disable asset scoring, every candidate is eligible
        package_path: Destination path hint (file or directory)
        skip_path_check: Don't validate the destination path
        package_name: Name to use instead of the inferred one
        version: Release tag or version to fetch instead of the latest
    """

    all: bool = False
    package_path: str | None = None
    skip_path_check: bool = False
    package_name: str | None = None
    version: str | None = None


@dataclass
class File:
    """A fetched artifact. The caller owns ``data`` once returned."""

    data: BinaryIO
    name: str
    version: str
    package_path: str


class Provider(ABC):
    """A source able to report its latest version and fetch an artifact."""

    @abstractmethod
    def fetch(self, opts: FetchOpts) -> File:
        """Resolve the release, select an asset and download it."""

    @abstractmethod
    def get_latest_version(self) -> tuple[str, str]:
        """Return the latest version and a URL to retrieve it."""

    @abstractmethod
    def get_id(self) -> str:
        """Return the provider identifier, e.g. ``"github"``."""
