"""Asset selection and download.

``Filter`` picks the release asset that best matches the host platform and
streams it into memory with httpx.
"""

import io
import platform
import posixpath
import re
from dataclasses import dataclass, field
from email.message import Message
from pathlib import Path
from typing import BinaryIO, Callable, Sequence
from urllib.parse import unquote, urlparse

import httpx

from . import constants
from .logger import download_progress, log
from .errors import AmbiguousAssetError, AssetNotFoundError

OS_ALIASES = {
    'linux': ('linux',),
    'darwin': ('darwin', 'macos', 'mac', 'osx', 'apple'),
    'windows': ('windows', 'win64', 'win32', 'win', '.exe'),
}

ARCH_ALIASES = {
    'amd64': ('amd64', 'x86_64', 'x64', '64bit'),
    'arm64': ('arm64', 'aarch64', 'armv8'),
    'arm': ('armv7', 'armv6', 'armhf', 'arm'),
    '386': ('386', 'i386', 'i686', 'x86', '32bit'),
}

IGNORED_SUFFIXES = (
    '.sha256', '.sha512', '.sha1', '.md5', '.sig', '.asc', '.pem', '.sbom',
    '.txt', '.json', '.yml', '.yaml', '.deb', '.rpm', '.apk', '.msi',
)


@dataclass(frozen=True)
class Asset:
    name: str
    url: str


@dataclass
class FilteredAsset:
    name: str
    url: str
    extra_headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FilterOpts:
    skip_scoring: bool = False
    package_path: str | None = None
    skip_path_check: bool = False
    package_name: str | None = None


@dataclass
class OutFile:
    source: BinaryIO
    name: str
    package_path: str


def _normalize(value: str, aliases: dict[str, tuple[str, ...]]) -> str:
    value = value.lower()
    for canonical, names in aliases.items():
        if value == canonical or value in names:
            return canonical
    return value


def host_platform() -> tuple[str, str]:
    """Return the (os, arch) pair of the running interpreter."""
    return (
        _normalize(platform.system(), OS_ALIASES),
        _normalize(platform.machine(), ARCH_ALIASES),
    )


def _matches(name: str, keywords: Sequence[str]) -> bool:
    return any(
        re.search(rf'(?<![a-z0-9]){re.escape(kw)}(?![a-z0-9]|_64)', name)
        or (kw.startswith('.') and name.endswith(kw))
        for kw in keywords
    )


def score_asset(name: str, repo_name: str, os_name: str, arch: str) -> int:
    """Score how well an asset name fits the host platform.

    Matching the host OS weighs most, then architecture. Assets naming a
    different OS or architecture and checksum/signature/package files are
    penalized.
    """
    lower = name.lower()
    if lower.endswith(IGNORED_SUFFIXES):
        return -10

    score = 0
    if _matches(lower, OS_ALIASES.get(os_name, (os_name,))):
        score += 10
    elif any(
        _matches(lower, aliases)
        for other, aliases in OS_ALIASES.items()
        if other != os_name
    ):
        score -= 10

    if _matches(lower, ARCH_ALIASES.get(arch, (arch,))):
        score += 5
    elif any(
        _matches(lower, aliases)
        for other, aliases in ARCH_ALIASES.items()
        if other != arch
    ):
        score -= 5

    if repo_name and lower.startswith(repo_name.lower()):
        score += 1

    return score


def filename_from_headers(headers: httpx.Headers) -> str:
    """Extract the filename from a Content-Disposition header, if present."""
    disposition = headers.get('Content-Disposition')
    if not disposition:
        return ''
    msg = Message()
    msg['Content-Disposition'] = disposition
    filename = msg.get_filename()
    return posixpath.basename(filename) if filename else ''


def url_to_filename(url: str) -> str:
    """Return the last path segment of a URL."""
    return unquote(posixpath.basename(urlparse(url).path))


class Filter:
    """Selects a release asset and downloads it.

    Args:
        opts: Selection and destination options
        client: httpx client used for downloads; one is created per call if omitted
        platform_info: (os, arch) pair overriding the detected host platform
    """

    def __init__(
        self,
        opts: FilterOpts,
        client: httpx.Client | None = None,
        platform_info: tuple[str, str] | None = None,
    ):
        self.opts = opts
        self._client = client
        self._os, self._arch = platform_info or host_platform()

    def filter_assets(self, repo_name: str, candidates: Sequence[Asset]) -> FilteredAsset:
        if not candidates:
            raise AssetNotFoundError(f"no assets found for {repo_name}")

        if self.opts.package_name:
            for candidate in candidates:
                if candidate.name == self.opts.package_name:
                    return FilteredAsset(name=candidate.name, url=candidate.url)

        if len(candidates) == 1:
            candidate = candidates[0]
            log.debug(f"Only one candidate found for {repo_name}: '{candidate.name}'")
            return FilteredAsset(name=candidate.name, url=candidate.url)

        if self.opts.skip_scoring:
            names = ', '.join(c.name for c in candidates)
            raise AmbiguousAssetError(
                f"multiple assets found for {repo_name}, pick one explicitly: {names}"
            )

        scored = [
            (score_asset(c.name, repo_name, self._os, self._arch), c) for c in candidates
        ]
        for score, candidate in scored:
            log.debug(f"Asset '{candidate.name}' scored {score}")

        best_score, best = max(scored, key=lambda item: item[0])
        if best_score < 1:
            raise AssetNotFoundError(
                f"no asset of {repo_name} matches {self._os}/{self._arch}"
            )

        log.info(f"Selected asset '{best.name}' for {self._os}/{self._arch}")
        return FilteredAsset(name=best.name, url=best.url)

    def process_url(self, asset: FilteredAsset) -> OutFile:
        """Download ``asset`` into memory and compute its destination path.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
            ValueError: If the destination directory doesn't exist
        """
        headers = {'User-Agent': constants.USER_AGENT, **asset.extra_headers}
        log.debug(f"Downloading '{asset.url}'")

        client = self._client or httpx.Client(timeout=constants.DOWNLOAD_TIMEOUT)
        try:
            with client.stream(
                'GET', asset.url, headers=headers, follow_redirects=True
            ) as response:
                response.raise_for_status()
                name = (
                    self.opts.package_name
                    or filename_from_headers(response.headers)
                    or asset.name
                )
                total = int(response.headers.get('Content-Length', 0) or 0)
                source = self._read_body(
                    response, name or url_to_filename(asset.url), total
                )
        finally:
            if self._client is None:
                client.close()

        package_path = self._package_path(name or url_to_filename(asset.url))
        return OutFile(source=source, name=name, package_path=package_path)

    def _read_body(self, response: httpx.Response, name: str, total: int) -> io.BytesIO:
        buffer = io.BytesIO()
        with download_progress(name, total) as advance:
            for chunk in response.iter_bytes(chunk_size=constants.DOWNLOAD_CHUNK_SIZE):
                buffer.write(chunk)
                advance(len(chunk))
        buffer.seek(0)
        return buffer

    def _package_path(self, name: str) -> str:
        hint = self.opts.package_path
        if not hint:
            path = Path.cwd() / name
        elif Path(hint).is_dir() or hint.endswith(('/', '\\')):
            path = Path(hint) / name
        else:
            path = Path(hint)

        if not self.opts.skip_path_check and not path.parent.is_dir():
            raise ValueError(f"destination directory '{path.parent}' does not exist")

        return str(path)


FilterFactory = Callable[[FilterOpts], Filter]
