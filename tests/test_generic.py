"""Tests for the generic version-check provider."""

from unittest.mock import patch

import httpx
import pytest

from releasefetch import constants
from releasefetch.errors import ProviderConfigError, ProviderError
from releasefetch.providers import FetchOpts, GenericProvider


def version_client(body='1.2.3', status_code=200, requests=None):
    """httpx client answering every request with ``body``."""

    def handler(request):
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, text=body)

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestConstruction:
    """Tests for GenericProvider construction."""

    def test_invalid_version_url_raises(self):
        """A version URL without scheme and host is rejected."""
        with pytest.raises(ProviderConfigError, match="invalid version_url"):
            GenericProvider('https://example.com/{version}', 'not a url')

    def test_missing_version_url_raises(self):
        with pytest.raises(ProviderConfigError):
            GenericProvider('https://example.com/{version}', None)

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            GenericProvider('https://example.com/{version}', '')

    def test_get_id(self):
        provider = GenericProvider(
            'https://example.com/{version}', 'https://example.com/VERSION'
        )
        assert provider.get_id() == 'generic'


class TestGetLatestVersion:
    """Tests for version resolution and URL substitution."""

    def test_body_is_stripped(self):
        """Leading and trailing whitespace is removed from the version."""
        provider = GenericProvider(
            'https://example.com/tool-{version}.tar.gz',
            'https://example.com/VERSION',
            client=version_client('  v1.2.3 \n'),
        )
        version, url = provider.get_latest_version()
        assert version == 'v1.2.3'
        assert url == 'https://example.com/tool-v1.2.3.tar.gz'

    def test_internal_whitespace_preserved(self):
        provider = GenericProvider(
            'https://example.com/{version}',
            'https://example.com/VERSION',
            client=version_client('\t1.2 beta\r\n'),
        )
        version, _ = provider.get_latest_version()
        assert version == '1.2 beta'

    def test_every_placeholder_replaced(self):
        """All occurrences of {version} are substituted."""
        provider = GenericProvider(
            'https://example.com/v{version}/tool-{version}-linux.tar.gz',
            'https://example.com/VERSION',
            client=version_client('2.0.1'),
        )
        _, url = provider.get_latest_version()
        assert url == 'https://example.com/v2.0.1/tool-2.0.1-linux.tar.gz'

    def test_template_without_placeholder_unchanged(self):
        provider = GenericProvider(
            'https://example.com/downloads/tool-latest.zip',
            'https://example.com/VERSION',
            client=version_client('2.0.1'),
        )
        _, url = provider.get_latest_version()
        assert url == 'https://example.com/downloads/tool-latest.zip'

    def test_requests_version_url(self):
        requests = []
        provider = GenericProvider(
            'https://example.com/{version}',
            'https://example.com/stable.txt',
            client=version_client('1.0', requests=requests),
        )
        provider.get_latest_version()
        assert len(requests) == 1
        assert str(requests[0].url) == 'https://example.com/stable.txt'

    def test_http_error_propagates(self):
        """Non-2xx answers surface as httpx errors, without retry."""
        requests = []
        provider = GenericProvider(
            'https://example.com/{version}',
            'https://example.com/VERSION',
            client=version_client('oops', status_code=500, requests=requests),
        )
        with pytest.raises(httpx.HTTPStatusError):
            provider.get_latest_version()
        assert len(requests) == 1

    def test_transport_error_propagates(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = GenericProvider(
            'https://example.com/{version}',
            'https://example.com/VERSION',
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        with pytest.raises(httpx.ConnectError):
            provider.get_latest_version()

    def test_default_client_closed_after_call(self):
        client = version_client('1.0')
        provider = GenericProvider('https://example.com/{version}', 'https://example.com/VERSION')
        with patch('releasefetch.providers.generic.httpx.Client', return_value=client) as factory:
            provider.get_latest_version()

        factory.assert_called_once_with(timeout=constants.HTTP_TIMEOUT)
        assert client.is_closed

    def test_injected_client_left_open(self):
        client = version_client('1.0')
        provider = GenericProvider(
            'https://example.com/{version}', 'https://example.com/VERSION', client=client
        )
        provider.get_latest_version()
        assert not client.is_closed

    def test_empty_body_raises(self):
        provider = GenericProvider(
            'https://example.com/{version}',
            'https://example.com/VERSION',
            client=version_client(' \n'),
        )
        with pytest.raises(ProviderError, match="empty version"):
            provider.get_latest_version()


class TestFetch:
    """Tests for GenericProvider.fetch."""

    def test_fetch_builds_file(self, recording_filters):
        provider = GenericProvider(
            'https://example.com/releases/{version}/tool-linux-amd64',
            'https://example.com/VERSION',
            client=version_client('3.1.4\n'),
            filter_factory=recording_filters,
        )

        file = provider.fetch(FetchOpts())

        assert file.version == '3.1.4'
        assert file.data.read() == b'binary-content'
        assert file.package_path == '/opt/bin/unnamed'
        f = recording_filters.created[0]
        assert f.processed.url == 'https://example.com/releases/3.1.4/tool-linux-amd64'

    def test_name_defaults_to_last_url_segment(self, recording_filters):
        """The filter gave no name, so the URL basename is used."""
        provider = GenericProvider(
            'https://example.com/releases/{version}/tool-{version}.tar.gz',
            'https://example.com/VERSION',
            client=version_client('3.1.4'),
            filter_factory=recording_filters,
        )

        file = provider.fetch(FetchOpts())

        assert file.name == 'tool-3.1.4.tar.gz'

    def test_options_forwarded_to_filter(self, recording_filters):
        provider = GenericProvider(
            'https://example.com/{version}/tool',
            'https://example.com/VERSION',
            client=version_client('1.0'),
            filter_factory=recording_filters,
        )
        opts = FetchOpts(
            all=True,
            package_path='/usr/local/bin',
            skip_path_check=True,
            package_name='mytool',
        )

        provider.fetch(opts)

        filter_opts = recording_filters.created[0].opts
        assert filter_opts.skip_scoring is True
        assert filter_opts.package_path == '/usr/local/bin'
        assert filter_opts.skip_path_check is True
        assert filter_opts.package_name == 'mytool'

    def test_opts_not_mutated(self, recording_filters):
        provider = GenericProvider(
            'https://example.com/{version}/tool',
            'https://example.com/VERSION',
            client=version_client('1.0'),
            filter_factory=recording_filters,
        )
        opts = FetchOpts(package_path='/tmp', version='9.9')

        provider.fetch(opts)

        assert opts == FetchOpts(package_path='/tmp', version='9.9')
