import os
from pathlib import Path
from typing import Mapping
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from . import constants
from .errors import ProviderConfigError
from .logger import log

config_dirname = 'releasefetch'
config_filename = f'{config_dirname}.yaml'


def _validate_url(v: str | None) -> str | None:
    if not v:
        return v
    result = urlparse(v)
    if not all([result.scheme, result.netloc]):
        raise ValueError(f"Invalid URL: {v}")
    return v


class GitHubSettings(BaseModel):
    """Credentials and endpoints used to build a GitHub API client.

    ``token`` is the personal token. It authenticates the public API client
    and is sent with asset downloads. The ``ghes_*`` fields switch the API
    client to a GitHub Enterprise Server when all three are set.
    """

    model_config = {'frozen': True}

    token: str | None = None
    ghes_base_url: str | None = None
    ghes_upload_url: str | None = None
    ghes_auth_token: str | None = None

    @field_validator('ghes_base_url', 'ghes_upload_url')
    def validate_ghes_url(cls, v: str | None):
        return _validate_url(v)

    @property
    def enterprise(self) -> bool:
        return bool(self.ghes_base_url and self.ghes_upload_url and self.ghes_auth_token)

    @classmethod
    def build(cls, **values) -> 'GitHubSettings':
        """Validate ``values``, reporting bad endpoints as ProviderConfigError."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise ProviderConfigError(f"invalid GitHub settings: {e}") from e

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        token: str | None = None,
        fallback: 'GitHubSettings | None' = None,
    ) -> 'GitHubSettings':
        """Resolve settings from environment variables.

        Token precedence: explicit ``token`` argument, ``GITHUB_AUTH_TOKEN``,
        ``GITHUB_TOKEN``, then ``fallback.token``. GHES values come from the
        environment first and ``fallback`` second.

        Args:
            environ: Mapping to read instead of ``os.environ``
            token: Token given on the command line, overrides everything
            fallback: Settings read from the config file

        Returns:
            Resolved GitHubSettings

        Raises:
            ProviderConfigError: If a GHES url is malformed
        """
        env = os.environ if environ is None else environ
        fallback = fallback or cls()

        resolved_token = (
            token
            or env.get(constants.GITHUB_AUTH_TOKEN_ENV)
            or env.get(constants.GITHUB_TOKEN_ENV)
            or fallback.token
        )

        return cls.build(
            token=resolved_token or None,
            ghes_base_url=env.get(constants.GHES_BASE_URL_ENV) or fallback.ghes_base_url,
            ghes_upload_url=env.get(constants.GHES_UPLOAD_URL_ENV)
            or fallback.ghes_upload_url,
            ghes_auth_token=env.get(constants.GHES_AUTH_TOKEN_ENV)
            or fallback.ghes_auth_token,
        )


class Config:
    """Configuration loaded from an optional YAML file.

    Recognized keys: ``github_token``, ``ghes_base_url``, ``ghes_upload_url``
    and ``ghes_auth_token``. A missing file yields an empty configuration.
    """

    def __init__(self, config_path: str | Path):
        self._config_path = Path(config_path)
        self._yaml_data = self._read_yaml_data()

    def _read_yaml_data(self) -> dict:
        """Read YAML data from the config file, or an empty dict if absent."""
        if not self._config_path.exists():
            log.debug(f"No config file found at '{self._config_path}'")
            return {}

        with open(self._config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Config '{self._config_path}' must contain a mapping, "
                f"got {type(data).__name__}"
            )
        return data

    @property
    def github_token(self) -> str | None:
        return self._yaml_data.get('github_token')

    @property
    def ghes_base_url(self) -> str | None:
        return self._yaml_data.get('ghes_base_url')

    @property
    def ghes_upload_url(self) -> str | None:
        return self._yaml_data.get('ghes_upload_url')

    @property
    def ghes_auth_token(self) -> str | None:
        return self._yaml_data.get('ghes_auth_token')

    def github_settings(
        self, token: str | None = None, environ: Mapping[str, str] | None = None
    ) -> GitHubSettings:
        """Merge command line, environment and file values into GitHubSettings."""
        from_file = GitHubSettings.build(
            token=self.github_token,
            ghes_base_url=self.ghes_base_url,
            ghes_upload_url=self.ghes_upload_url,
            ghes_auth_token=self.ghes_auth_token,
        )
        return GitHubSettings.from_env(environ, token=token, fallback=from_file)

    def __repr__(self) -> str:
        return f"Config(path='{self._config_path}')"


def get_default_config_path() -> Path:
    """Get the default config path: ./releasefetch.yaml, else ~/releasefetch.yaml"""
    local_config = Path.cwd() / config_filename
    if local_config.exists():
        return local_config

    home_dir = os.getenv('USERPROFILE', os.getenv('HOME', '~')).replace('\\', '/')
    return Path(f"{home_dir}/{config_filename}")
