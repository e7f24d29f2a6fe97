"""Configuration management for SynFS (endpoint, auth token, timeouts)."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import (
    AUTH_TOKEN_ENV,
    CONNECT_TIMEOUT_SECONDS,
    DEFAULT_ENDPOINT,
    DOWNLOAD_TIMEOUT_SECONDS,
    ENDPOINT_ENV,
    REQUEST_TIMEOUT_SECONDS,
    UPLOAD_PART_TIMEOUT_SECONDS,
)
from common.exceptions import MissingCredentialsError
from common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.synfs' / 'config.json'


class SynapseConfig:
    """Manages SynFS configuration stored in a JSON file, with env-var fallbacks."""

    DEFAULT_CONFIG = {
        "endpoint": DEFAULT_ENDPOINT,
        "connect_timeout": CONNECT_TIMEOUT_SECONDS,
        "request_timeout": REQUEST_TIMEOUT_SECONDS,
        "upload_part_timeout": UPLOAD_PART_TIMEOUT_SECONDS,
        "download_timeout": DOWNLOAD_TIMEOUT_SECONDS,
    }

    def __init__(
        self,
        config_path: Optional[Path] = None,
        auth_token: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (defaults to ~/.synfs/config.json)
            auth_token: Explicit token; takes precedence over file and environment
            endpoint: Explicit REST endpoint; takes precedence over file and environment
        """
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self._auth_token = auth_token
        self._endpoint = endpoint
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, falling back to defaults.

        Returns:
            Configuration dictionary
        """
        config = self.DEFAULT_CONFIG.copy()
        env_endpoint = os.environ.get(ENDPOINT_ENV)
        if env_endpoint:
            config['endpoint'] = env_endpoint

        if not self.config_path.exists():
            return config

        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
            config.update(data)
            return config
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config file {self.config_path}: {e}")
            backup_path = self.config_path.with_suffix('.json.bak')
            try:
                shutil.copy(self.config_path, backup_path)
            except OSError as copy_error:
                logger.debug(f"Could not back up config file: {copy_error}")
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(self.data, f, indent=2)

    def get_auth_token(self) -> str:
        """
        Resolve the auth token.

        Order: explicit argument, config file, SYNAPSE_AUTH_TOKEN environment variable.

        Raises:
            MissingCredentialsError: If no token is configured anywhere
        """
        token = self._auth_token or self.data.get('auth_token') or os.environ.get(AUTH_TOKEN_ENV)
        if token:
            return token
        raise MissingCredentialsError(
            "Synapse authentication token not configured. "
            f"Run 'login <token>' or set the {AUTH_TOKEN_ENV} environment variable."
        )

    def has_auth_token(self) -> bool:
        """Return True if a token can be resolved; never raises."""
        return bool(self._auth_token or self.data.get('auth_token') or os.environ.get(AUTH_TOKEN_ENV))

    def set_auth_token(self, token: str) -> None:
        """
        Set auth token and save to file.

        Args:
            token: Synapse personal access token
        """
        self.data['auth_token'] = token
        self.save()

    def get_endpoint(self) -> str:
        """
        Get REST endpoint base URL without a trailing slash.

        Returns:
            Base URL string (e.g., "https://repo-prod.prod.sagebase.org")
        """
        endpoint = self._endpoint or self.data.get('endpoint') or DEFAULT_ENDPOINT
        return endpoint.rstrip('/')

    def get_timeouts(self) -> dict:
        """
        Get timeout configuration in seconds.

        Returns:
            Dictionary with 'connect', 'request', 'upload_part' and 'download'
        """
        return {
            'connect': float(self.data.get('connect_timeout', CONNECT_TIMEOUT_SECONDS)),
            'request': float(self.data.get('request_timeout', REQUEST_TIMEOUT_SECONDS)),
            'upload_part': float(self.data.get('upload_part_timeout', UPLOAD_PART_TIMEOUT_SECONDS)),
            'download': float(self.data.get('download_timeout', DOWNLOAD_TIMEOUT_SECONDS)),
        }
