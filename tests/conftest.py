"""Shared pytest fixtures for all tests."""

import pytest

from client.config import SynapseConfig
from common.constants import AUTH_TOKEN_ENV, ENDPOINT_ENV
from fakes import FakeStorage, FakeSynapseTransport
from synfs.filesystem import SynapseFileSystemProvider
from synfs.uploader import MultipartUploader


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's Synapse credentials out of every test."""
    monkeypatch.delenv(AUTH_TOKEN_ENV, raising=False)
    monkeypatch.delenv(ENDPOINT_ENV, raising=False)


@pytest.fixture
def temp_config_dir(tmp_path_factory):
    """
    Create temporary config directory.

    Args:
        tmp_path_factory: pytest tmp_path_factory fixture

    Returns:
        Path to temporary .synfs directory
    """
    config_dir = tmp_path_factory.mktemp('config') / '.synfs'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance with a token.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        SynapseConfig instance with temp config file
    """
    return SynapseConfig(temp_config_dir / 'config.json', auth_token='test-token')


@pytest.fixture
def transport():
    """In-memory Synapse transport with one project folder syn100."""
    fake = FakeSynapseTransport()
    fake.add_folder('syn100', 'project')
    return fake


@pytest.fixture
def storage():
    """Presigned-URL storage backed by httpx.MockTransport."""
    return FakeStorage()


@pytest.fixture
def uploader(transport, storage):
    """Uploader with a small part size so multi-part files stay tiny."""
    return MultipartUploader(transport, http_client=storage.client(), min_part_size=4)


@pytest.fixture
def filesystem(temp_config, transport, storage):
    """
    Open SynapseFileSystem wired to the fakes.

    Returns:
        SynapseFileSystem whose provider is a fresh (non-singleton) instance
    """
    provider = SynapseFileSystemProvider()
    return provider.new_file_system(temp_config, client=transport, storage_client=storage.client())


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing uploads.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'hello.txt'
    file_path.write_bytes(b'Hello, World!')
    return file_path
