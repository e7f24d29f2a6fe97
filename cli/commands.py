"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

import httpx

from client.config import SynapseConfig
from common.exceptions import SynapseFSError
from common.logging_config import get_logger
from common.types import AccessMode
from cli.models import (
    CheckCommand,
    GetCommand,
    InfoCommand,
    LoginCommand,
    PutCommand,
)
from cli.utils import format_file_size, format_timestamp, success
from synfs.filesystem import SynapseFileSystem, SynapseFileSystemProvider
from synfs.path import EntityPath, parse_uri

logger = get_logger(__name__)


_config: Optional[SynapseConfig] = None


def get_config() -> SynapseConfig:
    """
    Get or create global SynapseConfig instance.

    Returns:
        SynapseConfig instance
    """
    global _config
    if _config is None:
        logger.debug("Loading SynFS configuration")
        _config = SynapseConfig()
    return _config


def get_filesystem() -> SynapseFileSystem:
    """
    Get the open Synapse filesystem, creating it on first use.

    Returns:
        SynapseFileSystem shared with the provider singleton
    """
    return SynapseFileSystemProvider.instance().new_file_system(get_config())


def handle_login(cmd: LoginCommand, config: Optional[SynapseConfig] = None) -> str:
    """
    Handle 'login' command.

    Args:
        cmd: LoginCommand with the token
        config: Optional SynapseConfig for dependency injection (testing)

    Returns:
        Success or error message
    """
    if config is None:
        config = get_config()
    try:
        config.set_auth_token(cmd.token)
    except OSError as e:
        logger.error(f"Failed to save token: {e}")
        return f"Error: could not save token to {config.config_path}: {e}"
    logger.info("Auth token saved")
    return success(f"Token saved to {config.config_path}")


def handle_info(cmd: InfoCommand, fs: Optional[SynapseFileSystem] = None) -> str:
    """
    Handle 'info' command.

    Args:
        cmd: InfoCommand with the entity URI
        fs: Optional SynapseFileSystem for dependency injection (testing)

    Returns:
        Formatted entity metadata or error message
    """
    logger.info(f"Executing info command: uri={cmd.uri}")
    if fs is None:
        fs = get_filesystem()
    try:
        path = parse_uri(cmd.uri, filesystem=fs)
        attrs = fs.provider.read_attributes(path)
    except (SynapseFSError, httpx.HTTPError) as e:
        return f"Error: {e}"

    entity = attrs.entity
    lines = [
        f"{entity.id}  {attrs.name}",
        f"  Type:      {entity.type_name}",
        f"  Modified:  {format_timestamp(attrs.last_modified_time())}",
    ]
    if attrs.is_regular_file():
        lines.append(f"  Size:      {format_file_size(attrs.size())}")
        if attrs.content_type:
            lines.append(f"  Content:   {attrs.content_type}")
        if attrs.md5:
            lines.append(f"  MD5:       {attrs.md5}")
    if attrs.version_number is not None:
        lines.append(f"  Version:   {attrs.version_number}")
    return "\n".join(lines)


def handle_get(cmd: GetCommand, fs: Optional[SynapseFileSystem] = None) -> str:
    """
    Handle 'get' command.

    Args:
        cmd: GetCommand with the entity URI and optional output path
        fs: Optional SynapseFileSystem for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing get command: uri={cmd.uri} output_path={cmd.output_path}")
    if fs is None:
        fs = get_filesystem()
    try:
        path = parse_uri(cmd.uri, filesystem=fs)
        if not isinstance(path, EntityPath):
            return "Error: get requires an entity URI such as syn://syn123 or syn://syn123.4"
        output = Path(cmd.output_path) if cmd.output_path else Path.cwd() / path.display_name
        output.parent.mkdir(parents=True, exist_ok=True)
        fs.provider.copy(path, output)
    except (SynapseFSError, httpx.HTTPError, OSError) as e:
        return f"Error: {e}"

    size = output.stat().st_size
    logger.debug("Get command completed")
    return success(f"Downloaded {path.to_uri()} to {output} ({format_file_size(size)})")


def handle_put(cmd: PutCommand, fs: Optional[SynapseFileSystem] = None) -> str:
    """
    Handle 'put' command.

    Args:
        cmd: PutCommand with the local path and destination URI
        fs: Optional SynapseFileSystem for dependency injection (testing)

    Returns:
        Success or error message with the created entity id
    """
    logger.info(f"Executing put command: local_path={cmd.local_path} uri={cmd.uri}")
    source = Path(cmd.local_path)
    if not source.is_file():
        return f"Error: local file not found: {cmd.local_path}"
    if fs is None:
        fs = get_filesystem()
    try:
        path = parse_uri(cmd.uri, filesystem=fs)
        entity_id = fs.provider.upload(source, path)
    except (SynapseFSError, httpx.HTTPError, OSError) as e:
        return f"Error: {e}"

    logger.debug("Put command completed")
    return success(f"Uploaded {source.name} ({format_file_size(source.stat().st_size)}) as {entity_id}")


def handle_check(cmd: CheckCommand, fs: Optional[SynapseFileSystem] = None) -> str:
    """
    Handle 'check' command.

    Args:
        cmd: CheckCommand with the URI and requested access
        fs: Optional SynapseFileSystem for dependency injection (testing)

    Returns:
        Access summary or error message
    """
    if fs is None:
        fs = get_filesystem()
    mode = AccessMode.WRITE if cmd.write else AccessMode.READ
    try:
        path = parse_uri(cmd.uri, filesystem=fs)
        fs.provider.check_access(path, mode)
    except (SynapseFSError, httpx.HTTPError) as e:
        return f"Error: {e}"
    return success(f"{path.to_uri()}: {mode.value} access OK")
