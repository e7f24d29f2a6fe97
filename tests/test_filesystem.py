"""Tests for the virtual filesystem façade."""

from datetime import datetime, timezone

import pytest

from common.exceptions import (
    DownloadFailedError,
    InvalidArgumentError,
    NoFileHandleError,
    NotAFileError,
    NotAFolderError,
    NotFoundError,
    UnsupportedOperationError,
)
from common.types import AccessMode, OpenOption
from synfs.channels import ReadChannel, WriteChannel
from synfs.filesystem import EmptyDirectoryStream, SynapseFileSystemProvider
from synfs.path import EntityPath, WriteTargetPath


class TestProvider:
    """Tests for provider lifecycle."""

    def test_instance_is_singleton(self):
        assert SynapseFileSystemProvider.instance() is SynapseFileSystemProvider.instance()

    def test_scheme(self):
        assert SynapseFileSystemProvider().scheme == 'syn'

    def test_new_file_system_returns_open_instance(self, temp_config, transport):
        provider = SynapseFileSystemProvider()
        first = provider.new_file_system(temp_config, client=transport)

        assert provider.new_file_system(temp_config, client=transport) is first
        assert provider.get_file_system() is first

    def test_closed_file_system_is_replaced(self, temp_config, transport):
        provider = SynapseFileSystemProvider()
        first = provider.new_file_system(temp_config, client=transport)
        first.close()

        second = provider.new_file_system(temp_config, client=transport)

        assert second is not first
        assert not first.is_open()
        assert second.is_open()

    def test_close_releases_owned_http_clients(self, temp_config):
        fs = SynapseFileSystemProvider().new_file_system(temp_config)
        uploader = fs.uploader

        fs.close()

        assert fs.client.session.is_closed
        assert uploader.http_client.is_closed

    def test_close_leaves_injected_clients_open(self, temp_config, transport, storage):
        storage_client = storage.client()
        fs = SynapseFileSystemProvider().new_file_system(temp_config, client=transport, storage_client=storage_client)
        fs.uploader

        fs.close()

        assert not storage_client.is_closed

    def test_get_path_binds_filesystem(self, filesystem):
        path = filesystem.provider.get_path('syn://syn100/out.txt')

        assert path == WriteTargetPath('syn100', 'out.txt')
        assert path.filesystem is filesystem


class TestFileSystem:
    """Tests for SynapseFileSystem."""

    def test_properties(self, filesystem, transport, temp_config):
        assert filesystem.client is transport
        assert filesystem.config is temp_config
        assert filesystem.separator == '/'
        assert not filesystem.is_read_only()
        assert filesystem.root_directories == []
        assert filesystem.file_stores == []
        assert filesystem.supported_file_attribute_views == {'basic'}

    def test_get_path_joins_segments(self, filesystem):
        assert filesystem.get_path('syn://syn100', 'a', 'b.txt') == WriteTargetPath('syn100', 'a/b.txt')
        assert filesystem.get_path('syn100.2') == EntityPath('syn100', 2)

    def test_uploader_is_shared(self, filesystem):
        assert filesystem.uploader is filesystem.uploader

    @pytest.mark.parametrize('operation', [
        lambda fs: fs.get_path_matcher('glob:*'),
        lambda fs: fs.new_watch_service(),
        lambda fs: fs.get_user_principal_lookup_service(),
    ])
    def test_unsupported_operations(self, filesystem, operation):
        with pytest.raises(UnsupportedOperationError):
            operation(filesystem)


class TestNewByteChannel:
    """Tests for opening channels."""

    def test_read_file(self, filesystem, transport, storage):
        transport.add_file('syn7', 'data.txt', file_size=5, file_handle_id='fh7')
        storage.downloads['/download/fh7'] = b'hello'
        path = filesystem.get_path('syn://syn7')

        channel = filesystem.provider.new_byte_channel(path)

        assert isinstance(channel, ReadChannel)
        assert channel.size() == 5
        buffer = bytearray(16)
        assert channel.read(buffer) == 5
        assert bytes(buffer[:5]) == b'hello'
        assert transport.calls_to('get_presigned_download_url') == [
            ('get_presigned_download_url', 'syn7', 'fh7'),
        ]
        channel.close()

    def test_read_versioned_file(self, filesystem, transport):
        transport.add_file('syn7', 'data.txt', file_size=5)

        filesystem.provider.new_byte_channel(filesystem.get_path('syn7.3')).close()

        assert transport.calls_to('get_entity') == [('get_entity', 'syn7', 3)]

    def test_unknown_size(self, filesystem, transport):
        transport.add_file('syn7', 'data.txt', file_size=None)

        channel = filesystem.provider.new_byte_channel(filesystem.get_path('syn7'))

        assert channel.size() == -1

    def test_zero_size_is_kept(self, filesystem, transport):
        transport.add_file('syn7', 'empty.txt', file_size=0)

        channel = filesystem.provider.new_byte_channel(filesystem.get_path('syn7'))

        assert channel.size() == 0

    def test_folder_read_fails_before_url_request(self, filesystem, transport):
        with pytest.raises(NotAFileError, match='Folder'):
            filesystem.provider.new_byte_channel(filesystem.get_path('syn100'))

        assert transport.calls_to('get_presigned_download_url') == []

    def test_file_without_handle(self, filesystem, transport):
        transport.add_file('syn7', 'data.txt', file_handle_id=None)

        with pytest.raises(NoFileHandleError):
            filesystem.provider.new_byte_channel(filesystem.get_path('syn7'))

    @pytest.mark.parametrize('option', [OpenOption.WRITE, OpenOption.CREATE, OpenOption.CREATE_NEW])
    def test_write_options_open_write_channel(self, filesystem, transport, option):
        path = filesystem.get_path('syn://syn100/dir/out.txt')

        channel = filesystem.provider.new_byte_channel(path, {option})

        assert isinstance(channel, WriteChannel)
        assert channel.parent_folder_id == 'syn100'
        assert channel.file_name == 'dir/out.txt'
        assert transport.calls == []
        channel.close()

    def test_write_to_entity_path_rejected(self, filesystem, transport):
        with pytest.raises(InvalidArgumentError, match='must include a filename'):
            filesystem.provider.new_byte_channel(filesystem.get_path('syn100'), [OpenOption.WRITE])

        assert transport.calls == []

    def test_write_channel_uploads_on_close(self, filesystem, transport, storage):
        path = filesystem.get_path('syn://syn100/report.txt')

        with filesystem.provider.new_byte_channel(path, [OpenOption.CREATE, OpenOption.WRITE]) as channel:
            channel.write(b'Hello, World!')

        assert transport.entities[channel.entity_id].name == 'report.txt'
        assert len(storage.puts) == 1

    def test_non_virtual_path_rejected(self, filesystem):
        with pytest.raises(InvalidArgumentError):
            filesystem.provider.new_byte_channel('/tmp/local.txt')


class TestCopy:
    """Tests for copy between local files and Synapse."""

    def test_local_to_write_target(self, filesystem, transport, sample_file):
        target = filesystem.get_path('syn://syn100/uploads/greeting.txt')

        filesystem.provider.copy(sample_file, target)

        assert [call[2] for call in transport.calls_to('create_folder')] == ['uploads']
        assert transport.calls_to('create_file_entity')[0][2] == 'greeting.txt'

    def test_local_to_folder_uses_source_name(self, filesystem, transport, sample_file):
        filesystem.provider.copy(sample_file, filesystem.get_path('syn://syn100'))

        assert transport.calls_to('create_file_entity')[0][1:3] == ('syn100', 'hello.txt')

    def test_upload_returns_entity_id(self, filesystem, transport, sample_file):
        entity_id = filesystem.provider.upload(sample_file, filesystem.get_path('syn100'))

        assert transport.entities[entity_id].name == 'hello.txt'

    def test_synapse_to_local(self, filesystem, transport, storage, tmp_path):
        payload = bytes(range(256)) * 100
        transport.add_file('syn7', 'blob.bin', file_size=len(payload), file_handle_id='fh7')
        storage.downloads['/download/fh7'] = payload
        target = tmp_path / 'blob.bin'

        filesystem.provider.copy(filesystem.get_path('syn7'), target)

        assert target.read_bytes() == payload
        assert [p.name for p in tmp_path.iterdir()] == ['blob.bin']

    def test_failed_download_keeps_existing_local_file(self, filesystem, transport, tmp_path):
        transport.add_file('syn7', 'blob.bin', file_size=4, file_handle_id='fh7')
        target = tmp_path / 'blob.bin'
        target.write_bytes(b'keep me')

        with pytest.raises(DownloadFailedError):
            filesystem.provider.copy(filesystem.get_path('syn7'), target)

        assert target.read_bytes() == b'keep me'
        assert [p.name for p in tmp_path.iterdir()] == ['blob.bin']

    def test_synapse_to_synapse_unsupported(self, filesystem):
        with pytest.raises(UnsupportedOperationError):
            filesystem.provider.copy(filesystem.get_path('syn7'), filesystem.get_path('syn100/x'))

    def test_local_to_local_rejected(self, filesystem, tmp_path, sample_file):
        with pytest.raises(InvalidArgumentError):
            filesystem.provider.copy(sample_file, tmp_path / 'copy.txt')

    def test_move_unsupported(self, filesystem, sample_file):
        with pytest.raises(UnsupportedOperationError):
            filesystem.provider.move(sample_file, filesystem.get_path('syn100/x'))


class TestDirectories:
    """Tests for directory operations."""

    def test_create_directory_on_folder_is_noop(self, filesystem, transport):
        filesystem.provider.create_directory(filesystem.get_path('syn100'))

        assert transport.calls == [('is_folder', 'syn100')]

    def test_create_directory_on_write_target_checks_folder(self, filesystem, transport):
        filesystem.provider.create_directory(filesystem.get_path('syn100/sub'))

        assert transport.calls == [('is_folder', 'syn100')]

    def test_create_directory_on_file_raises(self, filesystem, transport):
        transport.add_file('syn7', 'data.txt')

        with pytest.raises(NotAFolderError):
            filesystem.provider.create_directory(filesystem.get_path('syn7'))

    def test_directory_stream_is_empty(self, filesystem):
        with filesystem.provider.new_directory_stream(filesystem.get_path('syn100')) as stream:
            assert isinstance(stream, EmptyDirectoryStream)
            assert list(stream) == []
        assert stream.closed

    def test_delete_is_noop(self, filesystem, transport):
        filesystem.provider.delete(filesystem.get_path('syn100/x'))

        assert transport.calls == []


class TestCheckAccess:
    """Tests for check_access."""

    def test_write_target_does_not_exist(self, filesystem, transport):
        with pytest.raises(NotFoundError):
            filesystem.provider.check_access(filesystem.get_path('syn100/new.txt'))

        assert transport.calls == []

    def test_write_access_to_folder(self, filesystem, transport):
        filesystem.provider.check_access(filesystem.get_path('syn100'), AccessMode.READ, AccessMode.WRITE)

        assert transport.calls == [('is_folder', 'syn100')]

    def test_write_access_to_file_raises(self, filesystem, transport):
        transport.add_file('syn7', 'data.txt')

        with pytest.raises(NotAFolderError):
            filesystem.provider.check_access(filesystem.get_path('syn7'), AccessMode.WRITE)

    def test_read_access_fetches_entity(self, filesystem, transport):
        transport.add_file('syn7', 'data.txt')

        filesystem.provider.check_access(filesystem.get_path('syn7.2'))

        assert transport.calls == [('get_entity', 'syn7', 2)]

    def test_read_access_to_missing_entity(self, filesystem):
        with pytest.raises(NotFoundError):
            filesystem.provider.check_access(filesystem.get_path('syn404'), AccessMode.READ)


class TestAttributes:
    """Tests for attribute reads."""

    def test_read_attributes(self, filesystem, transport):
        transport.add_file(
            'syn7', 'data.txt', file_size=42,
            modified_on='2024-01-15T10:30:00.000Z', created_on='2024-01-01T00:00:00.000Z',
        )

        attrs = filesystem.provider.read_attributes(filesystem.get_path('syn7'))

        assert attrs.size() == 42
        assert attrs.is_regular_file()
        assert not attrs.is_directory()
        assert attrs.last_modified_time() == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert attrs.creation_time() == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert attrs.file_key() == 'syn7'

    def test_read_attributes_map_all(self, filesystem, transport):
        transport.add_file('syn7', 'data.txt', file_size=42)

        attrs = filesystem.provider.read_attributes_map(filesystem.get_path('syn7'), 'basic:*')

        assert attrs['size'] == 42
        assert attrs['is_regular_file'] is True
        assert attrs['is_directory'] is False
        assert attrs['is_symbolic_link'] is False
        assert attrs['is_other'] is False
        assert 'last_modified_time' in attrs

    def test_read_attributes_map_single(self, filesystem, transport):
        transport.add_file('syn7', 'data.txt', file_size=42)

        assert filesystem.provider.read_attributes_map(filesystem.get_path('syn7'), 'size') == {'size': 42}

    def test_read_attributes_map_unknown_view(self, filesystem):
        with pytest.raises(UnsupportedOperationError):
            filesystem.provider.read_attributes_map(filesystem.get_path('syn7'), 'posix:permissions')

    def test_set_attribute_and_file_store_unsupported(self, filesystem):
        path = filesystem.get_path('syn100')
        with pytest.raises(UnsupportedOperationError):
            filesystem.provider.set_attribute(path, 'size', 1)
        with pytest.raises(UnsupportedOperationError):
            filesystem.provider.get_file_store(path)

    def test_is_same_file_and_hidden(self, filesystem):
        provider = filesystem.provider
        assert provider.is_same_file(filesystem.get_path('syn7.1'), EntityPath('syn7', 1))
        assert not provider.is_same_file(filesystem.get_path('syn7.1'), EntityPath('syn7', 2))
        assert not provider.is_hidden(filesystem.get_path('syn7'))
