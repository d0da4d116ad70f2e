"""
Tests for tool settings and JSON mount configuration.
"""

import json

import pytest

from usbdrive.config import USBDriveConfig, load_mount_config
from usbdrive.exceptions import ConfigurationException
from usbdrive.models import MODE_CDROM, MODE_READ_WRITE


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / 'usbdrive.conf'
    path.write_text(
        '[usbdrive]\n'
        'lock_dir = /data/local/tmp/locks\n'
        'lock_timeout = 5\n'
        'log_level = info\n'
        'log_format = json\n'
        'backend = sysfs\n'
    )
    return str(path)


def write_json(tmp_path, data, name='mount.json'):
    path = tmp_path / name
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return str(path)


class TestUSBDriveConfig:

    def test_defaults(self, tmp_path):
        config = USBDriveConfig.load(str(tmp_path / 'missing.conf'), environ={})

        assert config.root == '/'
        assert config.lock_timeout == 30
        assert config.log_level == 'ERROR'
        assert config.log_format == 'text'
        assert config.backend is None
        assert config.lock_dir

    def test_ini_file(self, settings_file):
        config = USBDriveConfig.load(settings_file, environ={})

        assert config.lock_dir == '/data/local/tmp/locks'
        assert config.lock_timeout == 5
        assert config.log_level == 'INFO'
        assert config.log_format == 'json'
        assert config.backend == 'sysfs'

    def test_env_overrides_file(self, settings_file):
        config = USBDriveConfig.load(settings_file, environ={
            'USBDRIVE_LOG_LEVEL': 'debug',
            'USBDRIVE_BACKEND': 'configfs',
            'USBDRIVE_ROOT': '/tmp/fake',
        })

        assert config.log_level == 'DEBUG'
        assert config.backend == 'configfs'
        assert config.root == '/tmp/fake'
        assert config.lock_timeout == 5

    def test_config_path_from_env(self, settings_file):
        config = USBDriveConfig.load(environ={'USBDRIVE_CONFIG': settings_file})
        assert config.backend == 'sysfs'

    @pytest.mark.parametrize('key,value', [
        ('USBDRIVE_LOCK_TIMEOUT', 'soon'),
        ('USBDRIVE_LOCK_TIMEOUT', '-1'),
        ('USBDRIVE_LOG_LEVEL', 'LOUD'),
        ('USBDRIVE_LOG_FORMAT', 'xml'),
    ])
    def test_invalid_values(self, tmp_path, key, value):
        with pytest.raises(ConfigurationException):
            USBDriveConfig.load(str(tmp_path / 'missing.conf'), environ={key: value})

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / 'broken.conf'
        path.write_text('lock_timeout = 5\n')

        with pytest.raises(ConfigurationException, match='Failed to parse'):
            USBDriveConfig.load(str(path), environ={})


class TestLoadMountConfig:

    def test_cdrom(self, tmp_path):
        path = write_json(tmp_path, {'file': '/sdcard/x.iso', 'mode': 'cdrom'})

        config = load_mount_config(path)

        assert config.file == '/sdcard/x.iso'
        assert config.mode == MODE_CDROM
        assert config.backend is None
        opts = config.to_options()
        assert opts.cdrom and not opts.read_write

    def test_mode_defaults_to_read_write(self, tmp_path):
        config = load_mount_config(write_json(tmp_path, {'file': '/sdcard/x.img'}))

        assert config.mode == MODE_READ_WRITE
        assert config.to_options().read_write

    def test_relative_path_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_mount_config(write_json(tmp_path, {'file': 'disk.img'}))

        assert config.file == str(tmp_path / 'disk.img')

    def test_missing_file_field(self, tmp_path):
        with pytest.raises(ConfigurationException, match='missing required field: file'):
            load_mount_config(write_json(tmp_path, {'mode': 'ro'}))

    def test_invalid_mode(self, tmp_path):
        with pytest.raises(ConfigurationException, match='invalid mode'):
            load_mount_config(write_json(tmp_path, {'file': '/sdcard/x', 'mode': 'wo'}))

    def test_invalid_backend(self, tmp_path):
        with pytest.raises(ConfigurationException, match='invalid backend'):
            load_mount_config(write_json(tmp_path, {'file': '/sdcard/x', 'backend': 'mtp'}))

    def test_legacy_backend_accepted(self, tmp_path):
        config = load_mount_config(write_json(tmp_path, {'file': '/sdcard/x', 'backend': 'legacy'}))
        assert config.backend == 'legacy'

    def test_bad_json(self, tmp_path):
        with pytest.raises(ConfigurationException, match='parse config file'):
            load_mount_config(write_json(tmp_path, '{"file": '))

    def test_not_an_object(self, tmp_path):
        with pytest.raises(ConfigurationException, match='JSON object'):
            load_mount_config(write_json(tmp_path, '["/sdcard/x"]'))

    def test_unreadable(self, tmp_path):
        with pytest.raises(ConfigurationException, match='read config file'):
            load_mount_config(str(tmp_path / 'missing.json'))
