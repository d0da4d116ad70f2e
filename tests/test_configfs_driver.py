"""
Tests for the configfs gadget driver against a fake configfs tree.
"""

import os
import shutil
from unittest.mock import patch

import pytest

from conftest import CONTROLLER, GADGET_DIR, UDC_DIR, get, put
from usbdrive.drivers.configfs import ConfigFSDriver
from usbdrive.exceptions import IOFailureException, VerifyFailedException
from usbdrive.models import MountOptions
from usbdrive.utils.fs import host_path

LUN = f"{GADGET_DIR}/g1/functions/mass_storage.0/lun.0"
UDC = f"{GADGET_DIR}/g1/UDC"


@pytest.fixture
def driver(configfs_root):
    return ConfigFSDriver(root=configfs_root)


class TestSupported:

    def test_supported_with_configfs_mount(self, driver):
        assert driver.supported() is True

    def test_unsupported_without_configfs(self, root):
        put(root, '/proc/mounts', 'tmpfs /tmp tmpfs rw 0 0')
        assert ConfigFSDriver(root=root).supported() is False

    def test_supported_through_android_fallback(self, root):
        os.makedirs(host_path(root, '/config'))
        assert ConfigFSDriver(root=root).supported() is True


class TestMount:

    def test_mount_read_write(self, driver, configfs_root, image):
        driver.mount(image, MountOptions(read_write=True, cdrom=False))

        assert get(configfs_root, f"{LUN}/file") == image
        assert get(configfs_root, f"{LUN}/ro") == '0'
        assert get(configfs_root, f"{LUN}/cdrom") == '0'
        assert get(configfs_root, UDC) == CONTROLLER

        status = driver.status()
        assert status.mounted is True
        assert status.file == image
        assert status.read_only is False
        assert status.cdrom is False

    def test_mount_cdrom(self, driver, configfs_root, image):
        driver.mount(image, MountOptions(read_write=False, cdrom=True))

        assert get(configfs_root, f"{LUN}/cdrom") == '1'
        assert get(configfs_root, f"{LUN}/ro") == '1'

        status = driver.status()
        assert status.mounted is True
        assert status.cdrom is True
        assert status.read_only is True

    def test_mount_links_function_into_config(self, driver, configfs_root, image):
        driver.mount(image, MountOptions())

        link = host_path(configfs_root, f"{GADGET_DIR}/g1/configs/b.1/mass_storage.0")
        assert os.path.islink(link)
        assert os.readlink(link) == host_path(
            configfs_root, f"{GADGET_DIR}/g1/functions/mass_storage.0"
        )

    def test_mount_replaces_previous_image(self, driver, configfs_root, image, tmp_path):
        other = tmp_path / 'other.iso'
        other.write_bytes(b'x' * 10)

        driver.mount(image, MountOptions())
        driver.mount(str(other), MountOptions(read_write=False, cdrom=True))

        assert driver.status().file == str(other)

    def test_mount_clears_udc_while_writing(self, driver, configfs_root, image):
        seen = []

        def record(lun_file, expected):
            seen.append(get(configfs_root, UDC))

        with patch('usbdrive.drivers.configfs.verify_mount', side_effect=record):
            driver.mount(image, MountOptions())

        assert seen == ['']
        assert get(configfs_root, UDC) == CONTROLLER

    def test_udc_restored_when_lun_unwritable(self, driver, configfs_root, image):
        lun_file = host_path(configfs_root, f"{LUN}/file")
        os.remove(lun_file)
        os.mkdir(lun_file)

        with pytest.raises(IOFailureException):
            driver.mount(image, MountOptions())

        assert get(configfs_root, UDC) == CONTROLLER

    def test_udc_restored_when_verify_fails(self, driver, configfs_root, image):
        with patch('usbdrive.drivers.configfs.verify_mount',
                   side_effect=VerifyFailedException('expected x, got y')):
            with pytest.raises(VerifyFailedException):
                driver.mount(image, MountOptions())

        assert get(configfs_root, UDC) == CONTROLLER

    def test_uses_first_active_gadget(self, configfs_root, image):
        put(configfs_root, f"{GADGET_DIR}/a_idle/UDC", '')
        put(configfs_root, f"{GADGET_DIR}/.hidden/UDC", 'other.udc')

        ConfigFSDriver(root=configfs_root).mount(image, MountOptions())

        assert get(configfs_root, f"{LUN}/file") == image
        assert not os.path.exists(
            host_path(configfs_root, f"{GADGET_DIR}/a_idle/functions")
        )


class TestGadgetCreation:

    @pytest.fixture
    def bare_root(self, root):
        put(root, '/proc/mounts', 'configfs /sys/kernel/config configfs rw 0 0')
        os.makedirs(host_path(root, '/sys/kernel/config'))
        os.makedirs(host_path(root, f"{UDC_DIR}/{CONTROLLER}"))
        return root

    def test_creates_and_binds_gadget(self, bare_root, image):
        driver = ConfigFSDriver(root=bare_root)
        driver.mount(image, MountOptions(read_write=False, cdrom=True))

        gadget = f"{GADGET_DIR}/g1"
        assert get(bare_root, f"{gadget}/idVendor") == '0x18d1'
        assert get(bare_root, f"{gadget}/idProduct") == '0x4e26'
        assert get(bare_root, f"{gadget}/strings/0x409/manufacturer") == 'Android'
        assert get(bare_root, f"{gadget}/strings/0x409/product") == 'USB Drive'
        assert get(bare_root, f"{gadget}/strings/0x409/serialnumber") == '123456'
        assert get(bare_root, f"{gadget}/configs/c.1/strings/0x409/configuration") == 'Config 1'
        assert os.path.islink(host_path(bare_root, f"{gadget}/configs/c.1/mass_storage.0"))
        assert get(bare_root, f"{gadget}/UDC") == CONTROLLER
        assert driver.status().file == image

    def test_status_does_not_create_gadget(self, bare_root):
        status = ConfigFSDriver(root=bare_root).status()

        assert status.mounted is False
        assert not os.path.exists(host_path(bare_root, GADGET_DIR))


class TestUnmount:

    def test_unmount_after_mount(self, driver, configfs_root, image):
        driver.mount(image, MountOptions())
        driver.unmount()

        assert get(configfs_root, f"{LUN}/file") == ''
        assert get(configfs_root, UDC) == CONTROLLER
        assert driver.status().mounted is False

    def test_unmount_is_idempotent(self, driver, configfs_root, image):
        driver.mount(image, MountOptions())
        driver.unmount()
        driver.unmount()

        assert get(configfs_root, f"{LUN}/file") == ''

    def test_udc_restored_when_unmount_fails(self, driver, configfs_root):
        lun_file = host_path(configfs_root, f"{LUN}/file")
        os.remove(lun_file)
        os.mkdir(lun_file)

        with pytest.raises(IOFailureException):
            driver.unmount()

        assert get(configfs_root, UDC) == CONTROLLER


class TestStatus:

    def test_not_mounted_when_lun_empty(self, driver):
        assert driver.status().mounted is False

    def test_not_mounted_without_function(self, configfs_root):
        shutil.rmtree(host_path(configfs_root, f"{GADGET_DIR}/g1/functions"))

        assert ConfigFSDriver(root=configfs_root).status().mounted is False

    def test_not_mounted_without_configfs(self, root):
        status = ConfigFSDriver(root=root).status()
        assert status.mounted is False
        assert status.file == ''
