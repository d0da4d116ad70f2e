"""
Shared fixtures: fake kernel trees under a temporary root.

Drivers resolve every kernel path under their `root`, so a temporary
directory laid out like /sys and /proc stands in for the real kernel.
"""

import logging
import os

import pytest

from usbdrive.utils.fs import host_path

CONTROLLER = 'musb-hdrc.0.auto'
CONFIGFS_MOUNT = '/sys/kernel/config'
GADGET_DIR = f"{CONFIGFS_MOUNT}/usb_gadget"
ANDROID_USB = '/sys/devices/virtual/android_usb/android0'
UDC_DIR = '/sys/class/udc'


def put(root, path, content=''):
    """Create a kernel attribute file with a trailing newline"""
    full = host_path(root, path)
    os.makedirs(os.path.dirname(full), exist_ok=True)
    with open(full, 'w') as f:
        f.write(content + '\n')
    return full


def get(root, path):
    with open(host_path(root, path)) as f:
        return f.read().strip()


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo setup_logging() calls made by CLI tests"""
    logger = logging.getLogger('usbdrive')
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)


@pytest.fixture
def root(tmp_path):
    path = tmp_path / 'root'
    path.mkdir()
    return str(path)


@pytest.fixture
def image(tmp_path):
    """A small non-empty disk image"""
    path = tmp_path / 'images' / 'disk.img'
    path.parent.mkdir()
    path.write_bytes(b'\0' * 4096)
    return str(path)


@pytest.fixture
def configfs_root(root):
    """
    configfs mounted with one bound gadget 'g1' that already has a
    mass storage function, and one UDC controller.
    """
    put(root, '/proc/mounts',
        'sysfs /sys sysfs rw,nosuid 0 0\n'
        f'configfs {CONFIGFS_MOUNT} configfs rw,relatime 0 0')
    os.makedirs(host_path(root, f"{UDC_DIR}/{CONTROLLER}"))

    gadget = f"{GADGET_DIR}/g1"
    put(root, f"{gadget}/UDC", CONTROLLER)
    put(root, f"{gadget}/functions/mass_storage.0/lun.0/file", '')
    put(root, f"{gadget}/functions/mass_storage.0/lun.0/ro", '1')
    put(root, f"{gadget}/functions/mass_storage.0/lun.0/cdrom", '0')
    os.makedirs(host_path(root, f"{gadget}/configs/b.1"))
    return root


@pytest.fixture
def sysfs_root(root):
    """Legacy android_usb interface in MTP mode"""
    put(root, f"{ANDROID_USB}/enable", '1')
    put(root, f"{ANDROID_USB}/functions", 'mtp')
    put(root, f"{ANDROID_USB}/f_mass_storage/lun/file", '')
    return root


@pytest.fixture
def udc_root(root):
    """UDC-bound legacy gadget with ro and soft_connect attributes"""
    controller = f"{UDC_DIR}/{CONTROLLER}"
    put(root, f"{controller}/soft_connect", 'connect')
    put(root, f"{controller}/device/gadget/lun0/file", '')
    put(root, f"{controller}/device/gadget/lun0/ro", '0')
    return root
