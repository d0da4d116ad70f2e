"""Utilities package"""

from usbdrive.utils.logger import get_logger, setup_logging
from usbdrive.utils.fs import (
    dir_exists,
    file_exists,
    find_mount_point,
    host_path,
    path_exists,
    read_file,
    write_file,
)
from usbdrive.utils.validators import validate_image
from usbdrive.utils.verification import verify_mount, verify_unmount

__all__ = [
    'get_logger',
    'setup_logging',
    'dir_exists',
    'file_exists',
    'find_mount_point',
    'host_path',
    'path_exists',
    'read_file',
    'write_file',
    'validate_image',
    'verify_mount',
    'verify_unmount',
]
