"""
Path and IO primitives for kernel attribute files.

Kernel attribute files hold a single value, usually terminated by a newline.
Reads are trimmed and writes replace the whole value.
"""

import os

from usbdrive.exceptions import IOFailureException
from usbdrive.utils.logger import get_logger

LOG = get_logger(__name__)

MOUNTS_FILE = '/proc/mounts'
CONFIGFS_FALLBACK_PATHS = ['/sys/kernel/config', '/config']


def host_path(root: str, path: str) -> str:
    """
    Map a kernel-absolute path under a filesystem root.

    Args:
        root: Filesystem root ('/' on a real device)
        path: Absolute kernel path, e.g. /sys/class/udc

    Returns:
        Path as seen from this process
    """
    if not root or root == '/':
        return path
    return os.path.join(root, path.lstrip('/'))


def file_exists(path: str) -> bool:
    try:
        return os.path.isfile(path)
    except (OSError, ValueError):
        return False


def dir_exists(path: str) -> bool:
    try:
        return os.path.isdir(path)
    except (OSError, ValueError):
        return False


def path_exists(path: str) -> bool:
    try:
        return os.path.exists(path)
    except (OSError, ValueError):
        return False


def read_file(path: str) -> str:
    """
    Read a kernel attribute, stripping surrounding whitespace.

    Raises:
        IOFailureException: If the file cannot be read
    """
    try:
        with open(path, 'r') as f:
            return f.read().strip()
    except OSError as e:
        raise IOFailureException(f"read {path}: {e}") from e


def write_file(path: str, content: str) -> None:
    """
    Write a kernel attribute followed by a single newline.

    Raises:
        IOFailureException: If the file cannot be written
    """
    LOG.debug(f"Writing '{content}' to {path}")
    try:
        with open(path, 'w') as f:
            f.write(content + '\n')
    except OSError as e:
        raise IOFailureException(f"write {path}: {e}") from e


def list_entries(path: str) -> list:
    """Sorted directory entries, skipping dotfiles"""
    try:
        names = os.listdir(path)
    except OSError as e:
        raise IOFailureException(f"read dir {path}: {e}") from e
    return sorted(name for name in names if not name.startswith('.'))


def find_mount_point(fs_type: str, root: str = '/') -> str:
    """
    Find where a filesystem type is mounted.

    Some Android kernels mount configfs without a visible /proc/mounts entry,
    so configfs falls back to its well-known locations.

    Args:
        fs_type: Filesystem type, e.g. 'configfs'
        root: Filesystem root

    Returns:
        Kernel-absolute mount point, or '' if none was found
    """
    try:
        with open(host_path(root, MOUNTS_FILE), 'r') as f:
            for line in f:
                fields = line.split()
                if len(fields) >= 3 and fields[2] == fs_type:
                    return fields[1]
    except OSError as e:
        LOG.debug(f"Cannot read mount table: {e}")

    if fs_type == 'configfs':
        for candidate in CONFIGFS_FALLBACK_PATHS:
            if dir_exists(host_path(root, candidate)):
                return candidate

    return ''
