"""Validation utilities"""

import os

from usbdrive.exceptions import InvalidImageException
from usbdrive.models import MOUNT_MODES

DENIED_PREFIXES = [
    '/system', '/sys', '/proc', '/dev',
    '/etc', '/bin', '/sbin', '/boot',
    '/root', '/data/system', '/data/data',
]

MAX_SYMLINK_HOPS = 16


def validate_mount_mode(mode: str) -> bool:
    """Validate mount mode name"""
    return mode in MOUNT_MODES


def is_denied_path(path: str) -> str:
    """
    Check a path against the system directory deny-list.

    Returns:
        The matching denied prefix, or '' if the path is allowed
    """
    for prefix in DENIED_PREFIXES:
        if path == prefix or path.startswith(prefix + '/'):
            return prefix
    return ''


def validate_safe_path(path: str) -> None:
    """
    Reject paths inside system directories, following symlinks.

    A symlink inside an allowed directory may point into a denied one, so
    every hop of the link chain is checked.

    Raises:
        InvalidImageException: If any hop is denied or the chain is too long
    """
    current = path
    for _ in range(MAX_SYMLINK_HOPS + 1):
        denied = is_denied_path(current)
        if denied:
            raise InvalidImageException(
                f"cannot mount files from system directory: {denied}"
            )

        try:
            target = os.readlink(current)
        except OSError:
            return

        if not os.path.isabs(target):
            target = os.path.join(os.path.dirname(current), target)
        current = os.path.normpath(target)

    raise InvalidImageException(
        f"too many levels of symbolic links: {path}"
    )


def validate_image(path: str) -> str:
    """
    Validate a disk image before exposing it.

    Args:
        path: Image path, absolute or relative

    Returns:
        Absolute image path

    Raises:
        InvalidImageException: If the image is unsafe, missing, empty or unreadable
    """
    if not path:
        raise InvalidImageException("image path is empty")

    abs_path = os.path.abspath(path)
    validate_safe_path(abs_path)

    try:
        st = os.stat(abs_path)
    except FileNotFoundError:
        raise InvalidImageException(f"file does not exist: {abs_path}")
    except OSError as e:
        raise InvalidImageException(f"cannot access file: {e}") from e

    if os.path.isdir(abs_path):
        raise InvalidImageException(f"path is a directory: {abs_path}")

    if not os.path.isfile(abs_path):
        raise InvalidImageException(f"not a regular file: {abs_path}")

    if st.st_size == 0:
        raise InvalidImageException(f"file is empty: {abs_path}")

    try:
        with open(abs_path, 'rb'):
            pass
    except OSError as e:
        raise InvalidImageException(f"file not readable: {e}") from e

    return abs_path
