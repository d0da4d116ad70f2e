"""
LUN readback checks shared by every backend.

Kernels can silently reject a LUN write (controller still bound, refused
path), so each write is confirmed by reading the attribute back.
"""

from usbdrive.exceptions import IOFailureException, VerifyFailedException
from usbdrive.utils.fs import read_file


def verify_mount(lun_file: str, expected_path: str) -> None:
    """
    Confirm the LUN file holds the expected image path.

    Raises:
        VerifyFailedException: On readback failure or mismatch
    """
    try:
        mounted_path = read_file(lun_file)
    except IOFailureException as e:
        raise VerifyFailedException(f"failed to read LUN file: {e}") from e

    if mounted_path != expected_path:
        raise VerifyFailedException(
            f"expected {expected_path}, got {mounted_path or '<empty>'}"
        )


def verify_unmount(lun_file: str) -> None:
    """
    Confirm the LUN file is empty.

    Raises:
        VerifyFailedException: On readback failure or leftover content
    """
    try:
        content = read_file(lun_file)
    except IOFailureException as e:
        raise VerifyFailedException(f"failed to read LUN file: {e}") from e

    if content:
        raise VerifyFailedException(f"LUN file not empty: {content}")
