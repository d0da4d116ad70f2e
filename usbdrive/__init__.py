"""
usbdrive - expose disk images as USB mass storage

Drives the kernel's USB gadget control files so a host computer sees an
image file as a USB drive or CD-ROM. Three kernel interfaces are supported
behind one mount/unmount/status contract:

- configfs: the composable gadget tree (read-write, CD-ROM)
- udc: legacy gadgets exposing a LUN under /sys/class/udc (read-write)
- sysfs: the legacy Android android_usb interface (read-only)

Example:
    >>> from usbdrive import MountService
    >>>
    >>> service = MountService()
    >>> driver = service.mount('/sdcard/debian.iso', read_write=False, cdrom=True)
    >>> driver.status().file
    '/sdcard/debian.iso'
"""

from .models import (
    MountConfig,
    MountOptions,
    MountStatus,
)

from .drivers import (
    BaseGadgetDriver,
    ConfigFSDriver,
    SysfsDriver,
    UDCDriver,
    select_driver,
)

from .lock_manager import GadgetLockManager
from .config import USBDriveConfig, load_mount_config
from .services import MountService
from .version import version_string

__version__ = version_string()
__license__ = 'Apache 2.0'

__all__ = [
    # Models
    'MountConfig',
    'MountOptions',
    'MountStatus',

    # Drivers
    'BaseGadgetDriver',
    'ConfigFSDriver',
    'SysfsDriver',
    'UDCDriver',
    'select_driver',

    # Services
    'MountService',
    'GadgetLockManager',

    # Configuration
    'USBDriveConfig',
    'load_mount_config',

    # Version
    '__version__',
]
