"""Mount service - policy around the gadget drivers"""

import os
from typing import Any, Dict, List, Optional, Tuple

from usbdrive.config import USBDriveConfig
from usbdrive.drivers import BaseGadgetDriver, get_drivers, select_driver
from usbdrive.exceptions import ConfigurationException, PermissionDeniedException
from usbdrive.lock_manager import GadgetLockManager
from usbdrive.models import MountOptions, MountStatus
from usbdrive.utils.logger import get_logger
from usbdrive.utils.validators import validate_image

LOG = get_logger(__name__)


def require_root() -> None:
    """
    Raises:
        PermissionDeniedException: If not running as root
    """
    if os.geteuid() != 0:
        raise PermissionDeniedException("must run as root")


class MountService:
    """Validates mount requests, picks a driver and runs it under the gadget lock"""

    def __init__(self, config: Optional[USBDriveConfig] = None,
                 lock_manager: Optional[GadgetLockManager] = None):
        self.config = config or USBDriveConfig()
        self.lock_manager = lock_manager or GadgetLockManager(
            lock_dir=self.config.lock_dir,
            timeout=self.config.lock_timeout,
        )

    def select(self, force: Optional[str] = None) -> BaseGadgetDriver:
        return select_driver(force or self.config.backend, root=self.config.root)

    def prepare_mount(self, image_path: str, read_write: bool = True, cdrom: bool = False,
                      force: Optional[str] = None) -> Tuple[BaseGadgetDriver, str, MountOptions]:
        """
        Validate a mount request and resolve what will actually be done.

        Args:
            image_path: Image to expose
            read_write: Expose writable
            cdrom: Emulate a CD-ROM drive
            force: Backend name to use instead of auto-detection

        Returns:
            (driver, absolute image path, effective options)

        Raises:
            ConfigurationException: If cdrom and read-write are both requested
            InvalidImageException: If the image fails validation
            NotSupportedException: If no usable backend is found
        """
        if cdrom and read_write:
            raise ConfigurationException(
                "cannot use cdrom with read-write (CDROM devices are always read-only)"
            )

        LOG.info(f"Validating image file: {image_path}")
        abs_path = validate_image(image_path)

        driver = self.select(force)

        if read_write and not driver.supports_read_write:
            LOG.warning(f"{driver.name} backend only supports read-only mode, forcing read-only")
            read_write = False
        if cdrom and not driver.supports_cdrom:
            LOG.warning(f"{driver.name} backend does not support CDROM mode")

        return driver, abs_path, MountOptions(read_write=read_write, cdrom=cdrom)

    def mount(self, image_path: str, read_write: bool = True, cdrom: bool = False,
              force: Optional[str] = None) -> BaseGadgetDriver:
        """
        Expose an image as USB mass storage.

        Returns:
            The driver that performed the mount

        Raises:
            USBDriveException: On validation, selection, locking or driver failure
        """
        driver, abs_path, opts = self.prepare_mount(image_path, read_write, cdrom, force)

        LOG.info(f"Preparing to mount: backend={driver.name}, file={abs_path}, mode={opts.mode}")
        with self.lock_manager.acquire_lock():
            driver.mount(abs_path, opts)

        LOG.info("Successfully mounted image")
        return driver

    def unmount(self, force: Optional[str] = None) -> BaseGadgetDriver:
        """
        Remove the exposed image.

        Returns:
            The driver that performed the unmount
        """
        driver = self.select(force)

        LOG.info(f"Preparing to unmount: backend={driver.name}")
        with self.lock_manager.acquire_lock():
            driver.unmount()

        LOG.info("Successfully unmounted image")
        return driver

    def status(self, force: Optional[str] = None) -> Tuple[Optional[BaseGadgetDriver], MountStatus]:
        """
        Report the mount state of the first supported backend.

        Returns:
            (driver, status), or (None, not mounted) if no backend is supported
        """
        if force or self.config.backend:
            driver = self.select(force)
            return driver, driver.status()

        for driver in get_drivers(self.config.root):
            if driver.supported():
                return driver, driver.status()

        return None, MountStatus.not_mounted()

    def plan_mount(self, image_path: str, read_write: bool = True, cdrom: bool = False,
                   force: Optional[str] = None) -> Dict[str, Any]:
        """
        Describe a mount without touching the gadget.

        Returns:
            Dictionary with backend, file, size, mode, capabilities and warnings
        """
        requested = MountOptions(read_write=read_write, cdrom=cdrom)
        driver, abs_path, opts = self.prepare_mount(image_path, read_write, cdrom, force)

        warnings: List[str] = []
        if requested.read_write and not driver.supports_read_write:
            warnings.append(f"{driver.name} backend only supports read-only mode")
        if requested.cdrom and not driver.supports_cdrom:
            warnings.append(f"{driver.name} backend does not support CDROM mode")

        return {
            'backend': driver.name,
            'file': abs_path,
            'size': os.path.getsize(abs_path),
            'mode': opts.mode,
            'capabilities': driver.capabilities,
            'warnings': warnings,
        }
