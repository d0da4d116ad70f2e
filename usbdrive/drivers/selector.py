"""Backend selection"""

from typing import List, Optional

from usbdrive.drivers.base import BaseGadgetDriver
from usbdrive.drivers.configfs import ConfigFSDriver
from usbdrive.drivers.sysfs import SysfsDriver
from usbdrive.drivers.udc import UDCDriver
from usbdrive.exceptions import (
    NoBackendFoundException, NotSupportedException, UnknownBackendException
)
from usbdrive.utils.logger import get_logger

LOG = get_logger(__name__)

# Preference order
DRIVER_CLASSES = [ConfigFSDriver, UDCDriver, SysfsDriver]


def backend_names() -> List[str]:
    """All accepted backend names, aliases included"""
    names = []
    for driver_class in DRIVER_CLASSES:
        names.append(driver_class.name)
        names.extend(driver_class.aliases)
    return names


def get_drivers(root: str = '/') -> List[BaseGadgetDriver]:
    """Driver instances in preference order"""
    return [driver_class(root=root) for driver_class in DRIVER_CLASSES]


def select_driver(force: Optional[str] = None, root: str = '/') -> BaseGadgetDriver:
    """
    Pick the gadget backend to use.

    Args:
        force: Backend name to use instead of auto-detection
        root: Filesystem root the kernel paths are resolved under

    Returns:
        A supported driver

    Raises:
        NotSupportedException: If the forced backend is unavailable
        UnknownBackendException: If the forced name matches no backend
        NoBackendFoundException: If auto-detection finds nothing
    """
    drivers = get_drivers(root)

    if force:
        for driver in drivers:
            if force == driver.name or force in driver.aliases:
                if driver.supported():
                    LOG.info(f"Using forced backend: {driver.name}")
                    return driver
                raise NotSupportedException(
                    f"backend '{force}' is not supported on this device\n"
                    f"Hint: Check if {' or '.join(driver.expected_paths)} exists"
                )
        raise UnknownBackendException(
            f"unknown backend '{force}'\n"
            f"Hint: Valid backends are {', '.join(repr(n) for n in backend_names())}"
        )

    for driver in drivers:
        if driver.supported():
            LOG.info(f"Selected backend: {driver.name}")
            return driver
        LOG.debug(f"Backend {driver.name} not supported")

    raise NoBackendFoundException(
        "no supported USB gadget backend found\n"
        "Hint: Your kernel may not support USB gadget mode. "
        "Check if configfs, android_usb, or UDC gadget is available"
    )
