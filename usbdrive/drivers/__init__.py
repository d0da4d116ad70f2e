"""Gadget drivers package"""

from usbdrive.drivers.base import BaseGadgetDriver
from usbdrive.drivers.configfs import ConfigFSDriver
from usbdrive.drivers.sysfs import SysfsDriver
from usbdrive.drivers.udc import UDCDriver
from usbdrive.drivers.selector import backend_names, get_drivers, select_driver

__all__ = [
    'BaseGadgetDriver',
    'ConfigFSDriver',
    'SysfsDriver',
    'UDCDriver',
    'backend_names',
    'get_drivers',
    'select_driver',
]
