"""Android sysfs (android_usb) gadget driver implementation"""

from usbdrive.drivers.base import BaseGadgetDriver
from usbdrive.exceptions import IOFailureException
from usbdrive.models import MountOptions, MountStatus
from usbdrive.utils.fs import file_exists, read_file, write_file
from usbdrive.utils.logger import get_logger

LOG = get_logger(__name__)

ANDROID_USB_ROOT = '/sys/devices/virtual/android_usb/android0'


class SysfsDriver(BaseGadgetDriver):
    """
    Driver for the legacy Android android_usb interface.

    Read-only, one fixed LUN. A failure part way through leaves USB disabled;
    this interface has no way to restore the previous state.
    """

    name = 'sysfs'
    supports_read_write = False
    supports_cdrom = False
    expected_paths = [ANDROID_USB_ROOT]

    @property
    def enable_file(self) -> str:
        return self._path(f"{ANDROID_USB_ROOT}/enable")

    @property
    def lun_file(self) -> str:
        return self._path(f"{ANDROID_USB_ROOT}/f_mass_storage/lun/file")

    @property
    def functions_file(self) -> str:
        return self._path(f"{ANDROID_USB_ROOT}/functions")

    def supported(self) -> bool:
        return file_exists(self.enable_file)

    def mount(self, image_path: str, opts: MountOptions) -> None:
        if opts.cdrom:
            LOG.warning("Sysfs backend does not support CDROM mode, ignoring cdrom option")
        if opts.read_write:
            LOG.warning("Sysfs backend does not support read-write mode, ignoring rw option")

        LOG.info("Disabling USB")
        self._set_enabled(False)

        LOG.info("Setting image file path")
        write_file(self.lun_file, image_path)

        LOG.info("Setting mass_storage function")
        write_file(self.functions_file, 'mass_storage')

        LOG.info("Enabling USB")
        self._set_enabled(True)

    def unmount(self) -> None:
        LOG.info("Disabling USB")
        self._set_enabled(False)

        LOG.info("Clearing image file path")
        write_file(self.lun_file, '')

        LOG.info("Resetting to MTP mode")
        write_file(self.functions_file, 'mtp')

        LOG.info("Enabling USB")
        self._set_enabled(True)

    def status(self) -> MountStatus:
        try:
            image = read_file(self.lun_file)
        except IOFailureException:
            return MountStatus.not_mounted()
        if not image:
            return MountStatus.not_mounted()

        return MountStatus(mounted=True, file=image, read_only=True, cdrom=False)

    def _set_enabled(self, enabled: bool) -> None:
        write_file(self.enable_file, '1' if enabled else '0')
