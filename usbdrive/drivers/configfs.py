"""ConfigFS gadget driver implementation"""

import os

from usbdrive.drivers.base import BaseGadgetDriver
from usbdrive.drivers.binding import DetachedGadget
from usbdrive.exceptions import IOFailureException, NotFoundException, USBDriveException
from usbdrive.models import MountOptions, MountStatus
from usbdrive.utils.fs import (
    dir_exists, find_mount_point, list_entries, path_exists, read_file, write_file
)
from usbdrive.utils.logger import get_logger
from usbdrive.utils.verification import verify_mount, verify_unmount

LOG = get_logger(__name__)

UDC_CLASS_DIR = '/sys/class/udc'


class ConfigFSDriver(BaseGadgetDriver):
    """Driver for the composable configfs gadget API."""

    name = 'configfs'
    supports_read_write = True
    supports_cdrom = True
    expected_paths = ['/sys/kernel/config/usb_gadget', '/config/usb_gadget']

    GADGET_NAME = 'g1'
    CONFIG_NAME = 'c.1'
    FUNCTION_NAME = 'mass_storage.0'
    LUN_NAME = 'lun.0'

    ID_VENDOR = '0x18d1'
    ID_PRODUCT = '0x4e26'
    STRINGS_LANG = '0x409'
    SERIAL_NUMBER = '123456'
    MANUFACTURER = 'Android'
    PRODUCT = 'USB Drive'
    CONFIGURATION = 'Config 1'

    def supported(self) -> bool:
        mount_point = find_mount_point('configfs', root=self.root)
        if not mount_point:
            return False
        return dir_exists(self._path(mount_point))

    def mount(self, image_path: str, opts: MountOptions) -> None:
        """
        Expose an image through the configfs mass storage function.

        Args:
            image_path: Absolute path of the image
            opts: Mount options, read-write and cdrom are both honored

        Raises:
            USBDriveException: On the first failing step, after the UDC
                binding has been restored
        """
        gadget_root = self._find_gadget_root()
        LOG.info(f"Found USB gadget: {gadget_root}")

        config_root = self._find_config_root(gadget_root)

        function_root = self._function_root(gadget_root)
        lun_root = os.path.join(function_root, self.LUN_NAME)
        lun_file = os.path.join(lun_root, 'file')

        with DetachedGadget(self._udc_file(gadget_root)):
            self._ensure_function(function_root, lun_root)
            self._ensure_link(function_root, config_root)

            LOG.info("Clearing LUN file")
            write_file(lun_file, '')

            cdrom_value = '1' if opts.cdrom else '0'
            LOG.info(f"Setting CDROM flag: {cdrom_value}")
            write_file(os.path.join(lun_root, 'cdrom'), cdrom_value)

            ro_value = '0' if opts.read_write else '1'
            LOG.info(f"Setting read-only flag: {ro_value}")
            write_file(os.path.join(lun_root, 'ro'), ro_value)

            LOG.info("Writing image path to LUN")
            write_file(lun_file, image_path)

            LOG.info("Verifying mount")
            verify_mount(lun_file, image_path)
            LOG.info("Mount verified successfully")

    def unmount(self) -> None:
        """
        Clear the LUN of the active gadget.

        Raises:
            USBDriveException: On the first failing step, after the UDC
                binding has been restored
        """
        gadget_root = self._find_gadget_root()
        lun_file = os.path.join(self._function_root(gadget_root), self.LUN_NAME, 'file')

        with DetachedGadget(self._udc_file(gadget_root)):
            LOG.info("Clearing LUN file")
            write_file(lun_file, '')

            LOG.info("Verifying unmount")
            verify_unmount(lun_file)
            LOG.info("Unmount verified successfully")

    def status(self) -> MountStatus:
        try:
            gadget_root = self._find_gadget_root(create=False)
        except USBDriveException as e:
            LOG.debug(f"No configfs gadget: {e}")
            return MountStatus.not_mounted()

        function_root = self._function_root(gadget_root)
        if not dir_exists(function_root):
            return MountStatus.not_mounted()

        lun_root = os.path.join(function_root, self.LUN_NAME)
        try:
            image = read_file(os.path.join(lun_root, 'file'))
        except IOFailureException:
            return MountStatus.not_mounted()
        if not image:
            return MountStatus.not_mounted()

        return MountStatus(
            mounted=True,
            file=image,
            read_only=self._read_flag(os.path.join(lun_root, 'ro')),
            cdrom=self._read_flag(os.path.join(lun_root, 'cdrom')),
        )

    def _udc_file(self, gadget_root: str) -> str:
        return os.path.join(gadget_root, 'UDC')

    def _function_root(self, gadget_root: str) -> str:
        return os.path.join(gadget_root, 'functions', self.FUNCTION_NAME)

    @staticmethod
    def _read_flag(path: str) -> bool:
        try:
            return read_file(path) == '1'
        except IOFailureException:
            return False

    def _find_gadget_root(self, create: bool = True) -> str:
        """
        Locate the gadget to operate on.

        The first gadget bound to a UDC wins. When none is bound a gadget
        named g1 is used, and created first if `create` is set.

        Raises:
            NotFoundException: If configfs is not mounted, or no gadget exists
                and `create` is False
            IOFailureException: If the gadget tree cannot be read or created
        """
        mount_point = find_mount_point('configfs', root=self.root)
        if not mount_point:
            raise NotFoundException("configfs not mounted")

        gadget_dir = os.path.join(self._path(mount_point), 'usb_gadget')
        if not dir_exists(gadget_dir):
            if not create:
                raise NotFoundException(f"no usb_gadget directory in {mount_point}")
            LOG.info(f"Creating {gadget_dir}")
            self._makedirs(gadget_dir)

        for name in list_entries(gadget_dir):
            gadget_path = os.path.join(gadget_dir, name)
            try:
                if read_file(self._udc_file(gadget_path)):
                    return gadget_path
            except IOFailureException:
                continue

        gadget_path = os.path.join(gadget_dir, self.GADGET_NAME)
        if dir_exists(gadget_path):
            return gadget_path
        if not create:
            raise NotFoundException("no active USB gadget")

        self._create_gadget(gadget_path)
        return gadget_path

    def _create_gadget(self, gadget_path: str) -> None:
        LOG.info(f"Creating new USB gadget: {gadget_path}")
        self._makedirs(gadget_path)

        write_file(os.path.join(gadget_path, 'idVendor'), self.ID_VENDOR)
        write_file(os.path.join(gadget_path, 'idProduct'), self.ID_PRODUCT)

        strings_dir = os.path.join(gadget_path, 'strings', self.STRINGS_LANG)
        self._makedirs(strings_dir)
        write_file(os.path.join(strings_dir, 'serialnumber'), self.SERIAL_NUMBER)
        write_file(os.path.join(strings_dir, 'manufacturer'), self.MANUFACTURER)
        write_file(os.path.join(strings_dir, 'product'), self.PRODUCT)

        config_strings_dir = os.path.join(
            gadget_path, 'configs', self.CONFIG_NAME, 'strings', self.STRINGS_LANG
        )
        self._makedirs(config_strings_dir)
        write_file(os.path.join(config_strings_dir, 'configuration'), self.CONFIGURATION)

        self._bind_first_udc(gadget_path)

    def _bind_first_udc(self, gadget_path: str) -> None:
        udc_dir = self._path(UDC_CLASS_DIR)
        try:
            controllers = list_entries(udc_dir)
        except IOFailureException as e:
            LOG.warning(f"Cannot list UDC controllers: {e}")
            return

        for controller in controllers:
            try:
                write_file(self._udc_file(gadget_path), controller)
            except IOFailureException as e:
                LOG.debug(f"UDC {controller} rejected binding: {e}")
                continue
            LOG.info(f"Enabled USB gadget on UDC {controller}")
            return

        LOG.warning("No UDC controller accepted the new gadget")

    def _find_config_root(self, gadget_root: str) -> str:
        configs_dir = os.path.join(gadget_root, 'configs')
        if not dir_exists(configs_dir):
            self._makedirs(configs_dir)

        entries = list_entries(configs_dir)
        if entries:
            return os.path.join(configs_dir, entries[0])

        return os.path.join(configs_dir, self.CONFIG_NAME)

    def _ensure_function(self, function_root: str, lun_root: str) -> None:
        if not dir_exists(function_root):
            LOG.info("Creating mass storage function")
        # configfs creates lun.0 together with the function
        self._makedirs(lun_root)

    def _ensure_link(self, function_root: str, config_root: str) -> None:
        config_link = os.path.join(config_root, self.FUNCTION_NAME)
        if path_exists(config_link) or os.path.islink(config_link):
            return

        LOG.info("Linking mass storage to config")
        try:
            os.makedirs(config_root, mode=0o755, exist_ok=True)
            os.symlink(function_root, config_link)
        except OSError as e:
            raise IOFailureException(f"link mass_storage to config: {e}") from e

    @staticmethod
    def _makedirs(path: str) -> None:
        try:
            os.makedirs(path, mode=0o755, exist_ok=True)
        except OSError as e:
            raise IOFailureException(f"create {path}: {e}") from e
