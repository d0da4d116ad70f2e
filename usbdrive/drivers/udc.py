"""UDC-bound legacy gadget driver implementation"""

import os
from typing import Optional

from usbdrive.drivers.base import BaseGadgetDriver
from usbdrive.drivers.binding import SoftDisconnect
from usbdrive.exceptions import IOFailureException, NotFoundException
from usbdrive.models import MountOptions, MountStatus
from usbdrive.utils.fs import dir_exists, file_exists, list_entries, read_file, write_file
from usbdrive.utils.logger import get_logger
from usbdrive.utils.verification import verify_mount, verify_unmount

LOG = get_logger(__name__)

UDC_CLASS_DIR = '/sys/class/udc'
LUN_RELATIVE_PATH = os.path.join('device', 'gadget', 'lun0', 'file')


class UDCDriver(BaseGadgetDriver):
    """
    Driver for gadgets that expose their LUN directly under a UDC.

    Covers both legacy variants: soft_connect is used when the controller
    has it, and the lun0/ro attribute is honored when present.
    """

    name = 'udc'
    aliases = ['legacy']
    supports_read_write = True
    supports_cdrom = False
    expected_paths = [f"{UDC_CLASS_DIR}/*/{LUN_RELATIVE_PATH}"]

    def supported(self) -> bool:
        return self._find_controller() is not None

    def mount(self, image_path: str, opts: MountOptions) -> None:
        if opts.cdrom:
            LOG.warning("UDC backend does not support CDROM mode, ignoring cdrom option")

        controller_dir = self._require_controller()
        lun_file = os.path.join(controller_dir, LUN_RELATIVE_PATH)
        ro_file = os.path.join(os.path.dirname(lun_file), 'ro')

        with SoftDisconnect(os.path.join(controller_dir, 'soft_connect')):
            LOG.info("Clearing LUN file")
            write_file(lun_file, '')

            if file_exists(ro_file):
                self._set_read_only(ro_file, not opts.read_write)

            LOG.info("Writing image path to LUN")
            write_file(lun_file, image_path)

            LOG.info("Verifying mount")
            verify_mount(lun_file, image_path)
            LOG.info("Mount verified successfully")

    def unmount(self) -> None:
        lun_file = os.path.join(self._require_controller(), LUN_RELATIVE_PATH)

        LOG.info("Clearing LUN file")
        write_file(lun_file, '')

        LOG.info("Verifying unmount")
        verify_unmount(lun_file)
        LOG.info("Unmount verified successfully")

    def status(self) -> MountStatus:
        controller_dir = self._find_controller()
        if controller_dir is None:
            return MountStatus.not_mounted()

        lun_file = os.path.join(controller_dir, LUN_RELATIVE_PATH)
        try:
            image = read_file(lun_file)
        except IOFailureException:
            return MountStatus.not_mounted()
        if not image:
            return MountStatus.not_mounted()

        read_only = False
        ro_file = os.path.join(os.path.dirname(lun_file), 'ro')
        if file_exists(ro_file):
            try:
                read_only = read_file(ro_file) == '1'
            except IOFailureException:
                pass

        return MountStatus(mounted=True, file=image, read_only=read_only, cdrom=False)

    def _find_controller(self) -> Optional[str]:
        """First UDC directory that exposes a gadget LUN file"""
        udc_dir = self._path(UDC_CLASS_DIR)
        if not dir_exists(udc_dir):
            return None

        try:
            controllers = list_entries(udc_dir)
        except IOFailureException:
            return None

        for controller in controllers:
            controller_dir = os.path.join(udc_dir, controller)
            if file_exists(os.path.join(controller_dir, LUN_RELATIVE_PATH)):
                return controller_dir
        return None

    def _require_controller(self) -> str:
        controller_dir = self._find_controller()
        if controller_dir is None:
            raise NotFoundException("no lun file found")
        LOG.info(f"Found UDC gadget: {controller_dir}")
        return controller_dir

    @staticmethod
    def _set_read_only(ro_file: str, read_only: bool) -> None:
        # ro may ship as 0444 on these kernels
        try:
            os.chmod(ro_file, 0o644)
        except OSError as e:
            LOG.warning(f"Failed to make {ro_file} writable: {e}")

        ro_value = '1' if read_only else '0'
        LOG.info(f"Setting read-only flag: {ro_value}")
        write_file(ro_file, ro_value)
