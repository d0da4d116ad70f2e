"""
Scoped ownership of a disconnected gadget.

LUN attributes can only change while the gadget is off the bus. These scopes
take the gadget off on entry and put it back on every exit path. A failure to
put it back is logged and never replaces the error that ended the scope.
"""

from usbdrive.exceptions import IOFailureException
from usbdrive.utils.fs import file_exists, read_file, write_file
from usbdrive.utils.logger import get_logger

LOG = get_logger(__name__)


class DetachedGadget:
    """
    Exclusive access to a configfs gadget unbound from its UDC.

    Example:
        with DetachedGadget(udc_file) as detached:
            write_file(lun_file, image_path)
        # UDC re-bound to detached.controller here
    """

    def __init__(self, udc_file: str):
        self.udc_file = udc_file
        self.controller = ''
        self._detached = False

    def __enter__(self):
        self.controller = read_file(self.udc_file)
        LOG.info(f"Current UDC controller: {self.controller or '<none>'}")

        LOG.info("Disabling UDC")
        write_file(self.udc_file, '')
        self._detached = True
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if self._detached and self.controller:
            LOG.info(f"Re-enabling UDC {self.controller}")
            try:
                write_file(self.udc_file, self.controller)
            except IOFailureException as e:
                LOG.error(f"Failed to re-enable UDC {self.controller}: {e}")
        self._detached = False
        return False


class SoftDisconnect:
    """
    Soft-disconnect a UDC for the duration of the scope.

    Controllers without a soft_connect attribute, or that refuse the write,
    are left alone; some re-enumerate on their own when the LUN changes.
    """

    def __init__(self, soft_connect_file: str):
        self.soft_connect_file = soft_connect_file
        self._present = False

    def __enter__(self):
        self._present = bool(self.soft_connect_file) and file_exists(self.soft_connect_file)
        if not self._present:
            LOG.info("No soft_connect attribute, skipping USB disconnect")
            return self

        LOG.info("Disconnecting USB")
        try:
            write_file(self.soft_connect_file, 'disconnect')
        except IOFailureException as e:
            LOG.warning(f"Failed to disconnect USB: {e}")
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if self._present:
            LOG.info("Reconnecting USB")
            try:
                write_file(self.soft_connect_file, 'connect')
            except IOFailureException as e:
                LOG.warning(f"Failed to reconnect USB: {e}")
        self._present = False
        return False
