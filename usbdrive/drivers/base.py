"""Base gadget driver interface"""

from abc import ABC, abstractmethod
from typing import List

from usbdrive.models import MountOptions, MountStatus
from usbdrive.utils.fs import host_path


class BaseGadgetDriver(ABC):
    """
    Abstract base class for USB gadget backends.

    Drivers hold no state of their own; everything lives in the kernel's
    virtual filesystem under `root`. Constructing one is cheap and safe to
    repeat.
    """

    name = ''
    aliases: List[str] = []
    supports_read_write = False
    supports_cdrom = False
    expected_paths: List[str] = []

    def __init__(self, root: str = '/'):
        """
        Args:
            root: Filesystem root the kernel paths are resolved under
        """
        self.root = root

    def _path(self, path: str) -> str:
        return host_path(self.root, path)

    @property
    def capabilities(self) -> List[str]:
        caps = ['read-write' if self.supports_read_write else 'read-only']
        if self.supports_cdrom:
            caps.append('cdrom')
        return caps

    @abstractmethod
    def supported(self) -> bool:
        """
        Check if the kernel exposes this backend's interface.

        Returns:
            True if the backend can be used, False otherwise
        """
        pass

    @abstractmethod
    def mount(self, image_path: str, opts: MountOptions) -> None:
        """
        Expose an image as mass storage.

        Args:
            image_path: Absolute path of the image
            opts: Mount options

        Raises:
            USBDriveException: On the first failing step
        """
        pass

    @abstractmethod
    def unmount(self) -> None:
        """
        Remove the exposed image.

        Raises:
            USBDriveException: On the first failing step
        """
        pass

    @abstractmethod
    def status(self) -> MountStatus:
        """
        Read the current mount state. Never raises.

        Returns:
            MountStatus snapshot, not mounted on any internal failure
        """
        pass

    def __repr__(self):
        return f"<{self.__class__.__name__}(root='{self.root}')>"
