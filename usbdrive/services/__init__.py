"""Services package"""

from usbdrive.services.mount_service import MountService, require_root

__all__ = ['MountService', 'require_root']
