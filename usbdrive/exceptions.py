"""
Custom exceptions for usbdrive
"""


class USBDriveException(Exception):
    """Base exception for usbdrive"""
    pass


class NotSupportedException(USBDriveException):
    """Exception raised when a backend is unavailable on this kernel"""
    pass


class NoBackendFoundException(NotSupportedException):
    """Exception raised when no gadget backend is available at all"""
    pass


class NotFoundException(USBDriveException):
    """Exception raised when no gadget, LUN or UDC can be discovered"""
    pass


class IOFailureException(USBDriveException):
    """Exception raised when reading or writing a kernel attribute fails"""
    pass


class VerifyFailedException(USBDriveException):
    """Exception raised when a LUN readback does not match what was written"""
    pass


class InvalidImageException(USBDriveException):
    """Exception raised when an image path fails validation"""
    pass


class ConfigurationException(USBDriveException):
    """Exception raised for malformed or incomplete configuration"""
    pass


class UnknownBackendException(ConfigurationException):
    """Exception raised when a backend name matches no known backend"""
    pass


class PermissionDeniedException(USBDriveException):
    """Exception raised when running without sufficient privilege"""
    pass


class LockTimeoutException(USBDriveException):
    """Exception raised when the gadget lock cannot be acquired in time"""
    pass
