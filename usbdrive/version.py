from importlib.metadata import PackageNotFoundError, version

# Used when running from a source tree that was never installed
UNKNOWN_VERSION = '0.0.0'


def version_string():
    try:
        return version("usbdrive")
    except PackageNotFoundError:
        return UNKNOWN_VERSION
