"""
Data models for usbdrive mount requests and state.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


MODE_READ_ONLY = 'ro'
MODE_READ_WRITE = 'rw'
MODE_CDROM = 'cdrom'
MOUNT_MODES = [MODE_READ_ONLY, MODE_READ_WRITE, MODE_CDROM]


def describe_mode(read_write: bool, cdrom: bool) -> str:
    """Human readable mount mode"""
    if cdrom:
        return 'cdrom'
    if read_write:
        return 'read-write'
    return 'read-only'


@dataclass(frozen=True)
class MountOptions:
    """Options for a single mount call"""

    read_write: bool = True
    cdrom: bool = False

    @property
    def mode(self) -> str:
        return describe_mode(self.read_write, self.cdrom)


@dataclass(frozen=True)
class MountStatus:
    """
    Snapshot of the LUN state read from the kernel.

    `file`, `read_only` and `cdrom` are only meaningful when `mounted` is True.
    """

    mounted: bool = False
    file: str = ''
    read_only: bool = False
    cdrom: bool = False

    @classmethod
    def not_mounted(cls) -> 'MountStatus':
        return cls()

    @property
    def mode(self) -> str:
        return describe_mode(not self.read_only, self.cdrom)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['mode'] = self.mode if self.mounted else None
        return data


@dataclass
class MountConfig:
    """Decoded JSON mount configuration"""

    file: str
    mode: str = MODE_READ_WRITE
    backend: Optional[str] = None

    def to_options(self) -> MountOptions:
        if self.mode == MODE_CDROM:
            return MountOptions(read_write=False, cdrom=True)
        if self.mode == MODE_READ_ONLY:
            return MountOptions(read_write=False, cdrom=False)
        return MountOptions(read_write=True, cdrom=False)
