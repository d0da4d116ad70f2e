"""
usbdrive Configuration Module
Tool settings are loaded from:
1. INI config file (/etc/usbdrive/usbdrive.conf, or $USBDRIVE_CONFIG)
2. Environment variables (override config file)
3. Default values (fallback)

Mount requests can also come from a JSON mount configuration, see
load_mount_config().
"""

import json
import os
from configparser import ConfigParser, Error as ConfigParserError
from typing import Any, Dict, Optional

from usbdrive.drivers.selector import backend_names
from usbdrive.exceptions import ConfigurationException
from usbdrive.models import MODE_READ_WRITE, MountConfig
from usbdrive.utils.logger import LOG_FORMATS, LOG_LEVELS, get_logger
from usbdrive.utils.validators import validate_mount_mode

LOG = get_logger(__name__)


def _default_lock_dir() -> str:
    # Android has no /run; /data/local/tmp is writable by root there
    if os.path.isdir('/data/local/tmp'):
        return '/data/local/tmp/usbdrive'
    return '/run/lock/usbdrive'


class USBDriveConfig:
    """usbdrive Configuration Manager"""

    CONFIG_FILE = '/etc/usbdrive/usbdrive.conf'
    SECTION = 'usbdrive'

    DEFAULT_ROOT = '/'
    DEFAULT_LOCK_TIMEOUT = 30
    DEFAULT_LOG_LEVEL = 'ERROR'
    DEFAULT_LOG_FORMAT = 'text'

    # key -> environment variable
    ENV_VARS = {
        'root': 'USBDRIVE_ROOT',
        'lock_dir': 'USBDRIVE_LOCK_DIR',
        'lock_timeout': 'USBDRIVE_LOCK_TIMEOUT',
        'log_level': 'USBDRIVE_LOG_LEVEL',
        'log_format': 'USBDRIVE_LOG_FORMAT',
        'backend': 'USBDRIVE_BACKEND',
    }

    def __init__(self, root: str = DEFAULT_ROOT, lock_dir: Optional[str] = None,
                 lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
                 log_level: str = DEFAULT_LOG_LEVEL,
                 log_format: str = DEFAULT_LOG_FORMAT,
                 backend: Optional[str] = None):
        self.root = root
        self.lock_dir = lock_dir or _default_lock_dir()
        self.lock_timeout = lock_timeout
        self.log_level = log_level
        self.log_format = log_format
        self.backend = backend

    @classmethod
    def load(cls, config_file: Optional[str] = None,
             environ: Optional[Dict[str, str]] = None) -> 'USBDriveConfig':
        """
        Load configuration with priority: env var > config file > default.

        Args:
            config_file: Path to INI file (default: $USBDRIVE_CONFIG or CONFIG_FILE)
            environ: Environment mapping (default: os.environ)

        Raises:
            ConfigurationException: If a value is invalid
        """
        environ = os.environ if environ is None else environ
        if config_file is None:
            config_file = environ.get('USBDRIVE_CONFIG', cls.CONFIG_FILE)

        config_data = cls._load_ini_file(config_file)
        for key, env_var in cls.ENV_VARS.items():
            if environ.get(env_var):
                config_data[key] = environ[env_var]

        config = cls._from_dict(config_data)
        LOG.debug(f"Configuration loaded: {config.to_dict()}")
        return config

    @classmethod
    def _load_ini_file(cls, config_file: str) -> Dict[str, Any]:
        """
        Load configuration from INI file.

        Expected format:
        [usbdrive]
        lock_dir = /data/local/tmp/usbdrive
        lock_timeout = 30
        log_level = INFO
        log_format = json
        backend = configfs
        """
        config_data = {}

        if not os.path.exists(config_file):
            LOG.debug(f"Config file not found: {config_file}, using defaults")
            return config_data

        parser = ConfigParser()
        try:
            parser.read(config_file)
        except ConfigParserError as e:
            raise ConfigurationException(f"Failed to parse config file {config_file}: {e}") from e

        if parser.has_section(cls.SECTION):
            config_data.update(parser.items(cls.SECTION))

        LOG.info(f"Loaded {len(config_data)} config parameters from {config_file}")
        return config_data

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> 'USBDriveConfig':
        try:
            lock_timeout = float(data.get('lock_timeout', cls.DEFAULT_LOCK_TIMEOUT))
        except (TypeError, ValueError):
            raise ConfigurationException(
                f"Invalid lock_timeout: {data.get('lock_timeout')} (must be a number)"
            )
        if lock_timeout < 0:
            raise ConfigurationException(f"Invalid lock_timeout: {lock_timeout} (must be >= 0)")

        log_level = str(data.get('log_level', cls.DEFAULT_LOG_LEVEL)).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationException(
                f"Invalid log_level: {log_level} (must be one of {', '.join(LOG_LEVELS)})"
            )

        log_format = str(data.get('log_format', cls.DEFAULT_LOG_FORMAT)).lower()
        if log_format not in LOG_FORMATS:
            raise ConfigurationException(
                f"Invalid log_format: {log_format} (must be text or json)"
            )

        return cls(
            root=data.get('root') or cls.DEFAULT_ROOT,
            lock_dir=data.get('lock_dir') or None,
            lock_timeout=lock_timeout,
            log_level=log_level,
            log_format=log_format,
            backend=data.get('backend') or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'root': self.root,
            'lock_dir': self.lock_dir,
            'lock_timeout': self.lock_timeout,
            'log_level': self.log_level,
            'log_format': self.log_format,
            'backend': self.backend,
        }


def load_mount_config(path: str) -> MountConfig:
    """
    Load a JSON mount configuration.

    Expected format:
        {"file": "/sdcard/x.iso", "mode": "cdrom", "backend": "configfs"}

    Args:
        path: Path to the JSON file

    Returns:
        MountConfig with an absolute image path

    Raises:
        ConfigurationException: If the file is unreadable or invalid
    """
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationException(f"read config file: {e}") from e
    except ValueError as e:
        raise ConfigurationException(f"parse config file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationException("config file must contain a JSON object")

    image = data.get('file')
    if not image:
        raise ConfigurationException("config missing required field: file")
    if not isinstance(image, str):
        raise ConfigurationException("config field 'file' must be a string")

    image = os.path.abspath(image)

    mode = data.get('mode') or MODE_READ_WRITE
    if not validate_mount_mode(mode):
        raise ConfigurationException(f"invalid mode: {mode} (must be ro, rw, or cdrom)")

    backend = data.get('backend') or None
    if backend is not None and backend not in backend_names():
        raise ConfigurationException(
            f"invalid backend: {backend} (must be {', '.join(backend_names())})"
        )

    return MountConfig(file=image, mode=mode, backend=backend)
