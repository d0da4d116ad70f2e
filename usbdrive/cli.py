"""
Command-line interface for usbdrive
"""

import json
import logging
import sys

import click
from tabulate import tabulate

from usbdrive.config import USBDriveConfig, load_mount_config
from usbdrive.drivers import backend_names
from usbdrive.exceptions import USBDriveException
from usbdrive.services import MountService, require_root
from usbdrive.utils.logger import LOG_LEVELS, get_logger, setup_logging
from usbdrive.version import version_string

LOG = get_logger(__name__)

VERBOSE_HINT = "Hint: Try running with -v for verbose output"


def _fail(message: str, hint: str = '') -> None:
    click.secho(f"✗ {message}", fg='red', err=True)
    if hint:
        click.echo(hint, err=True)
    sys.exit(1)


def _apply_verbose(ctx, verbose: bool) -> None:
    config = ctx.obj['config']
    if not verbose or ctx.obj['log_level_set']:
        return
    if logging.getLevelName(config.log_level) > logging.INFO:
        setup_logging('INFO', config.log_format)


@click.group()
@click.option('--settings', 'settings_file', type=click.Path(dir_okay=False),
              help='Settings file (default: $USBDRIVE_CONFIG or /etc/usbdrive/usbdrive.conf)')
@click.option('--log-level',
              type=click.Choice(LOG_LEVELS, case_sensitive=False),
              help='Log level')
@click.pass_context
def cli(ctx, settings_file, log_level):
    """Mount disk images as USB mass storage"""
    ctx.ensure_object(dict)

    try:
        config = USBDriveConfig.load(settings_file)
    except USBDriveException as e:
        _fail(f"Error loading settings: {e}")

    if log_level:
        config.log_level = log_level.upper()
    setup_logging(config.log_level, config.log_format)

    ctx.obj['config'] = config
    ctx.obj['log_level_set'] = bool(log_level)
    ctx.obj['service'] = MountService(config)


@cli.command()
@click.argument('file', required=False)
@click.option('--config', '-c', 'config_file', type=click.Path(dir_okay=False),
              help='Load mount configuration from JSON file')
@click.option('--rw', is_flag=True, help='Mount as read-write (default)')
@click.option('--ro', is_flag=True, help='Mount as read-only')
@click.option('--cdrom', is_flag=True, help='Mount as CDROM device')
@click.option('--force', '-f', 'force', type=click.Choice(backend_names()),
              help='Force backend')
@click.option('--dry-run', '-n', is_flag=True, help='Preview operation without executing')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def mount(ctx, file, config_file, rw, ro, cdrom, force, dry_run, verbose):
    """
    Mount a disk image as USB mass storage device.

    Default mode is read-write, --cdrom implies read-only.

    Examples:
      usbdrive mount /sdcard/debian.iso --cdrom
      usbdrive mount -c /sdcard/usbdrive.json
    """
    _apply_verbose(ctx, verbose)
    service = ctx.obj['service']

    if rw and ro:
        _fail("cannot use --ro with --rw (conflicting flags)")

    if config_file:
        try:
            mount_config = load_mount_config(config_file)
        except USBDriveException as e:
            _fail(f"failed to load config: {e}")
        LOG.info(f"Loaded configuration: {config_file}")
        image_path = mount_config.file
        opts = mount_config.to_options()
        read_write, use_cdrom = opts.read_write, opts.cdrom
        force = force or mount_config.backend
    else:
        if not file:
            _fail("missing file argument")
        image_path = file
        use_cdrom = cdrom
        read_write = rw or (not ro and not cdrom)

    try:
        require_root()

        if dry_run:
            plan = service.plan_mount(image_path, read_write, use_cdrom, force)
            click.echo("Dry run: Would mount with the following settings:")
            click.echo(f"  Backend: {plan['backend']}")
            click.echo(f"  File: {plan['file']}")
            click.echo(f"  Size: {plan['size']} bytes ({plan['size'] / 1024 / 1024:.2f} MB)")
            click.echo(f"  Mode: {plan['mode']}")
            click.echo(f"  Capabilities: {', '.join(plan['capabilities'])}")
            for warning in plan['warnings']:
                click.echo(f"  WARNING: {warning}")
            return

        driver = service.mount(image_path, read_write, use_cdrom, force)
    except USBDriveException as e:
        _fail(f"mount failed: {e}", VERBOSE_HINT)

    click.secho(f"✓ Mounted {image_path} via {driver.name}", fg='green')


@cli.command()
@click.option('--force', '-f', 'force', type=click.Choice(backend_names()),
              help='Force backend')
@click.option('--dry-run', '-n', is_flag=True, help='Preview operation without executing')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def unmount(ctx, force, dry_run, verbose):
    """Unmount currently mounted disk image."""
    _apply_verbose(ctx, verbose)
    service = ctx.obj['service']

    try:
        require_root()

        if dry_run:
            driver = service.select(force)
            click.echo(f"Dry run: Would unmount using backend: {driver.name}")
            current = driver.status()
            if current.mounted:
                click.echo(f"  Currently mounted: {current.file}")
                click.echo(f"  Current mode: {current.mode}")
            else:
                click.echo("  Status: No image currently mounted")
            return

        driver = service.unmount(force)
    except USBDriveException as e:
        _fail(f"unmount failed: {e}", VERBOSE_HINT)

    click.secho(f"✓ Unmounted image via {driver.name}", fg='green')


@cli.command()
@click.option('--force', '-f', 'force', type=click.Choice(backend_names()),
              help='Query a specific backend')
@click.option('--format', 'output_format', type=click.Choice(['table', 'json']),
              default='table', help='Output format')
@click.pass_context
def status(ctx, force, output_format):
    """Show current mount status including backend, file, and mount mode."""
    service = ctx.obj['service']

    try:
        driver, current = service.status(force)
    except USBDriveException as e:
        _fail(f"status failed: {e}")

    if driver is None:
        click.echo("No active USB gadget found")
        return

    if output_format == 'json':
        data = current.to_dict()
        data['backend'] = driver.name
        click.echo(json.dumps(data, indent=2))
        return

    data = [['Backend', driver.name]]
    if current.mounted:
        data.append(['Status', 'Mounted'])
        data.append(['File', current.file])
        data.append(['Mode', current.mode])
    else:
        data.append(['Status', 'Not mounted'])
    click.echo(tabulate(data, tablefmt='grid'))


@cli.command()
def version():
    """Print usbdrive version"""
    click.echo(f"usbdrive version {version_string()}")


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
