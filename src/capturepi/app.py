"""Assemble the capture service from configuration and run it."""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from pathlib import Path
from typing import Optional, Sequence, Tuple
from uuid import UUID

from .config.runtime import CaptureConfig, load_config
from .config.system_config import SystemConfig
from .core.capture import Capture
from .core.context import CaptureContext
from .core.controller import SessionController
from .dataio.export import export_csv
from .hardware.interface import HardwareInterface
from .hardware.platform import build_platform
from .store.base import StoreIOError
from .store.factory import build_store
from .tools.logging_setup import configure_logging

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_CONFIG = Path("~/.config/capturepi/system.yaml")


def build_context(
    config: Optional[CaptureConfig] = None,
    system_config: Optional[SystemConfig] = None,
) -> Tuple[CaptureContext, SessionController]:
    """
    Build the platform, store, and controller described by the configuration.

    Keypad presses on the platform are wired to the controller's signal queue.
    """
    config = config or load_config()
    if system_config is None:
        system_config = SystemConfig.load(config.system_config_path or DEFAULT_SYSTEM_CONFIG)

    platform = build_platform(config.board)
    if not system_config.sensors:
        # bind every platform sensor under its own name
        for sensor in platform.get_sensors():
            system_config.set_sensor(sensor.name, sensor.serial, sensor.type)
    hardware = HardwareInterface(platform, system_config)
    if system_config.path is not None and not system_config.initialized_from_file():
        # leave a starter system.yaml listing the attached sensors
        system_config.save()
        logger.info("Wrote system config to %s", system_config.path)
    store = build_store(config.store, system_config.system_uuid)

    context = CaptureContext(
        config=config,
        system_config=system_config,
        hardware=hardware,
        store=store,
    )
    controller = SessionController(context)
    hardware.set_signal_sink(controller.enqueue_signal)
    return context, controller


def main() -> None:
    """Run the capture controller until SIGINT/SIGTERM."""
    configure_logging()
    context, controller = build_context()
    done = threading.Event()

    def _handle(signum, _frame) -> None:
        logger.info("Received signal %s, shutting down", signum)
        done.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)

    controller.start()
    try:
        done.wait()
    finally:
        controller.stop()
        context.store.close()


def export_main(argv: Optional[Sequence[str]] = None) -> int:
    """List stored captures or export one of them to CSV."""
    ap = argparse.ArgumentParser(description="Export captures from the configured store to CSV.")
    ap.add_argument("capture", nargs="?", help="Location UUID of the capture to export")
    ap.add_argument("--config", type=str, default=None, help="Path to capturepi.yaml (default: $CAPTUREPI_CONFIG)")
    ap.add_argument("--list", action="store_true", help="List indexed captures and exit")
    ap.add_argument("--out", type=str, default=None, help="CSV file to write (default: ./<capture>.csv)")
    args = ap.parse_args(argv)

    configure_logging()
    config = load_config(args.config)
    store = build_store(config.store)
    try:
        if args.list:
            for description in store.get_capture_locations():
                print(f"{description.location}  {description.created_time.isoformat()}  {description.frequency:g} Hz")
            return 0
        if not args.capture:
            ap.error("a capture location is required unless --list is given")
        try:
            location = UUID(args.capture)
        except ValueError:
            ap.error(f"not a capture location: {args.capture!r}")
        capture = Capture.open(store, location)
        out = export_csv(capture, Path(args.out or f"{location}.csv"))
        logger.info("Exported %d samples to %s", capture.get_sample_count(), out)
        return 0
    except StoreIOError as exc:
        logger.error("Export failed: %s", exc)
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    main()
