from __future__ import annotations

import argparse
import logging
from typing import Optional

from .errors import ImageError
from .lib.bootloader import find_bootloader
from .lib.bootvars import mark_boot_successful
from .lib.env import Dirs
from .logging_utils import DEFAULT_LOG_PATH, configure_logging

logger = logging.getLogger(__name__)


def main(argv: Optional[list[str]] = None) -> int:
    """Confirm the running kernel/core once the system came up."""

    p = argparse.ArgumentParser(prog="device-image-boot-ok")
    p.add_argument("--root-dir", default="/", help="Root holding /boot")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to log file")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        bootloader = find_bootloader(Dirs.for_root(args.root_dir))
        mark_boot_successful(bootloader)
    except ImageError:
        logger.exception("Cannot mark boot successful")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
