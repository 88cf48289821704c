from __future__ import annotations

import argparse
import logging
from typing import Optional

from .errors import ImageError
from .image import bootstrap_to_root_dir, prepare
from .image_config import ImageConfig, ImageOptions, load_image_config
from .logging_utils import DEFAULT_LOG_PATH, configure_logging

logger = logging.getLogger(__name__)


def run(
    options: ImageOptions,
    *,
    log_path: str = DEFAULT_LOG_PATH,
    bootstrap_only: bool = False,
    verbose: bool = False,
) -> None:
    configure_logging(log_path=log_path, level=logging.DEBUG if verbose else logging.INFO)

    try:
        if not options.model_file:
            raise ImageError("a model assertion is required (--model or 'model' in the config)")
        if not options.gadget_unpack_dir:
            raise ImageError(
                "a gadget unpack dir is required (--gadget-unpack-dir or 'gadget_unpack_dir' in the config)"
            )

        logger.info(
            "Preparing image: model=%s root_dir=%s channel=%s extra=%s",
            options.model_file,
            options.root_dir or "/",
            options.channel,
            ",".join(options.packages) or "-",
        )
        if bootstrap_only:
            bootstrap_to_root_dir(options)
        else:
            prepare(options)
    except Exception as e:
        logger.exception("Image preparation failed: %s (discard %s and start again)", e, options.root_dir or "/")
        raise


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="device-image")
    p.add_argument("--config", default=None, help="Image config (yaml)")
    p.add_argument("--model", default=None, help="Path to the model assertion")
    p.add_argument("--root-dir", default=None, help="Target root directory")
    p.add_argument("--gadget-unpack-dir", default=None, help="Where to unpack the gadget snap")
    p.add_argument("--channel", default=None, help="Channel to fetch snaps from (default: stable)")
    p.add_argument("--snap", action="append", default=[], help="Extra snap name or local .snap file (repeatable)")
    p.add_argument("--mirror", default=None, help="Offline store mirror directory")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to log file")
    p.add_argument("--bootstrap-only", action="store_true", help="Skip the gadget fetch/unpack")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output (commands, progress)")

    args = p.parse_args(argv)

    cfg = load_image_config(args.config) if args.config else ImageConfig(raw={})
    options = ImageOptions.from_config(
        cfg,
        model_file=args.model,
        root_dir=args.root_dir,
        gadget_unpack_dir=args.gadget_unpack_dir,
        channel=args.channel,
        packages=args.snap,
        mirror_dir=args.mirror,
    )

    try:
        run(options, log_path=args.log, bootstrap_only=bool(args.bootstrap_only), verbose=bool(args.verbose))
    except ImageError:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
