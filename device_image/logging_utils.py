from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

DEFAULT_LOG_PATH = "/var/log/device-image.log"
FALLBACK_LOG_NAME = "device-image.log"

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(message)s"

# marks the handlers installed here so a later call can replace them
_HANDLER_TAG = "_device_image_handler"


def _open_file_handler(candidates: List[str]) -> Optional[logging.FileHandler]:
    for path in candidates:
        try:
            Path(os.path.dirname(path) or ".").mkdir(parents=True, exist_ok=True)
            return logging.FileHandler(path)
        except OSError:
            continue
    return None


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Route device-image logging to a file and, optionally, the console.

    ``log_path`` is tried first, then ``./device-image.log``. The boot-ok
    helper runs on devices whose root may still be read-only, so when neither
    is writable only the console handler is installed.

    Calling it again (a second image run in the same process) swaps the
    handlers installed by the previous call rather than stacking new ones.

    Returns the file path in use, or ``""`` when logging to the console only.
    """

    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG, False):
            root.removeHandler(h)
            h.close()

    handlers: list[logging.Handler] = []
    file_handler = _open_file_handler([log_path, str(Path.cwd() / FALLBACK_LOG_NAME)])
    chosen_path = file_handler.baseFilename if file_handler is not None else ""
    if file_handler is not None:
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
        handlers.append(file_handler)

    if also_console or file_handler is None:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
        handlers.append(console)

    for h in handlers:
        setattr(h, _HANDLER_TAG, True)
        root.addHandler(h)

    log = logging.getLogger(__name__)
    if chosen_path:
        log.info("Logging initialized (requested=%s, actual=%s)", log_path, chosen_path)
    else:
        log.warning("Cannot write %s or ./%s; logging to the console only", log_path, FALLBACK_LOG_NAME)
    return chosen_path
