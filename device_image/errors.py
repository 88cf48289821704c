from __future__ import annotations


class ImageError(RuntimeError):
    """Base class for every failure raised while preparing an image."""


class ManifestReadError(ImageError):
    pass


class ManifestDecodeError(ImageError):
    pass


class ManifestTypeError(ImageError):
    pass


class NotFoundError(ImageError):
    pass


class PackageNotFoundError(NotFoundError):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"cannot find snap {name!r}: {reason}")
        self.name = name


class BootConfigNotFoundError(NotFoundError):
    def __init__(self, gadget_dir: str) -> None:
        super().__init__(f"cannot find boot config in {gadget_dir}")
        self.gadget_dir = gadget_dir


class BootloaderNotFoundError(NotFoundError):
    pass


class DownloadError(ImageError):
    pass


class CopyError(ImageError):
    pass


class AlreadyBootstrappedError(ImageError):
    pass


class OpenError(ImageError):
    pass


class ExtractError(ImageError):
    pass


class BootVarError(ImageError):
    pass


class SeedWriteError(ImageError):
    pass


class CommandError(ImageError):
    def __init__(self, argv: list[str], returncode: int, stderr: str) -> None:
        super().__init__(f"Command failed ({returncode}): {' '.join(argv)}\n{stderr}")
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
