"""Device image preparation.

Turns a signed model assertion into a populated root directory:
- fetch the gadget, kernel, core and required snaps (store mirror or sideload)
- record them in the seed for the first-boot initializer
- install the gadget's bootloader config
- point the bootloader at the kernel/core blobs

Runs fail fast and are not resumable: a failed target is discarded.
"""

__all__ = []
