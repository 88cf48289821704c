from __future__ import annotations

import re
import struct
import zlib

import pytest

from device_image.errors import BootVarError
from device_image.lib.bootloader import Grub, Uboot
from device_image.lib.grubenv import GRUBENV_HEADER, GRUBENV_SIZE, GrubEnv
from device_image.lib.uenv import DEFAULT_ENV_SIZE, HEADER_SIZE, UbootEnv


def test_grubenv_block_layout(tmp_path):
    env = GrubEnv(tmp_path / "grubenv")
    env.set("snap_kernel", "pc-kernel_3.snap")
    env.save()

    raw = (tmp_path / "grubenv").read_bytes()
    assert len(raw) == GRUBENV_SIZE
    assert raw.startswith(GRUBENV_HEADER + b"snap_kernel=pc-kernel_3.snap\n")
    assert raw.endswith(b"#")


def test_grubenv_reads_editenv_output(tmp_path):
    body = GRUBENV_HEADER + b"snap_mode=trying\nsnap_try_core=core_2.snap\n"
    (tmp_path / "grubenv").write_bytes(body + b"#" * (GRUBENV_SIZE - len(body)))

    env = GrubEnv(tmp_path / "grubenv").load()

    assert env.get("snap_mode") == "trying"
    assert env.get("snap_try_core") == "core_2.snap"
    assert env.get("snap_kernel") == ""


def test_grubenv_rejects_overflow(tmp_path):
    env = GrubEnv(tmp_path / "grubenv")
    env.set("big", "x" * GRUBENV_SIZE)
    with pytest.raises(ValueError):
        env.encode()


def test_uenv_missing_file_is_empty_default_size(tmp_path):
    env = UbootEnv(tmp_path / "uboot.env").load()
    assert env.items() == {}
    env.set("snap_core", "core_1.snap")
    env.save()

    raw = (tmp_path / "uboot.env").read_bytes()
    assert len(raw) == DEFAULT_ENV_SIZE
    (crc,) = struct.unpack("<I", raw[:4])
    assert crc == zlib.crc32(raw[HEADER_SIZE:]) & 0xFFFFFFFF
    assert raw[HEADER_SIZE:].startswith(b"snap_core=core_1.snap\x00\x00")


def test_uenv_keeps_gadget_variables_and_size(tmp_path):
    data = b"bootcmd=run snappy_boot\x00\x00"
    data += b"\x00" * (8192 - HEADER_SIZE - len(data))
    header = struct.pack("<I", zlib.crc32(data) & 0xFFFFFFFF) + b"\x01"
    (tmp_path / "uboot.env").write_bytes(header + data)

    env = UbootEnv(tmp_path / "uboot.env").load()
    env.set("snap_kernel", "pc-kernel_3.snap")
    env.save()

    reloaded = UbootEnv(tmp_path / "uboot.env").load()
    assert reloaded.size == 8192
    assert reloaded.flags == 1
    assert reloaded.items() == {"bootcmd": "run snappy_boot", "snap_kernel": "pc-kernel_3.snap"}


def test_uenv_empty_value_unsets(tmp_path):
    env = UbootEnv(tmp_path / "uboot.env").load()
    env.set("snap_mode", "trying")
    env.set("snap_mode", "")
    assert "snap_mode" not in env.items()
    assert env.get("snap_mode") == ""


def test_uboot_bad_crc_is_boot_var_error(dirs):
    bl = Uboot(dirs)
    bl.env_file.parent.mkdir(parents=True)
    bl.env_file.write_bytes(b"\x00\x00\x00\x00\x00snap_mode=trying\x00\x00" + b"\x00" * 64)

    with pytest.raises(BootVarError, match="snap_mode"):
        bl.get_boot_var("snap_mode")


def test_grub_corrupt_env_is_boot_var_error(dirs):
    bl = Grub(dirs)
    bl.env_file.parent.mkdir(parents=True)
    bl.env_file.write_bytes(b"not a grubenv")

    with pytest.raises(BootVarError, match=re.escape(str(bl.env_file))):
        bl.set_boot_var("snap_kernel", "k1")
