from __future__ import annotations

import pytest

from device_image.image_config import ImageConfig, ImageOptions, load_image_config


def test_load_image_config(tmp_path):
    p = tmp_path / "image.yaml"
    p.write_text(
        "model: pc.model\n"
        "root_dir: build/root\n"
        "gadget_unpack_dir: build/gadget\n"
        "channel: edge\n"
        "snaps: [htop, ./local.snap]\n"
        "store:\n"
        "  mirror: /srv/mirror\n",
        encoding="utf-8",
    )

    opts = ImageOptions.from_config(load_image_config(str(p)))

    assert opts == ImageOptions(
        model_file="pc.model",
        packages=("htop", "./local.snap"),
        root_dir="build/root",
        channel="edge",
        gadget_unpack_dir="build/gadget",
        mirror_dir="/srv/mirror",
    )


def test_overrides_win_and_blanks_are_ignored():
    cfg = ImageConfig(raw={"model": "a.model", "channel": "beta", "snaps": ["x"]})

    opts = ImageOptions.from_config(cfg, model_file="b.model", channel=None, packages=[], root_dir="")

    assert opts.model_file == "b.model"
    assert opts.channel == "beta"
    assert opts.packages == ("x",)
    assert opts.root_dir == ""


def test_defaults():
    opts = ImageOptions.from_config()
    assert opts.channel == "stable"
    assert opts.packages == ()


def test_load_image_config_requires_yaml(tmp_path):
    p = tmp_path / "image.json"
    p.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError):
        load_image_config(str(p))
