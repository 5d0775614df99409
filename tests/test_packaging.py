from pathlib import Path

import pytest

import config
import main

ROOT = Path(__file__).resolve().parents[1]


def test_install_ships_no_top_level_modules():
    tomllib = pytest.importorskip("tomllib")
    with open(ROOT / "pyproject.toml", "rb") as f:
        setuptools_cfg = tomllib.load(f)["tool"]["setuptools"]
    assert setuptools_cfg["py-modules"] == []
    assert setuptools_cfg["packages"] == []


def test_backend_modules_load_from_source_tree():
    assert Path(main.__file__).resolve().parent == ROOT / "backend"
    assert Path(config.__file__).resolve().parent == ROOT / "backend"
