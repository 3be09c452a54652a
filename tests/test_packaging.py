from __future__ import annotations

import importlib
from pathlib import Path
import tomllib


ROOT = Path(__file__).resolve().parents[1]


def _project() -> dict:
    with (ROOT / "pyproject.toml").open("rb") as handle:
        return tomllib.load(handle)


def test_declared_metadata_files_are_real_docs():
    project = _project()["project"]

    readme = project.get("readme")
    if readme is not None:
        path = ROOT / (readme if isinstance(readme, str) else readme["file"])
        assert path.is_file()
        assert path.name.lower().startswith("readme")


def test_packages_and_console_script_resolve():
    config = _project()
    for package in config["tool"]["setuptools"]["packages"]["find"]["include"]:
        assert (ROOT / package).is_dir()

    module_name, _, attribute = config["project"]["scripts"]["group-up"].partition(":")
    assert callable(getattr(importlib.import_module(module_name), attribute))
