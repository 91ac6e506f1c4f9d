"""Pytest configuration ensuring project root is importable.

Adds repository root and src/ to sys.path explicitly to avoid
interpreter/path quirks, isolates config between tests and provides small
builders for on-disk mod folders.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
import os
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def _isolate_config_env():  # noqa: D401
    """Ensure global config/env side effects do not leak between tests.

    - Clear aggregated config cache between tests
    - Restore MODHOST_CONFIG_DIR to original value
    """
    from modcore.config import clear_config_cache  # local import

    prev = os.environ.get("MODHOST_CONFIG_DIR")
    clear_config_cache()
    try:
        yield
    finally:
        clear_config_cache()
        if prev is None:
            os.environ.pop("MODHOST_CONFIG_DIR", None)
        else:
            os.environ["MODHOST_CONFIG_DIR"] = prev


@pytest.fixture()
def mods_root(tmp_path: Path) -> Path:
    root = tmp_path / "mods"
    root.mkdir()
    return root


@pytest.fixture()
def write_mod(mods_root: Path):
    """write_mod(folder, manifest_dict, content={"Items/a.json": [...]})."""

    def _write(
        folder: str,
        manifest: dict | None = None,
        content: dict | None = None,
        manifest_name: str = "manifest.json",
    ) -> Path:
        mod_dir = mods_root / folder
        mod_dir.mkdir(parents=True, exist_ok=True)
        if manifest is not None:
            (mod_dir / manifest_name).write_text(
                json.dumps(manifest), encoding="utf-8"
            )
        for rel, data in (content or {}).items():
            target = mod_dir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(data, str):
                target.write_text(data, encoding="utf-8")
            else:
                target.write_text(json.dumps(data), encoding="utf-8")
        return mod_dir

    return _write
