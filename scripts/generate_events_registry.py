"""Render docs/Generated-Events.md from the event dataclasses.

Every public dataclass in modcore.events except BaseEvent becomes one
table row listing its payload fields.

  python scripts/generate_events_registry.py            # print
  python scripts/generate_events_registry.py --write    # update the doc
  python scripts/generate_events_registry.py --check    # exit 1 if stale
"""
from __future__ import annotations

import argparse
import importlib
import inspect
import sys
from dataclasses import fields, is_dataclass
from pathlib import Path
from types import ModuleType
from typing import List, Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:  # pragma: no cover
    sys.path.insert(0, str(ROOT))

DOC_PATH = ROOT / "docs" / "Generated-Events.md"


def load_events_module() -> ModuleType:
    return importlib.import_module("modcore.events")


def iter_event_classes(mod: ModuleType) -> List[type]:
    found = [
        obj
        for name, obj in inspect.getmembers(mod, inspect.isclass)
        if not name.startswith("_")
        and name != "BaseEvent"
        and is_dataclass(obj)
    ]
    return sorted(found, key=lambda c: c.__name__)


def format_table(classes: Sequence[type]) -> str:
    rows = [
        f"| {cls.__name__} | {', '.join(f.name for f in fields(cls))} |"
        for cls in classes
    ]
    return "\n".join(
        [
            "# Generated Events Registry",
            "",
            "| Event | Fields |",
            "|-------|--------|",
            *rows,
            "",
            "Generated automatically by scripts/generate_events_registry.py",
        ]
    )


def render() -> str:
    return format_table(iter_event_classes(load_events_module()))


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--write", action="store_true", help="update the doc")
    group.add_argument(
        "--check", action="store_true", help="fail if the doc is stale"
    )
    args = parser.parse_args(argv)
    table = render()
    if args.write:
        DOC_PATH.write_text(table + "\n", encoding="utf-8")
        return 0
    if args.check:
        current = DOC_PATH.read_text(encoding="utf-8") if DOC_PATH.exists() else ""
        if current.strip() != table.strip():
            sys.stderr.write(f"{DOC_PATH} is stale; rerun with --write\n")
            return 1
        return 0
    sys.stdout.write(table + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
