from pathlib import Path

from scripts.generate_events_registry import (
    load_events_module,
    iter_event_classes,
    format_table,
)

DOC = Path(__file__).resolve().parents[2] / "docs" / "Generated-Events.md"


def test_generated_events_registry_in_sync():
    mod = load_events_module()
    classes = iter_event_classes(mod)
    generated = format_table(classes).strip().splitlines()
    current = DOC.read_text(encoding="utf-8").strip().splitlines()
    gen_rows = [row for row in generated if row.startswith("| ")]
    cur_rows = [row for row in current if row.startswith("| ")]
    assert gen_rows == cur_rows, "Events registry out of sync. Run generator."


def test_check_mode_accepts_current_doc():
    from scripts.generate_events_registry import main

    assert main(["--check"]) == 0
