from modcore.state import ModStateTable, StateEntry


def _table(*ids, disabled=()):
    return ModStateTable(
        mods=tuple(
            StateEntry(id=mid, enabled=mid not in disabled, order=i)
            for i, mid in enumerate(ids)
        )
    )


def test_unknown_id_is_not_enabled():
    assert ModStateTable().is_enabled("nope") is False
    assert len(ModStateTable()) == 0


def test_ordered_ids_follow_order_field():
    table = ModStateTable(
        mods=(
            StateEntry(id="B", order=1),
            StateEntry(id="A", order=0),
            StateEntry(id="B", order=2),
        )
    )
    assert table.ordered_ids() == ["A", "B"]


def test_merge_keeps_flags_and_defaults_new_to_enabled():
    table = _table("A", "B", disabled=("B",))
    merged = table.merged(["B", "C", "A"])
    assert merged.ordered_ids() == ["B", "C", "A"]
    assert merged.is_enabled("B") is False
    assert merged.is_enabled("C") is True
    assert [e.order for e in merged.mods] == [0, 1, 2]


def test_vanished_package_goes_dormant_and_comes_back():
    table = _table("A", "B", disabled=("B",))
    without_b = table.merged(["A"])
    assert without_b.ordered_ids() == ["A"]
    assert [e.id for e in without_b.dormant] == ["B"]
    assert without_b.seed_ids() == ["A", "B"]
    back = without_b.merged(["A", "B"])
    assert back.is_enabled("B") is False
    assert back.dormant == ()


def test_with_enabled_is_copy_on_write():
    table = _table("A", "B")
    off = table.with_enabled("A", False)
    assert off is not None
    assert off.is_enabled("A") is False
    assert table.is_enabled("A") is True
    assert table.with_enabled("Ghost", False) is None


def test_moved_renumbers():
    table = _table("A", "B", "C", disabled=("C",))
    moved = table.moved("C", 0)
    assert moved.ordered_ids() == ["C", "A", "B"]
    assert [e.order for e in moved.mods] == [0, 1, 2]
    assert moved.is_enabled("C") is False
    assert table.ordered_ids() == ["A", "B", "C"]


def test_moved_rejects_bad_input():
    table = _table("A", "B")
    assert table.moved("Ghost", 0) is None
    assert table.moved("A", 2) is None
    assert table.moved("A", -1) is None
