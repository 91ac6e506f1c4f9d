import textwrap

import pytest

from modcore.errors import ManifestError
from modcore.registry import FolderModSource, YamlManifestReader, load_manifest


def test_discover_only_folders_with_manifest(mods_root, write_mod):
    write_mod("b_mod", {"id": "B"})
    write_mod("a_mod", {"id": "A"})
    (mods_root / "no_manifest").mkdir()
    (mods_root / "stray.txt").write_text("x", encoding="utf-8")
    handles = list(FolderModSource(mods_root, ["manifest.json"]).discover())
    assert [h.path.name for h in handles] == ["a_mod", "b_mod"]


def test_missing_root_discovers_nothing(tmp_path):
    assert list(FolderModSource(tmp_path / "absent").discover()) == []


def test_yaml_manifest(mods_root, write_mod):
    folder = write_mod("core")
    (folder / "manifest.yaml").write_text(
        textwrap.dedent(
            """
            id: Core
            name: Core Content
            version: 1.0
            loadBefore: [Extras]
            """
        ),
        encoding="utf-8",
    )
    handle = next(iter(FolderModSource(mods_root).discover()))
    m = YamlManifestReader().read_manifest(handle)
    assert m.id == "Core"
    assert m.name == "Core Content"
    assert m.version == "1.0"
    assert m.load_before == ("Extras",)


def test_json_manifest_with_bom(mods_root, write_mod):
    folder = write_mod("core")
    (folder / "manifest.json").write_bytes(
        b"\xef\xbb\xbf" + b'{"id": "Core", "requires": ["Base"]}'
    )
    handle = next(iter(FolderModSource(mods_root).discover()))
    assert load_manifest(handle).requires == ("Base",)


def test_tabs_are_tolerated(mods_root, write_mod):
    folder = write_mod("tabbed")
    (folder / "manifest.yaml").write_text(
        "id: Tabbed\nloadAfter:\n\t- Core\n", encoding="utf-8"
    )
    handle = next(iter(FolderModSource(mods_root).discover()))
    assert YamlManifestReader().read_manifest(handle).load_after == ("Core",)


@pytest.mark.parametrize(
    "text",
    [
        "id: [unclosed",
        "- just\n- a list\n",
        "name: no id here\n",
    ],
)
def test_malformed_manifest_raises(mods_root, write_mod, text):
    folder = write_mod("bad")
    (folder / "manifest.yaml").write_text(text, encoding="utf-8")
    handle = next(iter(FolderModSource(mods_root).discover()))
    with pytest.raises(ManifestError):
        YamlManifestReader().read_manifest(handle)


def test_no_manifest_raises(mods_root, write_mod):
    from modcore.registry import FolderHandle

    folder = write_mod("empty")
    with pytest.raises(ManifestError):
        YamlManifestReader(["manifest.json"]).read_manifest(FolderHandle(folder))


def test_first_configured_name_wins(mods_root, write_mod):
    folder = write_mod("both", {"id": "FromJson"})
    (folder / "manifest.yaml").write_text("id: FromYaml\n", encoding="utf-8")
    handle = next(iter(FolderModSource(mods_root).discover()))
    reader = YamlManifestReader(["manifest.json", "manifest.yaml"])
    assert reader.read_manifest(handle).id == "FromJson"


def test_default_names_cover_yml(mods_root, write_mod):
    folder = write_mod("short_ext")
    (folder / "manifest.yml").write_text("id: ShortExt\n", encoding="utf-8")
    handles = list(FolderModSource(mods_root).discover())
    assert [h.path.name for h in handles] == ["short_ext"]
    assert YamlManifestReader().read_manifest(handles[0]).id == "ShortExt"
