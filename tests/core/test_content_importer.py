from modcore import metrics
from modcore.catalogue import (
    ContentCatalogue,
    ContentDef,
    ContentTypeRegistry,
    JsonContentImporter,
)
from modcore.registry import FolderHandle


class ItemDef(ContentDef):
    price: int = 0


class RecipeDef(ContentDef):
    result: str = ""


def _importer():
    reg = ContentTypeRegistry()
    reg.register("Items", ItemDef)
    reg.register("Recipes", RecipeDef)
    cat = ContentCatalogue()
    return JsonContentImporter(cat, reg), cat


def test_object_and_array_files(write_mod):
    folder = write_mod(
        "base",
        content={
            "Items/a.json": {"id": "sword", "price": 10},
            "Items/b.json": [{"id": "shield"}, {"id": "potion", "price": 2}],
            "Recipes/r.json": [{"id": "r1", "result": "sword"}],
            "Items/notes.txt": "ignored",
        },
    )
    importer, cat = _importer()
    assert importer.import_package(FolderHandle(folder), "Base") == 4
    assert cat.count(ItemDef) == 3
    entry = cat.try_get_entry(ItemDef, "SWORD")
    assert entry.mod_id == "Base"
    assert entry.source_file.endswith("a.json")
    assert cat.try_get(RecipeDef, "r1").result == "sword"


def test_bad_files_and_entries_are_skipped(write_mod):
    metrics.reset_for_tests()
    folder = write_mod(
        "messy",
        content={
            "Items/broken.json": "{ not json",
            "Items/mixed.json": [
                {"price": 1},
                "scalar",
                {"id": "bad", "price": "expensive"},
                {"id": "bad2", "unknown": True},
                {"id": "good", "price": 3},
            ],
        },
    )
    importer, cat = _importer()
    assert importer.import_package(FolderHandle(folder), "Messy") == 1
    assert cat.try_get(ItemDef, "good").price == 3
    counters = metrics.snapshot()["counters"]
    assert counters["content_files_failed_total{reason=malformed_json}"] == 1
    assert counters["content_files_failed_total{reason=missing_id}"] == 2
    assert counters["content_files_failed_total{reason=validation}"] == 2


def test_later_package_overrides_earlier(write_mod):
    base = write_mod("base", content={"Items/i.json": {"id": "Potion", "price": 5}})
    patch = write_mod("patch", content={"Items/i.json": {"id": "potion", "price": 1}})
    importer, cat = _importer()
    importer.import_package(FolderHandle(base), "Base")
    importer.import_package(FolderHandle(patch), "Patch")
    assert cat.count(ItemDef) == 1
    entry = cat.try_get_entry(ItemDef, "Potion")
    assert entry.definition.price == 1
    assert entry.mod_id == "Patch"


def test_package_without_content_folders(write_mod):
    folder = write_mod("empty", {"id": "Empty"})
    importer, cat = _importer()
    assert importer.import_package(FolderHandle(folder), "Empty") == 0
    assert cat.count() == 0
