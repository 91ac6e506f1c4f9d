import pytest
from pydantic import ValidationError

from modcore.registry import ModManifest


def test_camel_case_aliases_and_defaults():
    m = ModManifest.model_validate(
        {"id": "Core.Base", "loadBefore": ["B"], "loadAfter": "A"}
    )
    assert m.load_before == ("B",)
    assert m.load_after == ("A",)
    assert m.requires == ()
    assert m.display_name == "Core.Base"


def test_snake_case_names_accepted():
    m = ModManifest(id="x", load_after=("y",))
    assert m.load_after == ("y",)


def test_reference_lists_deduplicated_in_order():
    m = ModManifest.model_validate(
        {"id": "x", "requires": ["b", "a", "b", " a "]}
    )
    assert m.requires == ("b", "a")
    assert m.references() == ("b", "a")


def test_numeric_version_kept_as_text():
    assert ModManifest.model_validate({"id": "x", "version": 1.5}).version == "1.5"


@pytest.mark.parametrize(
    "data",
    [
        {"id": "  "},
        {"id": "x", "requires": [""]},
        {"id": "x", "unknown": 1},
        {"name": "no id"},
    ],
)
def test_invalid_manifests_rejected(data):
    with pytest.raises(ValidationError):
        ModManifest.model_validate(data)


def test_manifest_is_immutable():
    m = ModManifest(id="x")
    with pytest.raises(ValidationError):
        m.id = "y"
