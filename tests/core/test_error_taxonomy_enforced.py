import pytest
from modcore.errors import (
    ErrorKind,
    LoadError,
    ManifestError,
    ResolutionError,
    StateStoreError,
    validate_error_type,
)


def test_error_taxonomy_known():
    assert validate_error_type("missing-dependency") == "missing-dependency"
    assert validate_error_type("config-out-of-range") == "config-out-of-range"
    for kind in ErrorKind:
        assert validate_error_type(kind.value) == kind.value


def test_error_taxonomy_unknown():
    with pytest.raises(AssertionError):
        validate_error_type("not-a-code")


def test_only_graph_errors_are_fatal():
    fatal = {k for k in ErrorKind if k.fatal}
    assert fatal == {
        ErrorKind.MISSING_DEPENDENCY,
        ErrorKind.CIRCULAR_DEPENDENCY,
    }


def test_exceptions_map_to_load_errors():
    err = ManifestError("bad manifest", ("a",)).to_load_error()
    assert err.kind is ErrorKind.MANIFEST_ERROR
    assert err.involved_ids == ("a",)
    assert StateStoreError("disk").to_load_error().kind is ErrorKind.IO_ERROR
    res = ResolutionError(ErrorKind.CIRCULAR_DEPENDENCY, "cycle", ("a", "b"))
    assert res.to_load_error() == LoadError(
        ErrorKind.CIRCULAR_DEPENDENCY, "cycle", ("a", "b")
    )
    assert res.to_load_error().to_dict() == {
        "kind": "circular-dependency",
        "message": "cycle",
        "involved_ids": ["a", "b"],
    }
