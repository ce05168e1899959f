"""
Test loading params from TOML.
"""

from pathlib import Path

from pytest import raises

from hatchet.config import load_params
from hatchet.converting.deserializer import DeserializationParams
from hatchet.converting.serializer import SerializationParams

PYPROJECT = """
[project]
name = "example"

[tool.hatchet]
max_depth = 64

[tool.hatchet.serialize]
indent_width = 4
include_default_values = true

[tool.hatchet.deserialize]
fill_missing_defaults = false
"""


def test_load():
    """
    Test loading from TOML text.
    """
    deserialization_params, serialization_params = load_params(PYPROJECT)

    assert deserialization_params == DeserializationParams(
        max_depth=64, fill_missing_defaults=False
    )
    assert serialization_params == SerializationParams(
        max_depth=64, indent_width=4, include_default_values=True
    )


def test_load_file(tmp_path: Path):
    """
    Test loading from a file.
    """
    path = tmp_path / "pyproject.toml"
    path.write_text(PYPROJECT)

    _, serialization_params = load_params(path)
    assert serialization_params.indent_width == 4


def test_defaults():
    """
    Test documents without a table.
    """
    assert load_params('[project]\nname = "example"\n') == (
        DeserializationParams(),
        SerializationParams(),
    )


def test_shared_keys():
    """
    Test that keys at the top of the table apply to each direction accepting them.
    """
    deserialization_params, serialization_params = load_params(
        "[tool.hatchet]\nsort_sets = false\nmax_depth = 10\n"
    )

    assert deserialization_params == DeserializationParams(max_depth=10)
    assert serialization_params == SerializationParams(max_depth=10, sort_sets=False)


def test_unknown_keys():
    """
    Test that unknown keys are rejected.
    """
    with raises(ValueError):
        load_params("[tool.hatchet]\nindent = 4\n")

    with raises(ValueError):
        load_params("[tool.hatchet.deserialize]\nindent_width = 4\n")
