"""
Loading of conversion params from a `[tool.hatchet]` table in a TOML document,
e.g. `pyproject.toml`:

```toml
[tool.hatchet]
max_depth = 64

[tool.hatchet.serialize]
indent_width = 4
include_default_values = true

[tool.hatchet.deserialize]
fill_missing_defaults = false
```
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any

import tomlkit

from .converting.deserializer import DeserializationParams
from .converting.frame import BaseConversionParams
from .converting.serializer import SerializationParams

__all__ = [
    "TABLE_NAME",
    "load_params",
]

logger = logging.getLogger(__name__)

TABLE_NAME = "hatchet"
"""
Name of table under `[tool]`.
"""

_SUBTABLES = ("serialize", "deserialize")


def load_params(
    source: Path | str, /
) -> tuple[DeserializationParams, SerializationParams]:
    """
    Load params from a TOML file or TOML text. Keys at the top of the table apply to
    each direction accepting them and are overridden by keys in the respective
    sub-table.

    :param source: Path to a TOML file, or TOML text
    :raises ValueError: If the table contains unknown keys
    """
    text = source.read_text() if isinstance(source, Path) else source
    document = tomlkit.loads(text).unwrap()
    table: dict[str, Any] = document.get("tool", {}).get(TABLE_NAME, {})

    shared = {k: v for k, v in table.items() if k not in _SUBTABLES}

    deserialization_params = _create_params(
        DeserializationParams, shared, table.get("deserialize", {})
    )
    serialization_params = _create_params(
        SerializationParams, shared, table.get("serialize", {})
    )

    logger.debug(
        "Loaded params: %s, %s", deserialization_params, serialization_params
    )
    return deserialization_params, serialization_params


def _create_params[ParamsT: BaseConversionParams](
    params_cls: type[ParamsT], shared: dict[str, Any], overrides: dict[str, Any]
) -> ParamsT:
    field_names = {f.name for f in dataclasses.fields(params_cls)}
    base_names = {f.name for f in dataclasses.fields(BaseConversionParams)}

    # shared keys may only be common params or apply to this direction
    unknown = [
        k
        for k in shared
        if k not in base_names
        and k not in field_names
        and not _is_field_of_other(k, params_cls)
    ]
    unknown += [k for k in overrides if k not in field_names]
    if unknown:
        raise ValueError(
            "Unknown keys for {}: {}".format(params_cls.__name__, ", ".join(unknown))
        )

    kwargs = {k: v for k, v in shared.items() if k in field_names}
    kwargs.update(overrides)
    return params_cls(**kwargs)


def _is_field_of_other(name: str, params_cls: type[BaseConversionParams]) -> bool:
    other_cls = (
        SerializationParams
        if params_cls is DeserializationParams
        else DeserializationParams
    )
    return name in {f.name for f in dataclasses.fields(other_cls)}
