# eggtimer/io/definitions.py
from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from eggtimer.core import InvalidSegmentDefinition, RegexpDef

_SECTION = "segments"


def definitions_from_mapping(payload: Mapping[str, Any]) -> list[RegexpDef]:
    """Build RegexpDefs from ``{type_name: {"start": expr, "finish": expr}}``.

    Definitions keep the mapping's order, which is their registration order.
    """
    if not isinstance(payload, Mapping):
        raise InvalidSegmentDefinition("Segment definitions must be a mapping.")

    definitions: list[RegexpDef] = []
    for type_name, body in payload.items():
        if not isinstance(body, Mapping):
            raise InvalidSegmentDefinition(
                f"{type_name}: definition must be a table with 'start' and 'finish'."
            )
        missing = [k for k in ("start", "finish") if k not in body]
        if missing:
            raise InvalidSegmentDefinition(
                f"{type_name}: missing {', '.join(repr(k) for k in missing)}."
            )
        definitions.append(RegexpDef(str(type_name), body["start"], body["finish"]))
    return definitions


def load_definitions(path: str | Path) -> list[RegexpDef]:
    """Load RegexpDefs from the ``[segments.<type>]`` tables of a TOML file.

    Example
    -------
    [segments.step]
    start = '^Start\\s+(\\w+)'
    finish = '^Finish\\s+(\\w+)'
    """
    path = Path(path).expanduser()
    with path.open("rb") as handle:
        try:
            data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as e:
            raise InvalidSegmentDefinition(f"{path}: {e}") from e

    section = data.get(_SECTION)
    if section is None:
        raise InvalidSegmentDefinition(f"{path}: no [{_SECTION}] table.")
    return definitions_from_mapping(section)
