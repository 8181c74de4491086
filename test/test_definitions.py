# test/test_definitions.py
import pytest

from eggtimer.core import InvalidSegmentDefinition, RegexpDef
from eggtimer.io.definitions import definitions_from_mapping, load_definitions


def test_definitions_from_mapping_keeps_order():
    defs = definitions_from_mapping({
        "step": {"start": r"^Start\s+(\w+)", "finish": r"^Finish\s+(\w+)"},
        "phase": {"start": r"^>> (\w+)", "finish": r"^<< (\w+)"},
    })
    assert [d.type_name for d in defs] == ["step", "phase"]
    assert all(isinstance(d, RegexpDef) for d in defs)
    assert defs[1].is_start(">> link") == "link"


@pytest.mark.parametrize(
    "payload",
    [
        {"step": {"start": r"(\w+)"}},
        {"step": "not a table"},
        ["step"],
    ],
)
def test_definitions_from_mapping_rejects_bad_payloads(payload):
    with pytest.raises(InvalidSegmentDefinition):
        definitions_from_mapping(payload)


def test_load_definitions_from_toml(tmp_path):
    path = tmp_path / "segments.toml"
    path.write_text(
        "[segments.step]\n"
        "start = '^Start\\s+(\\w+)'\n"
        "finish = '^Finish\\s+(\\w+)'\n"
    )
    (d,) = load_definitions(path)
    assert d.type_name == "step"
    assert d.is_start("Start x") == "x"
    assert d.is_finish("Finish x") == "x"


def test_load_definitions_requires_segments_table(tmp_path):
    path = tmp_path / "empty.toml"
    path.write_text("[other]\nkey = 1\n")
    with pytest.raises(InvalidSegmentDefinition):
        load_definitions(path)


def test_load_definitions_invalid_toml(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("[segments.step\n")
    with pytest.raises(InvalidSegmentDefinition):
        load_definitions(path)


def test_load_definitions_bad_pattern(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text("[segments.step]\nstart = 'no group'\nfinish = '(x)'\n")
    with pytest.raises(InvalidSegmentDefinition):
        load_definitions(path)
