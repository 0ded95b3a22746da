"""双拼方案表与 YAML 方案加载的测试集合。"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from src.translit.scheme import (
    BUILTIN_SCHEMES,
    XIAOHE,
    XIAOHE_ZERO_INITIALS,
    load_scheme,
    scheme_from_mapping,
)
from src.utils.errors import NonRetryableError, SchemeError

MINIMAL_SCHEME = """name: tiny
initials:
  n: n
  h: h
finals:
  i: i
  ao: k
zero_initials:
  ai: ai
"""


def test_xiaohe_is_builtin_and_complete() -> None:
    assert BUILTIN_SCHEMES["xiaohe"] is XIAOHE
    missing = XIAOHE.missing_entries()
    assert missing == {"initials": [], "finals": [], "zero_initials": []}


def test_adopted_table_entries() -> None:
    assert XIAOHE.finals["ao"] == "c"
    assert XIAOHE.finals["ing"] == "k"
    assert XIAOHE.finals["v"] == "v"
    assert XIAOHE.initials["zh"] == "v"
    assert XIAOHE.initials["ch"] == "i"
    assert XIAOHE.initials["sh"] == "u"
    assert XIAOHE_ZERO_INITIALS["ang"] == "ah"
    assert XIAOHE.zero_initials["hng"] == "hg"


def test_tables_are_read_only() -> None:
    with pytest.raises(TypeError):
        XIAOHE.finals["ao"] = "k"  # type: ignore[index]


def test_load_builtin_by_name_is_case_insensitive() -> None:
    assert load_scheme("XiaoHe") is XIAOHE


def test_load_scheme_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "tiny.yaml"
    path.write_text(MINIMAL_SCHEME, encoding="utf-8")
    scheme = load_scheme(str(path))
    assert scheme.name == "tiny"
    assert scheme.finals["ao"] == "k"
    assert "zh" in scheme.missing_entries()["initials"]


def test_scheme_name_defaults_to_file_stem(tmp_path: Path) -> None:
    path = tmp_path / "my-layout.yml"
    path.write_text(MINIMAL_SCHEME.replace("name: tiny\n", ""), encoding="utf-8")
    assert load_scheme(str(path)).name == "my-layout"


def test_invalid_scheme_reports_location() -> None:
    payload = {"initials": {"zh": "vv"}, "finals": {"a": "a"}, "zero_initials": {}}
    with pytest.raises(SchemeError) as exc:
        scheme_from_mapping(payload)
    assert "initials/zh" in str(exc.value)
    assert isinstance(exc.value, NonRetryableError)


def test_scheme_requires_all_tables() -> None:
    with pytest.raises(SchemeError):
        scheme_from_mapping({"initials": {"n": "n"}, "finals": {"i": "i"}})


def test_missing_or_broken_scheme_files(tmp_path: Path) -> None:
    with pytest.raises(SchemeError):
        load_scheme(str(tmp_path / "absent.yaml"))
    broken = tmp_path / "broken.yaml"
    broken.write_text("initials: [unclosed\n", encoding="utf-8")
    with pytest.raises(SchemeError):
        load_scheme(str(broken))
    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(SchemeError):
        load_scheme(str(listing))


def test_unknown_scheme_name() -> None:
    with pytest.raises(ValueError):
        load_scheme("ziranma")
