"""音节来源注册表、离线读音表与 pypinyin 后端的接口测试。"""
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from src.translit.sources import SOURCES, create_source
from src.translit.sources.base import ISyllableSource, PinyinStyle, unique_in_order
from src.translit.sources.table import TableSyllableSource, load_table_file, split_syllable
from src.utils.errors import SourceUnavailableError


def test_registry_contains_known_sources() -> None:
    assert set(SOURCES) == {"pypinyin", "table"}
    for cls in SOURCES.values():
        assert issubclass(cls, ISyllableSource)


def test_unknown_source_name() -> None:
    with pytest.raises(ValueError) as exc:
        create_source("opencc")
    assert "Available options" in str(exc.value)


def test_create_table_source_from_file(table_file: Path) -> None:
    source = create_source("table", table_file=str(table_file))
    assert isinstance(source, TableSyllableSource)
    assert source.pronunciations("行") == ["xing", "hang"]
    assert source.canonical("长") == "chang"


def test_missing_table_file(tmp_path: Path) -> None:
    with pytest.raises(SourceUnavailableError):
        load_table_file(str(tmp_path / "none.txt"))


def test_table_file_parsing(tmp_path: Path) -> None:
    path = tmp_path / "t.txt"
    path.write_text("# comment\n\n好: hao, hao4\n好: HAO\nbad line\n长城: chang\n", encoding="utf-8")
    entries = load_table_file(str(path))
    assert entries == {"好": ["hao", "hao4", "hao"]}
    source = TableSyllableSource(table_file=str(path), entries={"你": ["ni"]})
    assert len(source) == 2
    assert source.pronunciations("好") == ["hao", "hao4"]


@pytest.mark.parametrize(
    ("syllable", "expected"),
    [
        ("zhong", ("zh", "ong")),
        ("shi", ("sh", "i")),
        ("hao", ("h", "ao")),
        ("yi", ("y", "i")),
        ("ai", ("", "ai")),
        ("ng", ("n", "g")),
        ("n", ("", "n")),
    ],
)
def test_split_syllable(syllable: str, expected: tuple) -> None:
    assert split_syllable(syllable) == expected


def test_table_source_initials_finals_and_styles(table_source) -> None:
    assert table_source.initial("中") == "zh"
    assert table_source.final("中") == "ong"
    assert table_source.initial("猫") == ""
    assert table_source.final("猫") == ""
    assert table_source.canonical("猫") is None
    assert table_source.styled("你好猫", PinyinStyle.NORMAL) == ["ni", "hao", "猫"]
    assert table_source.styled("你好", PinyinStyle.FIRST_LETTER) == ["n", "h"]


def test_unique_in_order() -> None:
    assert unique_in_order(["a", "b", "", "a", "c"]) == ["a", "b", "c"]


def test_pypinyin_source_readings() -> None:
    pytest.importorskip("pypinyin")
    source = create_source("pypinyin")
    assert source.name == "pypinyin"
    assert source.canonical("你") == "ni"
    assert source.initial("好") == "h"
    assert source.final("好") == "ao"
    assert source.initial("一") == "y"  # 非严格模式下 y 视为声母。
    assert "hang" in source.pronunciations("行")
    assert source.pronunciations("a") == []
    assert source.styled("你好", PinyinStyle.NORMAL) == ["ni", "hao"]
    assert source.styled("你好", PinyinStyle.FIRST_LETTER) == ["n", "h"]


def test_pypinyin_missing_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "pypinyin", None)  # 模拟依赖未安装。
    with pytest.raises(SourceUnavailableError):
        create_source("pypinyin")
