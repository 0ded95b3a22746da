"""汉字片段切分测试：不重叠、可还原与标点合并开关。"""
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from src.translit.segment import CharClass, classify, find_han_runs, is_han, split_segments

LINES = [
    "",
    "hello world",
    "你好",
    "你好，world！",
    "Mixed 中文 and English",
    "ab你cd好ef",
    "〇々二〇二四年",
    "「引号」里的话。",
]


def test_is_han_and_classify() -> None:
    assert is_han("中")
    assert is_han("〇")
    assert is_han("\U00020000")  # 扩展 B。
    assert not is_han("a")
    assert not is_han("，")
    assert classify("中") is CharClass.HAN
    assert classify("，") is CharClass.PUNCT
    assert classify("!") is CharClass.OTHER
    assert classify("ａ") is CharClass.OTHER


@pytest.mark.parametrize("include_punct", [False, True])
@pytest.mark.parametrize("line", LINES)
def test_runs_do_not_overlap_and_segments_rebuild_line(line: str, include_punct: bool) -> None:
    runs = find_han_runs(line, include_punct=include_punct)
    for previous, current in zip(runs, runs[1:]):
        assert previous.end < current.start  # 片段极大，相邻片段之间必有间隙。
    for run in runs:
        assert line[run.start:run.end] == run.text
        assert run.text
    segments = split_segments(line, include_punct=include_punct)
    assert "".join(segment.text for segment in segments) == line


def test_runs_without_punctuation() -> None:
    runs = find_han_runs("你好，world！")
    assert [run.text for run in runs] == ["你好"]
    assert (runs[0].start, runs[0].end) == (0, 2)


def test_runs_with_punctuation() -> None:
    runs = find_han_runs("你好，world！", include_punct=True)
    assert [run.text for run in runs] == ["你好，", "！"]
    assert runs[0].has_han
    assert not runs[1].has_han


def test_split_segments_alternates_runs_and_gaps() -> None:
    segments = split_segments("ab你cd好ef")
    assert [(segment.text, segment.run) for segment in segments] == [
        ("ab", False),
        ("你", True),
        ("cd", False),
        ("好", True),
        ("ef", False),
    ]


def test_no_han_line_has_no_runs() -> None:
    assert find_han_runs("plain ascii") == []
    assert split_segments("") == []
