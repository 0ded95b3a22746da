"""基于字符分类器的汉字片段切分工具。"""  # 模块说明。
from __future__ import annotations  # 启用延迟求值的注解语义。

import enum  # 导入 enum 以定义字符类别。
from dataclasses import dataclass  # 导入 dataclass 描述片段结构。
from typing import List

# 可并入汉字片段的全角中文标点集合。
CJK_PUNCTUATION = frozenset("，。！？：；（）【】、《》〈〉「」『』…—～·")

# 汉字脚本覆盖的码位区间（闭区间）。
_HAN_RANGES = (
    (0x3400, 0x4DBF),  # CJK 扩展 A。
    (0x4E00, 0x9FFF),  # CJK 统一表意文字。
    (0xF900, 0xFAFF),  # CJK 兼容表意文字。
    (0x20000, 0x2A6DF),  # 扩展 B。
    (0x2A700, 0x2EBEF),  # 扩展 C-F。
    (0x2F800, 0x2FA1F),  # 兼容表意文字补充。
    (0x30000, 0x3134F),  # 扩展 G。
)
# 归入汉字脚本的零散表意符号：々 〇 〻。
_HAN_EXTRA = frozenset("々〇〻")


class CharClass(enum.Enum):
    """字符分类结果。"""

    HAN = "han"
    PUNCT = "punct"
    OTHER = "other"


@dataclass(frozen=True)
class HanRun:
    """行内一段极大连续的汉字（可含标点）片段，偏移量为字符下标。"""

    start: int  # 起始下标（含）。
    end: int  # 结束下标（不含）。
    text: str  # 片段文本。

    @property
    def has_han(self) -> bool:
        """片段中是否至少包含一个汉字。"""
        return any(is_han(char) for char in self.text)


@dataclass(frozen=True)
class Segment:
    """切分后的片段，run 为 True 表示汉字片段，否则为间隙文本。"""

    text: str
    run: bool


def is_han(char: str) -> bool:
    """判断单个字符是否属于汉字脚本。"""
    if char in _HAN_EXTRA:
        return True
    code = ord(char)
    for low, high in _HAN_RANGES:
        if low <= code <= high:
            return True
    return False


def classify(char: str) -> CharClass:
    """将字符映射到 HAN / PUNCT / OTHER 三类之一。"""
    if is_han(char):
        return CharClass.HAN
    if char in CJK_PUNCTUATION:
        return CharClass.PUNCT
    return CharClass.OTHER


def find_han_runs(line: str, include_punct: bool = False) -> List[HanRun]:
    """从左到右扫描一行，返回互不重叠的极大汉字片段列表。"""
    accepted = {CharClass.HAN, CharClass.PUNCT} if include_punct else {CharClass.HAN}
    runs: List[HanRun] = []
    start: int | None = None  # 当前片段起点，None 表示不在片段内。
    for index, char in enumerate(line):
        inside = classify(char) in accepted
        if inside and start is None:
            start = index
        elif not inside and start is not None:
            runs.append(HanRun(start, index, line[start:index]))
            start = None
    # 行尾仍处于片段内时补齐最后一段。
    if start is not None:
        runs.append(HanRun(start, len(line), line[start:]))
    return runs


def split_segments(line: str, include_punct: bool = False) -> List[Segment]:
    """返回按顺序交替出现的片段与间隙，拼接后可还原原始行。"""
    segments: List[Segment] = []
    cursor = 0
    for run in find_han_runs(line, include_punct=include_punct):
        if run.start > cursor:
            segments.append(Segment(line[cursor:run.start], run=False))
        segments.append(Segment(run.text, run=True))
        cursor = run.end
    if cursor < len(line):
        segments.append(Segment(line[cursor:], run=False))
    return segments
